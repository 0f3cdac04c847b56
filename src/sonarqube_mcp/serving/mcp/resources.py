"""Readable SonarQube resources exposed through the MCP catalog."""

from __future__ import annotations

import logging

import anyio

from sonarqube_mcp.serving.mcp.catalog import ResourceDescriptor
from sonarqube_mcp.serving.mcp.guides import DOCKER_SETUP_GUIDE, PYTHON_CONFIG_GUIDE
from sonarqube_mcp.serving.mcp.view_utils import render_json, utc_timestamp
from sonarqube_mcp.upstream.client import SonarQubeClient
from sonarqube_mcp.upstream.models import Project

LOG = logging.getLogger("sonarqube_mcp.serving.mcp.resources")


async def server_info(client: SonarQubeClient) -> str:
    status = await client.system_status()
    return render_json(status)


async def _project_metrics(client: SonarQubeClient, project: Project) -> dict[str, object]:
    """
    Fetch the overview metrics of one project, isolating its failures.

    Returns
    -------
    dict[str, object]
        Project payload with a ``metrics`` entry, or an error marker in its place.
    """
    try:
        quality = await client.get_code_quality_metrics(project.key)
        coverage = await client.get_code_coverage(project.key)
        gate = await client.get_quality_gate_status(project.key)
    except Exception as exc:  # noqa: BLE001 - one project must not abort the overview
        LOG.warning("Failed to fetch metrics for project %s: %s", project.key, exc)
        return {**project.to_payload(), "metrics": {"error": "Failed to fetch metrics"}}
    return {
        **project.to_payload(),
        "metrics": {
            "quality": quality.to_payload(),
            "coverage": coverage.to_payload(),
            "qualityGateStatus": gate.status if gate is not None else "UNKNOWN",
        },
    }


async def projects_overview(client: SonarQubeClient) -> str:
    """Render every project with its metrics; projects are fetched concurrently."""
    projects = await client.list_projects()
    rows: list[dict[str, object]] = [{} for _ in projects]

    async def _fill(index: int, project: Project) -> None:
        rows[index] = await _project_metrics(client, project)

    async with anyio.create_task_group() as tg:
        for index, project in enumerate(projects):
            tg.start_soon(_fill, index, project)

    return render_json(
        {
            "totalProjects": len(projects),
            "projects": rows,
            "generatedAt": utc_timestamp(),
        }
    )


async def quality_gates(client: SonarQubeClient) -> str:
    gates = await client.get_quality_gates()
    return render_json([gate.to_payload() for gate in gates])


async def python_config_guide(_client: SonarQubeClient) -> str:
    return PYTHON_CONFIG_GUIDE


async def docker_setup_guide(_client: SonarQubeClient) -> str:
    return DOCKER_SETUP_GUIDE


RESOURCES: tuple[ResourceDescriptor, ...] = (
    ResourceDescriptor(
        uri="sonarqube://server/info",
        name="SonarQube Server Information",
        description="Current SonarQube server status, version, and configuration",
        mime_type="application/json",
        handler=server_info,
    ),
    ResourceDescriptor(
        uri="sonarqube://projects/overview",
        name="Projects Overview",
        description="Overview of all projects in SonarQube with basic metrics",
        mime_type="application/json",
        handler=projects_overview,
    ),
    ResourceDescriptor(
        uri="sonarqube://quality-gates/list",
        name="Quality Gates",
        description="List of all configured quality gates",
        mime_type="application/json",
        handler=quality_gates,
    ),
    ResourceDescriptor(
        uri="sonarqube://config/python",
        name="Python Project Configuration",
        description="SonarQube configuration for Python projects",
        mime_type="text/plain",
        handler=python_config_guide,
    ),
    ResourceDescriptor(
        uri="sonarqube://setup/docker",
        name="Docker Setup Instructions",
        description="Instructions for setting up SonarQube with Docker",
        mime_type="text/markdown",
        handler=docker_setup_guide,
    ),
)

__all__ = ["RESOURCES"]
