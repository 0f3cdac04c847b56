"""SonarQube operations exposed through the MCP catalog."""

from __future__ import annotations

from sonarqube_mcp.serving.mcp.catalog import OperationDescriptor
from sonarqube_mcp.serving.mcp.models import (
    AnalysisHistoryArgs,
    NoArgs,
    ProjectIssuesArgs,
    ProjectKeyArgs,
    ProjectReportArgs,
)
from sonarqube_mcp.serving.mcp.report import generate_project_report
from sonarqube_mcp.serving.mcp.view_utils import utc_timestamp
from sonarqube_mcp.upstream.client import SonarQubeClient


async def get_system_status(_args: NoArgs, client: SonarQubeClient) -> object:
    status = await client.system_status()
    return status.to_payload()


async def list_projects(_args: NoArgs, client: SonarQubeClient) -> object:
    projects = await client.list_projects()
    return [project.to_payload() for project in projects]


async def get_project(args: ProjectKeyArgs, client: SonarQubeClient) -> object:
    project = await client.get_project(args.project_key)
    if project is None:
        return f'Project "{args.project_key}" not found'
    return project.to_payload()


async def get_project_issues(args: ProjectIssuesArgs, client: SonarQubeClient) -> object:
    issues = await client.get_issues(args.project_key, args.to_filters())
    return {
        "projectKey": args.project_key,
        "totalIssues": len(issues),
        "issues": [issue.to_payload() for issue in issues],
    }


async def get_quality_gate_status(args: ProjectKeyArgs, client: SonarQubeClient) -> object:
    status = await client.get_quality_gate_status(args.project_key)
    if status is None:
        return f'No quality gate status found for project "{args.project_key}"'
    return status.to_payload()


async def get_code_coverage(args: ProjectKeyArgs, client: SonarQubeClient) -> object:
    coverage = await client.get_code_coverage(args.project_key)
    return {"projectKey": args.project_key, "coverage": coverage.to_payload()}


async def get_code_quality_metrics(args: ProjectKeyArgs, client: SonarQubeClient) -> object:
    metrics = await client.get_code_quality_metrics(args.project_key)
    return {"projectKey": args.project_key, "qualityMetrics": metrics.to_payload()}


async def get_analysis_history(args: AnalysisHistoryArgs, client: SonarQubeClient) -> object:
    history = await client.get_analysis_history(args.project_key, args.page_size)
    return {
        "projectKey": args.project_key,
        "analysisHistory": [record.to_payload() for record in history],
    }


async def health_check(_args: NoArgs, client: SonarQubeClient) -> object:
    """Report connectivity using the consolidated health probe."""
    probe = await client.health_check()
    return {
        "healthy": probe.healthy,
        **probe.to_payload(),
        "timestamp": utc_timestamp(),
    }


OPERATIONS: tuple[OperationDescriptor, ...] = (
    OperationDescriptor(
        name="get_system_status",
        description="Get SonarQube server status and version information",
        input_model=NoArgs,
        handler=get_system_status,
    ),
    OperationDescriptor(
        name="list_projects",
        description="List all projects in SonarQube",
        input_model=NoArgs,
        handler=list_projects,
    ),
    OperationDescriptor(
        name="get_project",
        description="Get detailed information about a specific project",
        input_model=ProjectKeyArgs,
        handler=get_project,
    ),
    OperationDescriptor(
        name="get_project_issues",
        description="Get issues for a specific project with optional filtering",
        input_model=ProjectIssuesArgs,
        handler=get_project_issues,
    ),
    OperationDescriptor(
        name="get_quality_gate_status",
        description="Get quality gate status for a project",
        input_model=ProjectKeyArgs,
        handler=get_quality_gate_status,
    ),
    OperationDescriptor(
        name="get_code_coverage",
        description="Get code coverage metrics for a project",
        input_model=ProjectKeyArgs,
        handler=get_code_coverage,
    ),
    OperationDescriptor(
        name="get_code_quality_metrics",
        description=(
            "Get code quality metrics for a project (bugs, vulnerabilities, code smells, etc.)"
        ),
        input_model=ProjectKeyArgs,
        handler=get_code_quality_metrics,
    ),
    OperationDescriptor(
        name="get_analysis_history",
        description="Get analysis history for a project",
        input_model=AnalysisHistoryArgs,
        handler=get_analysis_history,
    ),
    OperationDescriptor(
        name="health_check",
        description="Check if SonarQube server is healthy and accessible",
        input_model=NoArgs,
        handler=health_check,
    ),
    OperationDescriptor(
        name="generate_project_report",
        description=(
            "Generate a comprehensive report for a project including quality metrics, "
            "issues summary, and coverage"
        ),
        input_model=ProjectReportArgs,
        handler=generate_project_report,
    ),
)

__all__ = ["OPERATIONS"]
