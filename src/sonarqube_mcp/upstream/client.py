"""Async HTTP client for the SonarQube Web API."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx

from sonarqube_mcp.config.serving_models import ServingConfig
from sonarqube_mcp.upstream.errors import UpstreamError, UpstreamUnreachable
from sonarqube_mcp.upstream.models import (
    COVERAGE_FIELDS,
    QUALITY_FIELDS,
    AnalysisRecord,
    CoverageMetrics,
    HealthProbe,
    Issue,
    IssueFilters,
    Metric,
    Project,
    QualityGate,
    QualityGateStatus,
    QualityMetrics,
    SystemStatus,
    reshape_metrics,
)

HTTP_ERROR_STATUS = 400
DEFAULT_TIMEOUT_SECONDS = 30.0
LOG = logging.getLogger("sonarqube_mcp.upstream.client")


def resolve_auth(username: str, password: str | None, token: str | None) -> httpx.BasicAuth:
    """
    Select the credential sent upstream.

    A token is sent alone as the basic-auth username with an empty password;
    otherwise username and password are used.

    Returns
    -------
    httpx.BasicAuth
        Authentication applied to every request.
    """
    if token:
        return httpx.BasicAuth(username=token, password="")
    return httpx.BasicAuth(username=username, password=password or "")


@dataclass
class SonarQubeClient:
    """Typed facade over the SonarQube Web API."""

    base_url: str
    auth: httpx.BasicAuth
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    client: httpx.AsyncClient | None = None
    _owns_client: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        """Create the shared HTTPX client when none was injected."""
        if self.client is None:
            self.client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
            self._owns_client = True

    @classmethod
    def from_config(
        cls, cfg: ServingConfig, *, client: httpx.AsyncClient | None = None
    ) -> SonarQubeClient:
        """
        Build a client from serving configuration.

        Parameters
        ----------
        cfg:
            Validated serving configuration.
        client:
            Optional pre-built HTTPX client (used by tests and embedders).

        Returns
        -------
        SonarQubeClient
            Client bound to the configured server and credentials.
        """
        return cls(
            base_url=cfg.sonarqube_url,
            auth=resolve_auth(cfg.username, cfg.password, cfg.token),
            timeout=cfg.timeout_seconds,
            client=client,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client when this instance created it."""
        if self._owns_client and self.client is not None:
            await self.client.aclose()

    async def _get_json(
        self, path: str, params: Mapping[str, object] | None = None
    ) -> dict[str, Any]:
        if self.client is None:
            message = "HTTP client is not initialized"
            raise UpstreamError(message)
        query = {k: str(v) for k, v in (params or {}).items() if v is not None}
        try:
            response = await self.client.get(
                path,
                params=query,
                auth=self.auth,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as exc:
            message = f"Request to {path} timed out after {self.timeout}s"
            raise UpstreamUnreachable(message) from exc
        except httpx.TransportError as exc:
            message = f"Request to {path} failed: {exc}"
            raise UpstreamUnreachable(message) from exc
        if response.status_code >= HTTP_ERROR_STATUS:
            message = f"Request to {path} failed with status code {response.status_code}"
            LOG.debug("%s body=%s", message, response.text[:500])
            raise UpstreamError(message, status_code=response.status_code)
        try:
            payload = response.json()
        except ValueError as exc:
            message = f"Response from {path} is not valid JSON"
            raise UpstreamError(message, status_code=response.status_code) from exc
        if not isinstance(payload, dict):
            message = f"Response from {path} is not a JSON object"
            raise UpstreamError(message, status_code=response.status_code)
        return payload

    async def system_status(self) -> SystemStatus:
        """
        Return the server status, version, and id.

        Returns
        -------
        SystemStatus
            Parsed status payload.
        """
        data = await self._get_json("/api/system/status")
        return SystemStatus.model_validate(data)

    async def health_check(self) -> HealthProbe:
        """
        Probe server connectivity without raising.

        Returns
        -------
        HealthProbe
            ``accessible=True`` with the reported status, or ``DOWN`` with the error.
        """
        try:
            data = await self._get_json("/api/system/status")
        except Exception as exc:  # noqa: BLE001 - the probe reports, never raises
            LOG.warning("SonarQube health probe failed: %s", exc)
            return HealthProbe(status="DOWN", accessible=False, error=str(exc) or type(exc).__name__)
        status = data.get("status")
        return HealthProbe(status=str(status) if status else "UNKNOWN", accessible=True)

    async def list_projects(self) -> list[Project]:
        """
        List all projects visible to the configured credentials.

        Returns
        -------
        list[Project]
            Projects, empty when the server returns no components.
        """
        data = await self._get_json("/api/projects/search")
        return [Project.model_validate(row) for row in data.get("components") or []]

    async def get_project(self, project_key: str) -> Project | None:
        """
        Fetch a single project.

        Returns
        -------
        Project | None
            The project, or ``None`` when the server reports it does not exist.

        Raises
        ------
        UpstreamError
            For any failure other than a 404.
        """
        try:
            data = await self._get_json("/api/projects/search", {"projects": project_key})
        except UpstreamError as exc:
            if exc.is_not_found:
                return None
            raise
        components = data.get("components") or []
        if not components:
            return None
        return Project.model_validate(components[0])

    async def get_issues(
        self, project_key: str, filters: IssueFilters | None = None
    ) -> list[Issue]:
        """
        Search issues of a project; all filters are conjunctive.

        Returns
        -------
        list[Issue]
            Matching issues in upstream order.
        """
        params: dict[str, object] = {"componentKeys": project_key}
        params.update((filters or IssueFilters()).to_params())
        data = await self._get_json("/api/issues/search", params)
        return [Issue.model_validate(row) for row in data.get("issues") or []]

    async def get_project_metrics(
        self, project_key: str, metric_names: Sequence[str]
    ) -> list[Metric]:
        """
        Fetch the named measures of a project.

        Returns
        -------
        list[Metric]
            Raw measures, each tagged with the component key.
        """
        data = await self._get_json(
            "/api/measures/component",
            {"component": project_key, "metricKeys": ",".join(metric_names)},
        )
        component = data.get("component") or {}
        component_key = component.get("key") or project_key
        return [
            Metric.model_validate({"component": component_key, **row})
            for row in component.get("measures") or []
        ]

    async def get_code_coverage(self, project_key: str) -> CoverageMetrics:
        """Return the coverage group for a project."""
        measures = await self.get_project_metrics(project_key, list(COVERAGE_FIELDS))
        return CoverageMetrics.model_validate(reshape_metrics(measures, COVERAGE_FIELDS))

    async def get_code_quality_metrics(self, project_key: str) -> QualityMetrics:
        """Return the quality group (bugs, smells, ratings...) for a project."""
        measures = await self.get_project_metrics(project_key, list(QUALITY_FIELDS))
        return QualityMetrics.model_validate(reshape_metrics(measures, QUALITY_FIELDS))

    async def get_quality_gates(self) -> list[QualityGate]:
        """List configured quality gates."""
        data = await self._get_json("/api/qualitygates/list")
        return [QualityGate.model_validate(row) for row in data.get("qualitygates") or []]

    async def get_quality_gate_status(self, project_key: str) -> QualityGateStatus | None:
        """
        Fetch the quality gate evaluation of a project.

        Returns
        -------
        QualityGateStatus | None
            The status, or ``None`` when the project or its status is unknown upstream.

        Raises
        ------
        UpstreamError
            For any failure other than a 404.
        """
        try:
            data = await self._get_json(
                "/api/qualitygates/project_status", {"projectKey": project_key}
            )
        except UpstreamError as exc:
            if exc.is_not_found:
                return None
            raise
        status = data.get("projectStatus")
        if not status:
            return None
        return QualityGateStatus.model_validate(status)

    async def get_analysis_history(
        self, project_key: str, page_size: int = 10
    ) -> list[AnalysisRecord]:
        """Return the most recent analyses, in upstream (newest-first) order."""
        data = await self._get_json(
            "/api/project_analyses/search",
            {"project": project_key, "ps": page_size},
        )
        return [AnalysisRecord.model_validate(row) for row in data.get("analyses") or []]


__all__ = ["DEFAULT_TIMEOUT_SECONDS", "SonarQubeClient", "resolve_auth"]
