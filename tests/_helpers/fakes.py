"""In-memory SonarQube Web API served through ``httpx.MockTransport``."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import httpx

from sonarqube_mcp.config.serving_models import ServingConfig
from sonarqube_mcp.serving.mcp.catalog import build_catalog
from sonarqube_mcp.serving.mcp.dispatch import DispatchBridge
from sonarqube_mcp.serving.services.wiring import BridgeResource, build_bridge_resource
from sonarqube_mcp.upstream.client import SonarQubeClient

BASE_URL = "http://sonar.test"

Route = Callable[[httpx.Request], httpx.Response]

PROJECTS: list[dict[str, object]] = [
    {
        "key": "demo",
        "name": "Demo",
        "qualifier": "TRK",
        "lastAnalysisDate": "2024-05-01T10:00:00+0000",
        "revision": "abc123",
        "visibility": "public",
    },
    {"key": "other", "name": "Other", "qualifier": "TRK"},
]

MEASURES: dict[str, dict[str, str]] = {
    "demo": {
        "line_coverage": "81.5",
        "branch_coverage": "70.0",
        "uncovered_lines": "12",
        "bugs": "3",
        "code_smells": "40",
        "vulnerabilities": "1",
        "sqale_rating": "1.0",
        "ncloc": "1000",
    },
    "other": {"bugs": "0", "code_smells": "2"},
}

ISSUES: dict[str, list[dict[str, object]]] = {
    "demo": [
        {
            "key": f"I{index}",
            "rule": "python:S1192",
            "severity": "MAJOR" if index % 2 else "MINOR",
            "component": "demo:src/app.py",
            "project": "demo",
            "line": index + 1,
            "message": f"Issue {index}",
            "status": "OPEN",
            "type": "CODE_SMELL" if index < 12 else "BUG",
        }
        for index in range(15)
    ],
    "other": [],
}

GATE_STATUS: dict[str, dict[str, object]] = {
    "demo": {
        "status": "OK",
        "conditions": [
            {
                "status": "OK",
                "metricKey": "new_coverage",
                "comparator": "LT",
                "errorThreshold": "80",
                "actualValue": "85.0",
            }
        ],
    },
}

ANALYSES: list[dict[str, object]] = [
    {"key": "A2", "date": "2024-05-01T10:00:00+0000", "projectVersion": "1.1", "events": []},
    {"key": "A1", "date": "2024-04-01T10:00:00+0000", "projectVersion": "1.0", "events": []},
]


def _json(status_code: int, payload: object) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


def _system_status(_request: httpx.Request) -> httpx.Response:
    return _json(200, {"status": "UP", "version": "10.4.1", "id": "server-1"})


def _projects(request: httpx.Request) -> httpx.Response:
    wanted = request.url.params.get("projects")
    rows = [row for row in PROJECTS if wanted is None or row["key"] == wanted]
    return _json(200, {"paging": {"pageIndex": 1, "total": len(rows)}, "components": rows})


def _measures(request: httpx.Request) -> httpx.Response:
    key = request.url.params["component"]
    if key not in MEASURES:
        return _json(404, {"errors": [{"msg": f"Component key '{key}' not found"}]})
    wanted = request.url.params["metricKeys"].split(",")
    measures = [
        {"metric": metric, "value": value}
        for metric, value in MEASURES[key].items()
        if metric in wanted
    ]
    return _json(200, {"component": {"key": key, "measures": measures}})


def _issues(request: httpx.Request) -> httpx.Response:
    params = request.url.params
    key = params["componentKeys"]
    page_size = int(params.get("ps", "100"))
    rows = ISSUES.get(key, [])
    for param, column in (("severities", "severity"), ("types", "type"), ("statuses", "status")):
        if param in params:
            allowed = params[param].split(",")
            rows = [row for row in rows if row[column] in allowed]
    rows = rows[:page_size]
    return _json(200, {"total": len(rows), "issues": rows})


def _gate_status(request: httpx.Request) -> httpx.Response:
    key = request.url.params["projectKey"]
    status = GATE_STATUS.get(key)
    if status is None:
        return _json(404, {"errors": [{"msg": f"Project '{key}' not found"}]})
    return _json(200, {"projectStatus": status})


def _quality_gates(_request: httpx.Request) -> httpx.Response:
    return _json(
        200,
        {"qualitygates": [{"id": "1", "name": "Sonar way", "isDefault": True, "isBuiltIn": True}]},
    )


def _analyses(request: httpx.Request) -> httpx.Response:
    page_size = int(request.url.params.get("ps", "10"))
    return _json(200, {"analyses": ANALYSES[:page_size]})


def default_routes() -> dict[str, Route]:
    """
    Routes describing a small SonarQube instance with two projects.

    Returns
    -------
    dict[str, Route]
        Path to responder mapping.
    """
    return {
        "/api/system/status": _system_status,
        "/api/projects/search": _projects,
        "/api/measures/component": _measures,
        "/api/issues/search": _issues,
        "/api/qualitygates/project_status": _gate_status,
        "/api/qualitygates/list": _quality_gates,
        "/api/project_analyses/search": _analyses,
    }


def status_route(status_code: int, payload: object | None = None) -> Route:
    """Responder that always answers with a fixed status."""

    def _route(_request: httpx.Request) -> httpx.Response:
        return _json(status_code, payload if payload is not None else {"errors": []})

    return _route


def failing_route(exc: Exception) -> Route:
    """Responder that raises a transport-level error."""

    def _route(_request: httpx.Request) -> httpx.Response:
        raise exc

    return _route


@dataclass
class FakeSonarQube:
    """Fake SonarQube server recording every request it receives."""

    routes: dict[str, Route] = field(default_factory=default_routes)
    calls: list[httpx.Request] = field(default_factory=list)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        """Answer one request from the route table."""
        self.calls.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return _json(404, {"errors": [{"msg": "Unknown url"}]})
        return route(request)

    def paths(self) -> list[str]:
        """Request paths in arrival order."""
        return [request.url.path for request in self.calls]

    def http_client(self) -> httpx.AsyncClient:
        """HTTPX client routed to this fake."""
        return httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(self))

    def client(self, *, token: str | None = None) -> SonarQubeClient:
        """Upstream client wired to this fake."""
        return SonarQubeClient.from_config(make_config(token=token), client=self.http_client())

    def bridge(self) -> DispatchBridge:
        """Dispatch bridge over the real catalog and this fake."""
        return DispatchBridge(catalog=build_catalog(), client=self.client())

    def resource(self) -> BridgeResource:
        """Bridge resource over this fake, as the servers build it."""
        return build_bridge_resource(make_config(), http_client=self.http_client())


def make_config(*, token: str | None = None, **overrides: object) -> ServingConfig:
    """
    Build a valid configuration pointing at the fake server.

    Returns
    -------
    ServingConfig
        Configuration with basic credentials unless a token is supplied.
    """
    values: dict[str, object] = {
        "sonarqube_url": BASE_URL,
        "username": "admin",
        "password": "secret",
        "token": token,
    }
    values.update(overrides)
    return ServingConfig.model_validate(values)
