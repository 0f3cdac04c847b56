"""FastAPI debug and health surface sharing the MCP dispatch bridge."""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from sonarqube_mcp import SERVER_NAME, __version__
from sonarqube_mcp.config.serving_models import ServingConfig
from sonarqube_mcp.serving.mcp import errors
from sonarqube_mcp.serving.mcp.dispatch import DispatchBridge
from sonarqube_mcp.serving.mcp.models import (
    OperationResult,
    ProblemDetail,
    ResourceReadResult,
)
from sonarqube_mcp.serving.services.wiring import BridgeResource, build_bridge_resource
from sonarqube_mcp.upstream.client import SonarQubeClient
from sonarqube_mcp.upstream.errors import UpstreamError

LOG = logging.getLogger("sonarqube_mcp.serving.http.fastapi")

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def problem_response(detail: ProblemDetail) -> JSONResponse:
    """
    Convert a ProblemDetail payload into a JSON HTTP response.

    The body carries the protocol ``code`` and a ``message`` alongside the
    Problem Detail fields so HTTP clients see the same envelope MCP clients do.

    Parameters
    ----------
    detail:
        Problem detail instance to serialize.

    Returns
    -------
    JSONResponse
        Response with the problem payload.
    """
    status_code = detail.status or status.HTTP_500_INTERNAL_SERVER_ERROR
    payload = detail.model_dump(exclude_none=True)
    payload.setdefault("status", status_code)
    payload["message"] = detail.detail or detail.title
    return JSONResponse(status_code=status_code, content=payload)


def install_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers for consistent error payloads."""

    @app.exception_handler(errors.DispatchError)
    def _handle_dispatch_error(
        _request: Request,
        exc: errors.DispatchError,
    ) -> JSONResponse:
        return problem_response(exc.detail)

    @app.exception_handler(RequestValidationError)
    def _handle_validation_error(
        _request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        problem = ProblemDetail(
            type="https://sonarqube-mcp.dev/problems/invalid-input",
            title="Invalid request",
            detail="Request validation failed",
            status=status.HTTP_400_BAD_REQUEST,
            code=errors.INVALID_PARAMS,
            data={"errors": exc.errors()},
        )
        return problem_response(problem)

    @app.exception_handler(StarletteHTTPException)
    def _handle_http_error(
        _request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return JSONResponse(status_code=exc.status_code, content={"error": "Not found"})
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(Exception)
    def _handle_unexpected(
        _request: Request,
        exc: Exception,
    ) -> JSONResponse:
        problem = ProblemDetail(
            type="https://sonarqube-mcp.dev/problems/internal-error",
            title="Internal error",
            detail=str(exc),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code=errors.INTERNAL_ERROR,
        )
        # Rendered by the outermost error middleware, past the CORS middleware.
        response = problem_response(problem)
        response.headers.update(CORS_HEADERS)
        return response


def install_logging_middleware(app: FastAPI) -> None:
    """Add structured logging for each request."""

    @app.middleware("http")
    async def _log_request(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        LOG.info(
            "Handled %s %s status=%s duration_ms=%.2f params=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            dict(request.query_params),
        )
        return response


def install_cors_middleware(app: FastAPI) -> None:
    """Answer every ``OPTIONS`` request with 200 and stamp CORS headers on all responses."""

    @app.middleware("http")
    async def _cors(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.method == "OPTIONS":
            response: Response = Response(status_code=status.HTTP_200_OK)
        else:
            response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response


def get_app_config(request: Request) -> ServingConfig:
    """
    Retrieve the validated application configuration from state.

    Returns
    -------
    ServingConfig
        Loaded application configuration.

    Raises
    ------
    RuntimeError
        If the configuration is missing.
    """
    config: ServingConfig | None = getattr(request.app.state, "config", None)
    if config is None:
        message = "Server configuration is not initialized"
        raise RuntimeError(message)
    return config


def get_bridge(request: Request) -> DispatchBridge:
    """
    Retrieve the shared dispatch bridge from state.

    Returns
    -------
    DispatchBridge
        Bridge shared with the MCP stream.

    Raises
    ------
    RuntimeError
        If the bridge is missing.
    """
    bridge: DispatchBridge | None = getattr(request.app.state, "bridge", None)
    if bridge is None:
        message = "Dispatch bridge is not initialized"
        raise RuntimeError(message)
    return bridge


def get_client(request: Request) -> SonarQubeClient:
    """Return the upstream client behind the shared bridge."""
    return get_bridge(request).client


ConfigDep = Annotated[ServingConfig, Depends(get_app_config)]
BridgeDep = Annotated[DispatchBridge, Depends(get_bridge)]
ClientDep = Annotated[SonarQubeClient, Depends(get_client)]


def build_index_router() -> APIRouter:
    """
    Construct the router for the server identity and health endpoints.

    Returns
    -------
    APIRouter
        Router exposing ``/`` and ``/health``.
    """
    router = APIRouter()

    @router.get("/", summary="Server identity and endpoint index")
    def index() -> dict[str, object]:
        return {
            "name": SERVER_NAME,
            "version": __version__,
            "description": "MCP server for SonarQube code quality analysis",
            "endpoints": {
                "health": "/health",
                "tools": "/tools",
                "resources": "/resources",
                "projects": "/projects",
                "callTool": "/tools/{name}",
                "readResource": "/resources/read?uri=...",
            },
        }

    @router.get("/health", summary="Health check for the bridge and SonarQube")
    async def health(*, client: ClientDep, config: ConfigDep) -> dict[str, object]:
        """
        Report bridge health and upstream reachability.

        Returns
        -------
        dict[str, object]
            Health payload; ``config`` excludes credentials.
        """
        probe = await client.health_check()
        return {
            "status": "ok",
            "mcp_server": "running",
            "sonarqube": probe.to_payload(),
            "config": config.public_summary(),
        }

    return router


def build_catalog_router() -> APIRouter:
    """
    Construct the router for catalog listing and invocation endpoints.

    Returns
    -------
    APIRouter
        Router exposing tool and resource endpoints.
    """
    router = APIRouter()

    @router.get("/tools", summary="List operations")
    def list_tools(*, bridge: BridgeDep) -> dict[str, object]:
        tools = [op.model_dump(by_alias=True) for op in bridge.list_operations()]
        return {"total": len(tools), "tools": tools}

    @router.post("/tools/{name}", summary="Invoke an operation")
    async def call_tool(
        name: str,
        *,
        bridge: BridgeDep,
        arguments: Annotated[dict[str, Any] | None, Body()] = None,
    ) -> OperationResult:
        """
        Invoke a named operation through the shared dispatch bridge.

        Returns
        -------
        OperationResult
            Text envelope produced by the operation.
        """
        return await bridge.invoke(name, arguments, transport="http")

    @router.get("/resources", summary="List resources")
    def list_resources(*, bridge: BridgeDep) -> dict[str, object]:
        resources = [res.model_dump(by_alias=True) for res in bridge.list_resources()]
        return {"total": len(resources), "resources": resources}

    @router.get("/resources/read", summary="Read a resource")
    async def read_resource(*, bridge: BridgeDep, uri: str) -> ResourceReadResult:
        return await bridge.read(uri, transport="http")

    return router


def build_projects_router() -> APIRouter:
    """
    Construct the router exposing the upstream project listing.

    Returns
    -------
    APIRouter
        Router exposing ``/projects``.
    """
    router = APIRouter()

    @router.get("/projects", summary="List SonarQube projects", response_model=None)
    async def list_projects(*, client: ClientDep) -> dict[str, object] | JSONResponse:
        try:
            projects = await client.list_projects()
        except (UpstreamError, ValidationError) as exc:
            LOG.warning("Failed to fetch projects: %s", exc)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Failed to fetch projects", "message": str(exc)},
            )
        return {
            "total": len(projects),
            "projects": [project.to_payload() for project in projects],
        }

    return router


def register_routes(app: FastAPI) -> None:
    """Wire all API routes onto the provided FastAPI application."""
    app.include_router(build_index_router())
    app.include_router(build_catalog_router())
    app.include_router(build_projects_router())


def create_app(
    *,
    config_loader: Callable[[], ServingConfig] = ServingConfig.from_env,
    resource_factory: Callable[[ServingConfig], BridgeResource] = build_bridge_resource,
    resource: BridgeResource | None = None,
) -> FastAPI:
    """
    Build the FastAPI application with configured lifecycle and routes.

    Parameters
    ----------
    config_loader:
        Factory for loading application configuration.
    resource_factory:
        Factory that yields the shared bridge resource for the configuration.
    resource:
        Pre-built bridge resource shared with the MCP stream. When supplied, the
        app neither loads configuration nor closes the resource on shutdown.

    Returns
    -------
    FastAPI
        Configured FastAPI instance.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = resource is None
        active = resource if resource is not None else resource_factory(config_loader())
        app.state.config = active.config
        app.state.bridge = active.bridge
        try:
            yield
        finally:
            if owned:
                await active.close()

    app = FastAPI(
        title="SonarQube MCP Server",
        description="Debug and health surface for the SonarQube MCP bridge.",
        version=__version__,
        lifespan=lifespan,
    )

    install_exception_handlers(app)
    install_logging_middleware(app)
    install_cors_middleware(app)
    register_routes(app)
    return app


app = create_app()
