"""Process runtime running the MCP stream, the HTTP surface, or both."""

from __future__ import annotations

import logging

import anyio
import uvicorn

from sonarqube_mcp.config.serving_models import ServingConfig
from sonarqube_mcp.serving.http.fastapi import create_app
from sonarqube_mcp.serving.mcp.server import create_mcp_server, run_stdio
from sonarqube_mcp.serving.services.wiring import BridgeResource, build_bridge_resource

LOG = logging.getLogger("sonarqube_mcp.serving.runtime")


def build_http_server(resource: BridgeResource) -> uvicorn.Server:
    """
    Build a uvicorn server for the debug surface over an existing bridge.

    Returns
    -------
    uvicorn.Server
        Server bound to the configured host and port.
    """
    cfg = resource.config
    app = create_app(resource=resource)
    # log_config=None keeps the process-wide logging setup from the CLI.
    return uvicorn.Server(
        uvicorn.Config(app, host=cfg.http_host, port=cfg.http_port, log_config=None)
    )


async def serve(cfg: ServingConfig, *, resource: BridgeResource | None = None) -> None:
    """
    Run the transports selected by ``cfg.mode`` over one shared bridge.

    In ``both`` mode the HTTP server is asked to exit once the stdio session
    ends, so the process terminates with its MCP client.

    Parameters
    ----------
    cfg:
        Validated serving configuration.
    resource:
        Optional pre-built bridge resource; when omitted one is built and closed here.
    """
    owned = resource is None
    active = resource if resource is not None else build_bridge_resource(cfg)
    LOG.info(
        "Starting SonarQube MCP server mode=%s url=%s auth=%s",
        cfg.mode,
        cfg.sonarqube_url,
        cfg.auth_method,
    )
    try:
        async with anyio.create_task_group() as tg:
            http_server: uvicorn.Server | None = None
            if cfg.mode in ("http", "both"):
                http_server = build_http_server(active)
                LOG.info("HTTP server listening on %s:%s", cfg.http_host, cfg.http_port)
                tg.start_soon(http_server.serve)
            if cfg.mode in ("stdio", "both"):
                await run_stdio(create_mcp_server(active.bridge))
                if http_server is not None:
                    http_server.should_exit = True
    finally:
        if owned:
            await active.close()


__all__ = ["build_http_server", "serve"]
