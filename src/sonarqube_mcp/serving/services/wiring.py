"""Shared bridge wiring for the MCP stream and HTTP surfaces."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from sonarqube_mcp.config.serving_models import ServingConfig
from sonarqube_mcp.serving.mcp.catalog import Catalog, build_catalog
from sonarqube_mcp.serving.mcp.dispatch import DispatchBridge
from sonarqube_mcp.serving.observability import DispatchObservability
from sonarqube_mcp.upstream.client import SonarQubeClient

__all__ = ["BridgeResource", "build_bridge_resource"]


@dataclass
class BridgeResource:
    """Bundle of configuration, upstream client, dispatch bridge, and cleanup hook."""

    config: ServingConfig
    client: SonarQubeClient
    bridge: DispatchBridge
    close: Callable[[], Awaitable[None]]


def build_bridge_resource(
    cfg: ServingConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
    catalog: Catalog | None = None,
    observability: DispatchObservability | None = None,
) -> BridgeResource:
    """
    Construct the shared client and dispatch bridge with unified wiring.

    Parameters
    ----------
    cfg:
        Validated serving configuration.
    http_client:
        Optional pre-built HTTPX client; when supplied the caller keeps ownership.
    catalog:
        Optional catalog override; defaults to the built-in SonarQube catalog.
    observability:
        Optional dispatch logging configuration.

    Returns
    -------
    BridgeResource
        Client, bridge, and close hook suitable for server startup.
    """
    client = SonarQubeClient.from_config(cfg, client=http_client)
    bridge = DispatchBridge(
        catalog=catalog if catalog is not None else build_catalog(),
        client=client,
        observability=observability or DispatchObservability(),
    )
    return BridgeResource(config=cfg, client=client, bridge=bridge, close=client.aclose)
