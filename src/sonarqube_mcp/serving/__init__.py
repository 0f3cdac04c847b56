"""Serving surfaces exposing SonarQube via the MCP protocol and a FastAPI debug API."""

from sonarqube_mcp.serving.mcp.dispatch import DispatchBridge
from sonarqube_mcp.serving.services.wiring import BridgeResource, build_bridge_resource

__all__ = [
    "BridgeResource",
    "DispatchBridge",
    "build_bridge_resource",
]
