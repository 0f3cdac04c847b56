"""Shared application services for the SonarQube MCP surfaces."""

from __future__ import annotations

from sonarqube_mcp.serving.services.wiring import BridgeResource, build_bridge_resource

__all__ = ["BridgeResource", "build_bridge_resource"]
