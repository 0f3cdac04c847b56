"""SonarQube Web API client and entity models."""

from __future__ import annotations

from sonarqube_mcp.upstream.client import SonarQubeClient, resolve_auth
from sonarqube_mcp.upstream.errors import UpstreamError, UpstreamUnreachable

__all__ = ["SonarQubeClient", "UpstreamError", "UpstreamUnreachable", "resolve_auth"]
