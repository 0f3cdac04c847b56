"""Expose a SonarQube server to MCP clients and an HTTP debug surface."""

from __future__ import annotations

SERVER_NAME = "sonarqube-mcp-server"
__version__ = "0.1.0"

__all__ = ["SERVER_NAME", "__version__"]
