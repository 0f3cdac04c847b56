"""Configuration models for the SonarQube MCP bridge."""

from sonarqube_mcp.config.serving_models import AuthMethod, ServingConfig, ServingMode

__all__ = ["AuthMethod", "ServingConfig", "ServingMode"]
