"""Shared serving configuration for the MCP stream and the HTTP debug surface."""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, Field, model_validator

ServingMode = Literal["stdio", "http", "both"]
AuthMethod = Literal["token", "basic"]

_MODES: frozenset[str] = frozenset({"stdio", "http", "both"})
_MAX_PORT = 65535


def _env_or_none(name: str) -> str | None:
    """
    Read an environment variable, treating empty strings as unset.

    Returns
    -------
    str | None
        Stripped value or ``None`` when missing or blank.
    """
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


class ServingConfig(BaseModel):
    """
    Runtime settings shared by the MCP stream and the FastAPI debug surface.

    Credentials follow an either/or policy: a token, when present, is the only
    credential sent upstream; otherwise username and password are used and the
    password is mandatory.
    """

    sonarqube_url: str = Field(
        default="http://localhost:9000",
        description="Base URL of the SonarQube server.",
    )
    username: str = Field(
        default="admin",
        description="SonarQube login used when no token is configured.",
    )
    password: str | None = Field(
        default=None,
        description="SonarQube password (required when token is not set).",
    )
    token: str | None = Field(
        default=None,
        description="SonarQube user token; overrides username/password when present.",
    )
    timeout_seconds: float = Field(
        default=30.0,
        description="Timeout in seconds applied to every upstream call.",
    )
    mode: ServingMode = Field(
        default="stdio",
        description="Transports to run: 'stdio', 'http', or 'both'.",
    )
    http_host: str = Field(
        default="0.0.0.0",  # noqa: S104
        description="Bind address for the HTTP debug surface.",
    )
    http_port: int = Field(
        default=8080,
        description="Port for the HTTP debug surface.",
    )

    @classmethod
    def from_env(cls) -> ServingConfig:
        """
        Construct a ServingConfig from environment variables.

        Returns
        -------
        ServingConfig
            Validated configuration populated from environment values.

        Raises
        ------
        ValueError
            If the serving mode is not one of the supported values.
        """
        mode_env = (_env_or_none("SONARQUBE_MCP_MODE") or "stdio").lower()
        if mode_env not in _MODES:
            message = f"Unsupported SONARQUBE_MCP_MODE: {mode_env}"
            raise ValueError(message)

        return cls(
            sonarqube_url=_env_or_none("SONARQUBE_URL") or "http://localhost:9000",
            username=_env_or_none("SONARQUBE_USERNAME") or "admin",
            password=_env_or_none("SONARQUBE_PASSWORD"),
            token=_env_or_none("SONARQUBE_TOKEN"),
            timeout_seconds=float(_env_or_none("SONARQUBE_TIMEOUT_SEC") or "30.0"),
            mode=mode_env,  # type: ignore[arg-type]
            http_host=_env_or_none("SONARQUBE_MCP_HTTP_HOST") or "0.0.0.0",  # noqa: S104
            http_port=int(_env_or_none("SONARQUBE_MCP_HTTP_PORT") or "8080"),
        )

    @model_validator(mode="after")
    def _validate_credentials(self) -> ServingConfig:
        """
        Normalize the base URL and enforce the credential policy.

        Returns
        -------
        ServingConfig
            Normalized configuration.

        Raises
        ------
        ValueError
            When neither a token nor a password is configured, or limits are invalid.
        """
        self.sonarqube_url = self.sonarqube_url.rstrip("/")
        if not self.sonarqube_url:
            message = "sonarqube_url must not be empty"
            raise ValueError(message)
        if self.token is not None and not self.token:
            self.token = None
        if self.password is not None and not self.password:
            self.password = None
        if self.token is None and self.password is None:
            message = "SONARQUBE_PASSWORD is required when SONARQUBE_TOKEN is not set"
            raise ValueError(message)
        if self.timeout_seconds <= 0:
            message = "timeout_seconds must be positive"
            raise ValueError(message)
        if not 0 < self.http_port <= _MAX_PORT:
            message = f"http_port must be between 1 and {_MAX_PORT}"
            raise ValueError(message)
        return self

    @property
    def auth_method(self) -> AuthMethod:
        """Credential kind sent upstream."""
        return "token" if self.token is not None else "basic"

    def public_summary(self) -> dict[str, object]:
        """
        Return the secret-free subset of the configuration.

        Returns
        -------
        dict[str, object]
            Settings safe to expose on diagnostic endpoints.
        """
        return {
            "sonarqubeUrl": self.sonarqube_url,
            "authMethod": self.auth_method,
            "username": self.username if self.token is None else None,
            "mode": self.mode,
            "httpPort": self.http_port,
            "timeoutSeconds": self.timeout_seconds,
        }


__all__ = ["AuthMethod", "ServingConfig", "ServingMode"]
