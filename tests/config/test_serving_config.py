"""Environment loading and credential policy for ServingConfig."""

from __future__ import annotations

import os

import pytest

from sonarqube_mcp.config.serving_models import ServingConfig
from tests._helpers.expect import expect_equal, expect_true


@pytest.mark.usefixtures("sonarqube_env")
def test_from_env_defaults_with_password() -> None:
    """Only the password is required; everything else has a default."""
    os.environ["SONARQUBE_PASSWORD"] = "secret"
    cfg = ServingConfig.from_env()
    expect_equal(cfg.sonarqube_url, "http://localhost:9000", label="url")
    expect_equal(cfg.username, "admin", label="username")
    expect_equal(cfg.mode, "stdio", label="mode")
    expect_equal(cfg.http_port, 8080, label="port")
    expect_equal(cfg.timeout_seconds, 30.0, label="timeout")
    expect_equal(cfg.auth_method, "basic", label="auth method")


@pytest.mark.usefixtures("sonarqube_env")
def test_from_env_reads_every_variable() -> None:
    """All SONARQUBE_* variables map onto their fields."""
    os.environ.update(
        {
            "SONARQUBE_URL": "https://sonar.example.com/",
            "SONARQUBE_USERNAME": "ci",
            "SONARQUBE_TOKEN": "squ_abc",
            "SONARQUBE_TIMEOUT_SEC": "5",
            "SONARQUBE_MCP_MODE": "BOTH",
            "SONARQUBE_MCP_HTTP_HOST": "127.0.0.1",
            "SONARQUBE_MCP_HTTP_PORT": "9090",
        }
    )
    cfg = ServingConfig.from_env()
    expect_equal(cfg.sonarqube_url, "https://sonar.example.com", label="trailing slash stripped")
    expect_equal(cfg.username, "ci", label="username")
    expect_equal(cfg.token, "squ_abc", label="token")
    expect_equal(cfg.timeout_seconds, 5.0, label="timeout")
    expect_equal(cfg.mode, "both", label="mode")
    expect_equal(cfg.http_host, "127.0.0.1", label="host")
    expect_equal(cfg.http_port, 9090, label="port")
    expect_equal(cfg.auth_method, "token", label="auth method")


@pytest.mark.usefixtures("sonarqube_env")
def test_missing_password_without_token_is_rejected() -> None:
    """Startup fails when neither a token nor a password is configured."""
    with pytest.raises(ValueError, match="SONARQUBE_PASSWORD is required"):
        ServingConfig.from_env()


@pytest.mark.usefixtures("sonarqube_env")
def test_blank_values_count_as_unset() -> None:
    """Empty strings in the environment are treated as missing."""
    os.environ["SONARQUBE_TOKEN"] = "   "
    os.environ["SONARQUBE_PASSWORD"] = ""
    with pytest.raises(ValueError, match="SONARQUBE_PASSWORD is required"):
        ServingConfig.from_env()


@pytest.mark.usefixtures("sonarqube_env")
def test_unsupported_mode_is_rejected() -> None:
    """Unknown transport modes fail fast."""
    os.environ["SONARQUBE_PASSWORD"] = "secret"
    os.environ["SONARQUBE_MCP_MODE"] = "websocket"
    with pytest.raises(ValueError, match="Unsupported SONARQUBE_MCP_MODE"):
        ServingConfig.from_env()


def test_invalid_port_is_rejected() -> None:
    """Ports outside 1..65535 are refused."""
    with pytest.raises(ValueError, match="http_port"):
        ServingConfig(password="secret", http_port=70000)


def test_public_summary_never_exposes_secrets() -> None:
    """The diagnostic summary omits password and token values."""
    basic = ServingConfig(password="hunter2").public_summary()
    token = ServingConfig(token="squ_secret", password="hunter2").public_summary()
    for summary in (basic, token):
        rendered = repr(summary)
        expect_true("hunter2" not in rendered, message="password leaked into summary")
        expect_true("squ_secret" not in rendered, message="token leaked into summary")
    expect_equal(basic["username"], "admin", label="basic username")
    expect_equal(token["username"], None, label="token hides username")
    expect_equal(token["authMethod"], "token", label="token auth method")
