"""Command-line entrypoint behaviour."""

from __future__ import annotations

import json
import os

import pytest

from sonarqube_mcp.cli import main as cli_main
from sonarqube_mcp.config.serving_models import ServingConfig
from sonarqube_mcp.serving.runtime import build_http_server
from sonarqube_mcp.serving.services.wiring import BridgeResource
from tests._helpers.expect import expect_equal
from tests._helpers.fakes import FakeSonarQube, make_config, status_route


def test_catalog_command_prints_listing(capsys: pytest.CaptureFixture[str]) -> None:
    """The catalog command needs no credentials and prints JSON."""
    code = cli_main.main(["catalog"])
    payload = json.loads(capsys.readouterr().out)
    expect_equal(code, 0, label="exit code")
    expect_equal(len(payload["tools"]), 10, label="tools")
    expect_equal(len(payload["resources"]), 5, label="resources")


@pytest.mark.usefixtures("sonarqube_env")
def test_health_command_exit_codes(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """Health exits 0 when UP and 1 when the server is unreachable."""
    os.environ["SONARQUBE_PASSWORD"] = "secret"
    healthy = FakeSonarQube()
    down = FakeSonarQube()
    down.routes["/api/system/status"] = status_route(503)

    for fake, expected in ((healthy, 0), (down, 1)):

        def _factory(_cfg: ServingConfig, fake: FakeSonarQube = fake) -> BridgeResource:
            return fake.resource()

        monkeypatch.setattr(cli_main, "build_bridge_resource", _factory)
        code = cli_main.main(["health"])
        payload = json.loads(capsys.readouterr().out)
        expect_equal(code, expected, label="exit code")
        expect_equal(payload["healthy"], expected == 0, label="healthy")


@pytest.mark.usefixtures("sonarqube_env")
def test_missing_credentials_fail_the_command() -> None:
    """Configuration errors are reported and return exit code 1."""
    expect_equal(cli_main.main(["health"]), 1, label="exit code")


def test_serve_arguments_parse() -> None:
    """Serve accepts transport and HTTP overrides."""
    args = cli_main.make_parser().parse_args(
        ["-vv", "serve", "--mode", "both", "--port", "9001", "--host", "127.0.0.1"]
    )
    expect_equal(
        (args.verbose, args.mode, args.http_port, args.http_host),
        (2, "both", 9001, "127.0.0.1"),
        label="args",
    )


def test_http_server_binds_configured_address(fake_sonarqube: FakeSonarQube) -> None:
    """The HTTP runtime uses the configured host and port."""
    resource = fake_sonarqube.resource()
    resource.config = make_config(http_host="127.0.0.1", http_port=9002)
    server = build_http_server(resource)
    expect_equal((server.config.host, server.config.port), ("127.0.0.1", 9002), label="bind")
