"""CLI entrypoint for the SonarQube MCP server."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable, Iterable

import anyio

from sonarqube_mcp.config.serving_models import ServingConfig
from sonarqube_mcp.serving.mcp import errors
from sonarqube_mcp.serving.mcp.catalog import build_catalog
from sonarqube_mcp.serving.mcp.models import ProblemDetail
from sonarqube_mcp.serving.runtime import serve
from sonarqube_mcp.serving.services.wiring import build_bridge_resource

LOG = logging.getLogger("sonarqube_mcp.cli")

CommandHandler = Callable[[argparse.Namespace], int]


# ---------------------------------------------------------------------------
# Argument parsing / logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure logging based on -v/--verbose count.

    0 -> WARNING, 1 -> INFO, 2+ -> DEBUG. Records go to stderr; stdout
    carries the MCP stream.
    """
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_config(args: argparse.Namespace) -> ServingConfig:
    cfg = ServingConfig.from_env()
    overrides: dict[str, object] = {}
    for field in ("mode", "http_host", "http_port"):
        value = getattr(args, field, None)
        if value is not None:
            overrides[field] = value
    if not overrides:
        return cfg
    return ServingConfig.model_validate({**cfg.model_dump(), **overrides})


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sonarqube-mcp",
        description="MCP server and debug HTTP surface for SonarQube",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be repeated)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_serve = subparsers.add_parser("serve", help="Run the MCP stream and/or HTTP surface")
    p_serve.add_argument(
        "--mode",
        choices=("stdio", "http", "both"),
        default=None,
        help="Transports to run (default: SONARQUBE_MCP_MODE or stdio)",
    )
    p_serve.add_argument(
        "--host",
        dest="http_host",
        default=None,
        help="HTTP bind host (default: SONARQUBE_MCP_HTTP_HOST or 0.0.0.0)",
    )
    p_serve.add_argument(
        "--port",
        dest="http_port",
        type=int,
        default=None,
        help="HTTP port (default: SONARQUBE_MCP_HTTP_PORT or 8080)",
    )
    p_serve.set_defaults(func=_cmd_serve)

    p_catalog = subparsers.add_parser("catalog", help="Print the operation and resource catalog")
    p_catalog.set_defaults(func=_cmd_catalog)

    p_health = subparsers.add_parser("health", help="Probe the configured SonarQube server")
    p_health.set_defaults(func=_cmd_health)

    return parser


def make_parser() -> argparse.ArgumentParser:
    """
    Public helper to construct the CLI parser (for tests/tools).

    Returns
    -------
    argparse.ArgumentParser
        Configured parser with all subcommands registered.
    """
    return _make_parser()


# ---------------------------------------------------------------------------
# Command implementations
# ---------------------------------------------------------------------------


def _cmd_serve(args: argparse.Namespace) -> int:
    cfg = _load_config(args)
    anyio.run(serve, cfg)
    return 0


def _cmd_catalog(_args: argparse.Namespace) -> int:
    """
    Print the catalog listing as JSON.

    The listing needs no upstream access, so credentials are not required.

    Returns
    -------
    int
        Exit code (always 0).
    """
    catalog = build_catalog()
    payload = {
        "tools": [op.summary().model_dump(by_alias=True) for op in catalog.operations],
        "resources": [res.summary().model_dump(by_alias=True) for res in catalog.resources],
    }
    sys.stdout.write(json.dumps(payload, indent=2))
    sys.stdout.write("\n")
    return 0


def _cmd_health(args: argparse.Namespace) -> int:
    """
    Probe SonarQube and print the result.

    Returns
    -------
    int
        Exit code (0 when healthy, 1 otherwise).
    """
    cfg = _load_config(args)

    async def _probe() -> dict[str, object]:
        resource = build_bridge_resource(cfg)
        try:
            probe = await resource.client.health_check()
        finally:
            await resource.close()
        return {"healthy": probe.healthy, **probe.to_payload()}

    payload = anyio.run(_probe)
    sys.stdout.write(json.dumps(payload, indent=2))
    sys.stdout.write("\n")
    return 0 if payload["healthy"] else 1


def main(argv: Iterable[str] | None = None) -> int:
    """
    CLI entrypoint for the SonarQube MCP server.

    Parameters
    ----------
    argv:
        Optional argument list (defaults to sys.argv).

    Returns
    -------
    int
        Exit code (0 on success).
    """
    parser = _make_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    _setup_logging(args.verbose)

    try:
        func: CommandHandler = args.func
        return int(func(args))
    except Exception as exc:  # noqa: BLE001 - reported as problem JSON
        pd = ProblemDetail(
            type="https://sonarqube-mcp.dev/problems/cli-failure",
            title="CLI command failed",
            detail=str(exc),
            data={"command": args.command},
        )
        errors.log_problem(LOG, pd)
        return 1


if __name__ == "__main__":
    sys.exit(main())
