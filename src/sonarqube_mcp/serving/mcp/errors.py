"""Dispatch error taxonomy and helpers for Problem Details responses."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sonarqube_mcp.serving.mcp.models import ProblemDetail

# JSON-RPC / MCP error codes.
INVALID_PARAMS = -32602
METHOD_NOT_FOUND = -32601
INTERNAL_ERROR = -32603
RESOURCE_NOT_FOUND = -32002


@dataclass
class DispatchError(Exception):
    """Base dispatch error carrying a ProblemDetail payload."""

    detail: ProblemDetail

    def __str__(self) -> str:
        """
        Return a concise string for logging/diagnostics.

        Returns
        -------
        str
            Concise representation of the problem.
        """
        return f"{self.detail.title}: {self.detail.detail or ''}".strip()

    @property
    def code(self) -> int:
        """Protocol error code."""
        return self.detail.code if self.detail.code is not None else INTERNAL_ERROR

    @property
    def message(self) -> str:
        """Message carried to the client."""
        return self.detail.detail or self.detail.title

    @property
    def http_status(self) -> int:
        """HTTP status used by the debug surface."""
        return self.detail.status or 500


class NotFound(DispatchError):
    """No catalog entry matches the requested name or uri."""


class InvalidInput(DispatchError):
    """Arguments do not satisfy the operation's input contract."""


class HandlerFailure(DispatchError):
    """A handler raised; the original message is preserved."""


def operation_not_found(name: str) -> NotFound:
    """
    Construct a not-found problem for an unknown operation.

    Returns
    -------
    NotFound
        Error wrapping a ProblemDetail payload.
    """
    return NotFound(
        detail=ProblemDetail(
            type="https://sonarqube-mcp.dev/problems/not-found",
            title="Not found",
            detail=f"Tool {name} not found",
            status=404,
            code=METHOD_NOT_FOUND,
            data={"name": name},
        )
    )


def resource_not_found(uri: str) -> NotFound:
    """
    Construct a not-found problem for an unknown resource uri.

    Returns
    -------
    NotFound
        Error wrapping a ProblemDetail payload.
    """
    return NotFound(
        detail=ProblemDetail(
            type="https://sonarqube-mcp.dev/problems/not-found",
            title="Not found",
            detail=f"Resource {uri} not found",
            status=404,
            code=RESOURCE_NOT_FOUND,
            data={"uri": uri},
        )
    )


def invalid_input(name: str, errors: Sequence[object]) -> InvalidInput:
    """
    Construct an invalid-input problem listing contract violations.

    Returns
    -------
    InvalidInput
        Error wrapping a ProblemDetail payload.
    """
    return InvalidInput(
        detail=ProblemDetail(
            type="https://sonarqube-mcp.dev/problems/invalid-input",
            title="Invalid input",
            detail=f"Invalid arguments for tool {name}",
            status=400,
            code=INVALID_PARAMS,
            data={"name": name, "errors": list(errors)},
        )
    )


def handler_failure(identifier: str, exc: BaseException, *, kind: str = "Tool") -> HandlerFailure:
    """
    Wrap an exception raised by a handler, keeping its original message.

    Returns
    -------
    HandlerFailure
        Error wrapping a ProblemDetail payload.
    """
    reason = str(exc) or type(exc).__name__
    verb = "execution" if kind == "Tool" else "read"
    return HandlerFailure(
        detail=ProblemDetail(
            type="https://sonarqube-mcp.dev/problems/handler-failure",
            title="Handler failure",
            detail=f"{kind} {verb} failed: {reason}",
            status=500,
            code=INTERNAL_ERROR,
            data={"target": identifier, "error": type(exc).__name__},
        )
    )


def log_problem(logger: logging.Logger | logging.LoggerAdapter, detail: ProblemDetail) -> None:
    """Emit a Problem Detail as a structured error log."""
    logger.error(json.dumps(detail.model_dump(exclude_none=True), default=str))


__all__ = [
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "METHOD_NOT_FOUND",
    "RESOURCE_NOT_FOUND",
    "DispatchError",
    "HandlerFailure",
    "InvalidInput",
    "NotFound",
    "handler_failure",
    "invalid_input",
    "log_problem",
    "operation_not_found",
    "resource_not_found",
]
