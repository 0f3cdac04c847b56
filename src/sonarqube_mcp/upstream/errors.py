"""Failures raised by the SonarQube client."""

from __future__ import annotations

NOT_FOUND_STATUS = 404


class UpstreamError(Exception):
    """Generic upstream failure, optionally carrying the HTTP status code."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        """Whether the upstream answered 404."""
        return self.status_code == NOT_FOUND_STATUS


class UpstreamUnreachable(UpstreamError):
    """The server could not be reached or did not answer in time."""


__all__ = ["NOT_FOUND_STATUS", "UpstreamError", "UpstreamUnreachable"]
