"""Shared rendering helpers for operation and resource bodies."""

from __future__ import annotations

import json
from datetime import UTC, datetime

from pydantic import BaseModel


def utc_timestamp() -> str:
    """
    Return the current UTC time as an ISO-8601 string with millisecond precision.

    Returns
    -------
    str
        Timestamp such as ``2024-05-01T12:00:00.000Z``.
    """
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def render_json(value: object) -> str:
    """
    Render a payload as indented JSON.

    Parameters
    ----------
    value:
        JSON-compatible value or pydantic model.

    Returns
    -------
    str
        Two-space indented JSON text.
    """
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(value, indent=2, default=str)


def render_text(value: object) -> str:
    """
    Render handler output as text; strings pass through unchanged.

    Returns
    -------
    str
        Text body for the result envelope.
    """
    if isinstance(value, str):
        return value
    return render_json(value)


__all__ = ["render_json", "render_text", "utc_timestamp"]
