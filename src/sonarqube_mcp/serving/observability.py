"""Structured logging of dispatch calls across transports."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

LOG = logging.getLogger("sonarqube_mcp.serving.dispatch")


@dataclass
class DispatchCallMetrics:
    """Structured metrics describing one dispatched request."""

    kind: str
    target: str
    transport: str
    duration_ms: float
    outcome: str = "ok"
    error: str | None = None


@dataclass
class DispatchObservability:
    """Configuration for dispatch-level observability."""

    enabled: bool = True
    logger: logging.Logger = field(default_factory=lambda: LOG)

    def record(self, metrics: DispatchCallMetrics) -> None:
        """
        Emit a structured log line for a dispatched request.

        Parameters
        ----------
        metrics:
            Call metrics describing the invocation outcome.
        """
        if not self.enabled or not self.logger.isEnabledFor(logging.INFO):
            return
        payload: dict[str, object] = {
            "kind": metrics.kind,
            "target": metrics.target,
            "transport": metrics.transport,
            "duration_ms": round(metrics.duration_ms, 2),
            "outcome": metrics.outcome,
        }
        if metrics.error is not None:
            payload["error"] = metrics.error
        self.logger.info("dispatch_call %s", payload)


__all__ = ["DispatchCallMetrics", "DispatchObservability"]
