"""Resolve, validate, invoke, and normalize catalog requests for every transport."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field

from pydantic import ValidationError

from sonarqube_mcp.serving.mcp import errors
from sonarqube_mcp.serving.mcp.catalog import Catalog
from sonarqube_mcp.serving.mcp.models import (
    OperationResult,
    OperationSummary,
    ResourceContents,
    ResourceReadResult,
    ResourceSummary,
    TextContent,
)
from sonarqube_mcp.serving.mcp.view_utils import render_text
from sonarqube_mcp.serving.observability import DispatchCallMetrics, DispatchObservability
from sonarqube_mcp.upstream.client import SonarQubeClient

LOG = logging.getLogger("sonarqube_mcp.serving.mcp.dispatch")


@dataclass
class DispatchBridge:
    """
    Single dispatch pipeline shared by the MCP stream and the HTTP surface.

    Lookups are exact matches against the catalog. Operation arguments are
    validated before the handler runs, and anything a handler raises is
    re-wrapped as ``HandlerFailure`` so raw exceptions never reach a transport.
    """

    catalog: Catalog
    client: SonarQubeClient
    observability: DispatchObservability = field(default_factory=DispatchObservability)

    def list_operations(self) -> list[OperationSummary]:
        """Return operation listing entries in catalog order."""
        return [op.summary() for op in self.catalog.operations]

    def list_resources(self) -> list[ResourceSummary]:
        """Return resource listing entries in catalog order."""
        return [res.summary() for res in self.catalog.resources]

    async def invoke(
        self,
        name: str,
        arguments: Mapping[str, object] | None = None,
        *,
        transport: str = "mcp",
    ) -> OperationResult:
        """
        Invoke a named operation.

        Parameters
        ----------
        name:
            Operation name as listed in the catalog.
        arguments:
            Raw arguments; ``None`` is treated as an empty object.
        transport:
            Label of the transport that received the request, for logging.

        Returns
        -------
        OperationResult
            Text envelope produced from the handler output.

        Raises
        ------
        errors.NotFound
            If no operation has this name.
        errors.InvalidInput
            If the arguments fail the operation's input contract.
        errors.HandlerFailure
            If the handler raised.
        """
        descriptor = self.catalog.find_operation(name)

        async def _run() -> OperationResult:
            if descriptor is None:
                raise errors.operation_not_found(name)
            if arguments is not None and not isinstance(arguments, Mapping):
                raise errors.invalid_input(name, ["arguments must be a JSON object"])
            try:
                validated = descriptor.input_model.model_validate(dict(arguments or {}))
            except ValidationError as exc:
                raise errors.invalid_input(
                    name, exc.errors(include_url=False, include_context=False)
                ) from exc
            try:
                output = await descriptor.handler(validated, self.client)
            except Exception as exc:
                raise errors.handler_failure(name, exc) from exc
            return OperationResult(content=[TextContent(text=render_text(output))])

        return await self._observe("operation", name, transport, _run)

    async def read(self, uri: str, *, transport: str = "mcp") -> ResourceReadResult:
        """
        Read a resource by uri.

        Returns
        -------
        ResourceReadResult
            Envelope holding the resource text and media type.

        Raises
        ------
        errors.NotFound
            If no resource has this uri.
        errors.HandlerFailure
            If the handler raised.
        """
        descriptor = self.catalog.find_resource(uri)

        async def _run() -> ResourceReadResult:
            if descriptor is None:
                raise errors.resource_not_found(uri)
            try:
                text = await descriptor.handler(self.client)
            except Exception as exc:
                raise errors.handler_failure(uri, exc, kind="Resource") from exc
            return ResourceReadResult(
                contents=[ResourceContents(uri=uri, mime_type=descriptor.mime_type, text=text)]
            )

        return await self._observe("resource", uri, transport, _run)

    async def _observe[T](
        self,
        kind: str,
        target: str,
        transport: str,
        func: Callable[[], Awaitable[T]],
    ) -> T:
        start = time.perf_counter()
        try:
            result = await func()
        except errors.DispatchError as exc:
            self.observability.record(
                DispatchCallMetrics(
                    kind=kind,
                    target=target,
                    transport=transport,
                    duration_ms=(time.perf_counter() - start) * 1000,
                    outcome=type(exc).__name__,
                    error=exc.message,
                )
            )
            if isinstance(exc, errors.HandlerFailure):
                errors.log_problem(LOG, exc.detail)
            raise
        self.observability.record(
            DispatchCallMetrics(
                kind=kind,
                target=target,
                transport=transport,
                duration_ms=(time.perf_counter() - start) * 1000,
            )
        )
        return result


__all__ = ["DispatchBridge"]
