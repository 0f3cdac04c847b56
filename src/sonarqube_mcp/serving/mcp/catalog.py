"""Immutable catalog of MCP operations and resources."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from pydantic import BaseModel

from sonarqube_mcp.serving.mcp.models import OperationSummary, ResourceSummary
from sonarqube_mcp.upstream.client import SonarQubeClient

OperationHandler = Callable[[BaseModel, SonarQubeClient], Awaitable[object]]
ResourceHandler = Callable[[SonarQubeClient], Awaitable[str]]


@dataclass(frozen=True)
class OperationDescriptor:
    """Named, invocable operation with a declared input contract."""

    name: str
    description: str
    input_model: type[BaseModel]
    handler: OperationHandler

    def input_schema(self) -> dict[str, object]:
        """
        Return the JSON Schema published for this operation's input.

        Returns
        -------
        dict[str, object]
            Schema rendered with the wire (alias) field names.
        """
        schema = self.input_model.model_json_schema(by_alias=True)
        schema.setdefault("properties", {})
        return schema

    def summary(self) -> OperationSummary:
        """Listing entry for this operation."""
        return OperationSummary(
            name=self.name,
            description=self.description,
            input_schema=self.input_schema(),
        )


@dataclass(frozen=True)
class ResourceDescriptor:
    """Argument-less readable document identified by a URI."""

    uri: str
    name: str
    description: str
    mime_type: str
    handler: ResourceHandler

    def summary(self) -> ResourceSummary:
        """Listing entry for this resource."""
        return ResourceSummary(
            uri=self.uri,
            name=self.name,
            description=self.description,
            mime_type=self.mime_type,
        )


def _index_unique[T](
    entries: Iterable[T], key: Callable[[T], str], label: str
) -> Mapping[str, T]:
    index: dict[str, T] = {}
    for entry in entries:
        identifier = key(entry)
        if identifier in index:
            message = f"Duplicate {label} in catalog: {identifier}"
            raise ValueError(message)
        index[identifier] = entry
    return MappingProxyType(index)


@dataclass(frozen=True)
class Catalog:
    """
    Ordered operation and resource descriptors with keyed lookup.

    Built once at startup. Names and uris are unique; a duplicate raises
    ``ValueError`` during construction.
    """

    operations: tuple[OperationDescriptor, ...] = ()
    resources: tuple[ResourceDescriptor, ...] = ()
    _operation_index: Mapping[str, OperationDescriptor] = field(
        init=False, repr=False, compare=False
    )
    _resource_index: Mapping[str, ResourceDescriptor] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        """Freeze the descriptor sequences and build the lookup indexes."""
        object.__setattr__(self, "operations", tuple(self.operations))
        object.__setattr__(self, "resources", tuple(self.resources))
        object.__setattr__(
            self,
            "_operation_index",
            _index_unique(self.operations, lambda op: op.name, "operation name"),
        )
        object.__setattr__(
            self,
            "_resource_index",
            _index_unique(self.resources, lambda res: res.uri, "resource uri"),
        )

    def find_operation(self, name: str) -> OperationDescriptor | None:
        """Exact-match lookup by operation name."""
        return self._operation_index.get(name)

    def find_resource(self, uri: str) -> ResourceDescriptor | None:
        """Exact-match lookup by resource uri."""
        return self._resource_index.get(uri)

    def operation_names(self) -> tuple[str, ...]:
        """Operation names in catalog order."""
        return tuple(op.name for op in self.operations)

    def resource_uris(self) -> tuple[str, ...]:
        """Resource uris in catalog order."""
        return tuple(res.uri for res in self.resources)


def build_catalog() -> Catalog:
    """
    Build the process-wide catalog of SonarQube operations and resources.

    Returns
    -------
    Catalog
        Immutable catalog with ten operations and five resources.
    """
    from sonarqube_mcp.serving.mcp.resources import RESOURCES  # noqa: PLC0415
    from sonarqube_mcp.serving.mcp.tools import OPERATIONS  # noqa: PLC0415

    return Catalog(operations=OPERATIONS, resources=RESOURCES)


__all__ = [
    "Catalog",
    "OperationDescriptor",
    "OperationHandler",
    "ResourceDescriptor",
    "ResourceHandler",
    "build_catalog",
]
