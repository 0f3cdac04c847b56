"""Typed MCP input contracts, result envelopes, and error payloads."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from sonarqube_mcp.upstream.models import IssueFilters, IssueType, Severity

MAX_ISSUES_PAGE_SIZE = 500
MAX_HISTORY_PAGE_SIZE = 100


class ProblemDetail(BaseModel):
    """Problem Details payload for dispatch error responses."""

    type: str = Field(default="about:blank")
    title: str
    detail: str | None = None
    status: int | None = None
    code: int | None = None
    instance: str | None = None
    data: dict[str, object] | None = None


class TextContent(BaseModel):
    """Single text item of an operation result."""

    type: Literal["text"] = "text"
    text: str


class OperationResult(BaseModel):
    """Transport-neutral operation result envelope."""

    content: list[TextContent]

    @property
    def text(self) -> str:
        """Concatenated text of all content items."""
        return "".join(item.text for item in self.content)


class ResourceContents(BaseModel):
    """Text body of a resource read."""

    model_config = ConfigDict(populate_by_name=True)

    uri: str
    mime_type: str = Field(alias="mimeType")
    text: str


class ResourceReadResult(BaseModel):
    """Transport-neutral resource read envelope."""

    contents: list[ResourceContents]


class OperationSummary(BaseModel):
    """Catalog listing entry for an operation."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    input_schema: dict[str, object] = Field(alias="inputSchema")


class ResourceSummary(BaseModel):
    """Catalog listing entry for a resource."""

    model_config = ConfigDict(populate_by_name=True)

    uri: str
    name: str
    description: str
    mime_type: str = Field(alias="mimeType")


class ToolArgs(BaseModel):
    """Base class for operation input contracts; unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class NoArgs(ToolArgs):
    """Operations that take no input."""


class ProjectKeyArgs(ToolArgs):
    """Input naming a single project."""

    project_key: str = Field(
        alias="projectKey",
        min_length=1,
        description='The project key (e.g., "my-project")',
    )


class ProjectIssuesArgs(ProjectKeyArgs):
    """Input for the issue search operation."""

    severities: list[Severity] | None = Field(default=None, description="Filter by severities")
    types: list[IssueType] | None = Field(default=None, description="Filter by issue types")
    statuses: list[str] | None = Field(default=None, description="Filter by statuses")
    resolved: bool | None = Field(default=None, description="Filter by resolution status")
    page_size: int = Field(
        default=100,
        alias="pageSize",
        ge=1,
        le=MAX_ISSUES_PAGE_SIZE,
        description="Number of issues to return",
    )

    def to_filters(self) -> IssueFilters:
        """
        Convert the operation input into client-side issue filters.

        Returns
        -------
        IssueFilters
            Filters forwarded to the upstream search.
        """
        return IssueFilters(
            severities=tuple(self.severities) if self.severities is not None else None,
            types=tuple(self.types) if self.types is not None else None,
            statuses=tuple(self.statuses) if self.statuses is not None else None,
            resolved=self.resolved,
            page_size=self.page_size,
        )


class AnalysisHistoryArgs(ProjectKeyArgs):
    """Input for the analysis history operation."""

    page_size: int = Field(
        default=10,
        alias="pageSize",
        ge=1,
        le=MAX_HISTORY_PAGE_SIZE,
        description="Number of analyses to return",
    )


class ProjectReportArgs(ProjectKeyArgs):
    """Input for the composite project report."""

    include_issues: bool = Field(
        default=True, alias="includeIssues", description="Include issues in the report"
    )
    include_history: bool = Field(
        default=False, alias="includeHistory", description="Include analysis history"
    )


__all__ = [
    "MAX_HISTORY_PAGE_SIZE",
    "MAX_ISSUES_PAGE_SIZE",
    "AnalysisHistoryArgs",
    "NoArgs",
    "OperationResult",
    "OperationSummary",
    "ProblemDetail",
    "ProjectIssuesArgs",
    "ProjectKeyArgs",
    "ProjectReportArgs",
    "ResourceContents",
    "ResourceReadResult",
    "ResourceSummary",
    "TextContent",
    "ToolArgs",
]
