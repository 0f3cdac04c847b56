"""Typed SonarQube entities and the metric reshaping tables."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["INFO", "MINOR", "MAJOR", "CRITICAL", "BLOCKER"]
IssueType = Literal["CODE_SMELL", "BUG", "VULNERABILITY", "SECURITY_HOTSPOT"]


class SonarModel(BaseModel):
    """Base model accepting upstream camelCase keys and ignoring unknown fields."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    def to_payload(self) -> dict[str, object]:
        """
        Serialize with upstream aliases, omitting unset values.

        Returns
        -------
        dict[str, object]
            JSON-ready mapping.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SystemStatus(SonarModel):
    """Server status as reported by ``/api/system/status``."""

    status: str
    version: str | None = None
    id: str | None = None


class HealthProbe(SonarModel):
    """Outcome of the connectivity probe; never represents a raised failure."""

    status: str
    accessible: bool
    error: str | None = None

    @property
    def healthy(self) -> bool:
        """Whether the server is reachable and reports ``UP``."""
        return self.accessible and self.status == "UP"


class Project(SonarModel):
    """A project (component with qualifier ``TRK``)."""

    key: str
    name: str
    qualifier: str
    last_analysis_date: str | None = Field(default=None, alias="lastAnalysisDate")
    revision: str | None = None


class Issue(SonarModel):
    """A single issue returned by ``/api/issues/search``."""

    key: str
    rule: str
    severity: str
    component: str
    project: str
    line: int | None = None
    message: str
    effort: str | None = None
    debt: str | None = None
    status: str
    type: str


class IssueFilters(BaseModel):
    """Optional, independently combinable issue filters."""

    severities: tuple[str, ...] | None = None
    types: tuple[str, ...] | None = None
    statuses: tuple[str, ...] | None = None
    resolved: bool | None = None
    page_size: int = 100

    def to_params(self) -> dict[str, str]:
        """
        Render the filters as query parameters; unset filters are omitted.

        Returns
        -------
        dict[str, str]
            Query parameters excluding ``componentKeys``.
        """
        params: dict[str, str] = {"ps": str(self.page_size)}
        if self.severities:
            params["severities"] = ",".join(self.severities)
        if self.types:
            params["types"] = ",".join(self.types)
        if self.statuses:
            params["statuses"] = ",".join(self.statuses)
        if self.resolved is not None:
            params["resolved"] = "true" if self.resolved else "false"
        return params


class Metric(SonarModel):
    """Raw measurement from ``/api/measures/component``."""

    metric: str
    value: str | None = None
    component: str | None = None


class CoverageMetrics(SonarModel):
    """Coverage group reshaped from raw metrics."""

    line_coverage: str | None = Field(default=None, alias="lineCoverage")
    branch_coverage: str | None = Field(default=None, alias="branchCoverage")
    uncovered_lines: str | None = Field(default=None, alias="uncoveredLines")
    uncovered_conditions: str | None = Field(default=None, alias="uncoveredConditions")


class QualityMetrics(SonarModel):
    """Quality group reshaped from raw metrics."""

    code_smells: str | None = Field(default=None, alias="codeSmells")
    bugs: str | None = None
    vulnerabilities: str | None = None
    security_hotspots: str | None = Field(default=None, alias="securityHotspots")
    duplicated_lines: str | None = Field(default=None, alias="duplicatedLines")
    duplicated_lines_density: str | None = Field(default=None, alias="duplicatedLinesDensity")
    maintainability_rating: str | None = Field(default=None, alias="maintainabilityRating")
    reliability_rating: str | None = Field(default=None, alias="reliabilityRating")
    security_rating: str | None = Field(default=None, alias="securityRating")


class QualityGate(SonarModel):
    """Quality gate summary from ``/api/qualitygates/list``."""

    id: str | None = None
    name: str
    is_default: bool = Field(default=False, alias="isDefault")
    is_built_in: bool = Field(default=False, alias="isBuiltIn")


class QualityGateCondition(SonarModel):
    """One evaluated condition of a quality gate."""

    status: str
    metric_key: str = Field(alias="metricKey")
    comparator: str
    error_threshold: str | None = Field(default=None, alias="errorThreshold")
    actual_value: str | None = Field(default=None, alias="actualValue")


class QualityGateStatus(SonarModel):
    """Quality gate evaluation for a project."""

    status: str
    conditions: list[QualityGateCondition] = Field(default_factory=list)


class AnalysisRecord(SonarModel):
    """Analysis entry from ``/api/project_analyses/search``; extra fields are kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    key: str
    date: str | None = None
    project_version: str | None = Field(default=None, alias="projectVersion")
    revision: str | None = None
    events: list[dict[str, object]] = Field(default_factory=list)


COVERAGE_FIELDS: Mapping[str, str] = {
    "line_coverage": "lineCoverage",
    "branch_coverage": "branchCoverage",
    "uncovered_lines": "uncoveredLines",
    "uncovered_conditions": "uncoveredConditions",
}

QUALITY_FIELDS: Mapping[str, str] = {
    "code_smells": "codeSmells",
    "bugs": "bugs",
    "vulnerabilities": "vulnerabilities",
    "security_hotspots": "securityHotspots",
    "duplicated_lines": "duplicatedLines",
    "duplicated_lines_density": "duplicatedLinesDensity",
    "sqale_rating": "maintainabilityRating",
    "reliability_rating": "reliabilityRating",
    "security_rating": "securityRating",
}


def reshape_metrics(measures: Iterable[Metric], fields: Mapping[str, str]) -> dict[str, str]:
    """
    Map raw measures onto named fields; unknown metrics and missing values are dropped.

    Parameters
    ----------
    measures:
        Raw metrics as returned upstream.
    fields:
        Metric name to field alias table.

    Returns
    -------
    dict[str, str]
        Field alias to metric value.
    """
    return {
        fields[measure.metric]: measure.value
        for measure in measures
        if measure.metric in fields and measure.value is not None
    }


__all__ = [
    "COVERAGE_FIELDS",
    "QUALITY_FIELDS",
    "AnalysisRecord",
    "CoverageMetrics",
    "HealthProbe",
    "Issue",
    "IssueFilters",
    "IssueType",
    "Metric",
    "Project",
    "QualityGate",
    "QualityGateCondition",
    "QualityGateStatus",
    "QualityMetrics",
    "Severity",
    "SonarModel",
    "SystemStatus",
    "reshape_metrics",
]
