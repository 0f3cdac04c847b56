"""Composite project report assembled from several upstream calls."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Awaitable, Callable, Sequence

import anyio

from sonarqube_mcp.serving.mcp.models import ProjectReportArgs
from sonarqube_mcp.serving.mcp.view_utils import utc_timestamp
from sonarqube_mcp.upstream.client import SonarQubeClient
from sonarqube_mcp.upstream.models import Issue, IssueFilters

REPORT_ISSUE_LIMIT = 500
REPORT_SAMPLE_SIZE = 10
REPORT_HISTORY_SIZE = 5
LOG = logging.getLogger("sonarqube_mcp.serving.mcp.report")


def first_error(exc: BaseException) -> BaseException:
    """
    Unwrap task-group exception groups down to the first leaf failure.

    Returns
    -------
    BaseException
        The first non-group exception.
    """
    while isinstance(exc, BaseExceptionGroup) and exc.exceptions:
        exc = exc.exceptions[0]
    return exc


def summarize_issues(issues: Sequence[Issue]) -> dict[str, object]:
    """
    Tally issues by severity and type and keep a leading sample.

    Parameters
    ----------
    issues:
        Issues in upstream order.

    Returns
    -------
    dict[str, object]
        ``total``, ``bySeverity``, ``byType`` and ``top10Issues``.
    """
    return {
        "total": len(issues),
        "bySeverity": dict(Counter(issue.severity for issue in issues)),
        "byType": dict(Counter(issue.type for issue in issues)),
        "top10Issues": [issue.to_payload() for issue in issues[:REPORT_SAMPLE_SIZE]],
    }


async def _gather(fetches: dict[str, Callable[[], Awaitable[object]]]) -> dict[str, object]:
    results: dict[str, object] = {}

    async def _run(slot: str, fetch: Callable[[], Awaitable[object]]) -> None:
        results[slot] = await fetch()

    async with anyio.create_task_group() as tg:
        for slot, fetch in fetches.items():
            tg.start_soon(_run, slot, fetch)
    return results


async def build_project_report(
    args: ProjectReportArgs, client: SonarQubeClient
) -> dict[str, object] | None:
    """
    Assemble the report document, or ``None`` when the project does not exist.

    Sub-fetches run concurrently and are not isolated from one another: the first
    failure cancels the rest and propagates.

    Returns
    -------
    dict[str, object] | None
        Report payload.
    """
    key = args.project_key
    project = await client.get_project(key)
    if project is None:
        return None

    async def _quality_gate() -> object:
        status = await client.get_quality_gate_status(key)
        return status.to_payload() if status is not None else None

    async def _quality() -> object:
        return (await client.get_code_quality_metrics(key)).to_payload()

    async def _coverage() -> object:
        return (await client.get_code_coverage(key)).to_payload()

    async def _issues() -> object:
        issues = await client.get_issues(key, IssueFilters(page_size=REPORT_ISSUE_LIMIT))
        return summarize_issues(issues)

    async def _history() -> object:
        records = await client.get_analysis_history(key, REPORT_HISTORY_SIZE)
        return [record.to_payload() for record in records]

    fetches: dict[str, Callable[[], Awaitable[object]]] = {
        "qualityGate": _quality_gate,
        "quality": _quality,
        "coverage": _coverage,
    }
    if args.include_issues:
        fetches["issues"] = _issues
    if args.include_history:
        fetches["history"] = _history
    results = await _gather(fetches)

    return {
        "project": project.to_payload(),
        "qualityGate": results["qualityGate"],
        "metrics": {"quality": results["quality"], "coverage": results["coverage"]},
        "issues": results.get("issues"),
        "history": results.get("history"),
        "generatedAt": utc_timestamp(),
    }


async def generate_project_report(args: ProjectReportArgs, client: SonarQubeClient) -> object:
    """
    Generate the project report operation body.

    A missing project and any upstream failure are both rendered as
    descriptive text rather than raised.

    Returns
    -------
    object
        Report payload or explanatory text.
    """
    try:
        report = await build_project_report(args, client)
    except Exception as exc:  # noqa: BLE001 - reported to the caller as text
        cause = first_error(exc)
        LOG.warning("Report generation failed for %s: %s", args.project_key, cause)
        return f"Error generating report: {cause}"
    if report is None:
        return f'Project "{args.project_key}" not found'
    return report


__all__ = [
    "REPORT_HISTORY_SIZE",
    "REPORT_ISSUE_LIMIT",
    "REPORT_SAMPLE_SIZE",
    "build_project_report",
    "first_error",
    "generate_project_report",
    "summarize_issues",
]
