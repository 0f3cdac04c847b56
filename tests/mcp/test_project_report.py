"""Composite project report aggregation."""

from __future__ import annotations

import json

import anyio
import pytest

from sonarqube_mcp.serving.mcp.models import ProjectReportArgs
from sonarqube_mcp.serving.mcp.report import (
    REPORT_SAMPLE_SIZE,
    build_project_report,
    first_error,
    generate_project_report,
)
from sonarqube_mcp.upstream.client import SonarQubeClient
from tests._helpers.expect import expect_equal, expect_in, expect_length, expect_true
from tests._helpers.fakes import FakeSonarQube, status_route


def _args(key: str, **extra: object) -> ProjectReportArgs:
    return ProjectReportArgs.model_validate({"projectKey": key, **extra})


def _report(client: SonarQubeClient, key: str, **extra: object) -> dict[str, object]:
    report = anyio.run(build_project_report, _args(key, **extra), client)
    if report is None:
        pytest.fail(f"report for {key} should exist")
    return report


def _without_timestamp(report: dict[str, object]) -> dict[str, object]:
    return {key: value for key, value in report.items() if key != "generatedAt"}


def test_missing_project_fetches_nothing_else(fake_sonarqube: FakeSonarQube) -> None:
    """A missing project short-circuits before any metric call."""
    text = anyio.run(generate_project_report, _args("nope"), fake_sonarqube.client())
    expect_equal(text, 'Project "nope" not found', label="text")
    expect_equal(fake_sonarqube.paths(), ["/api/projects/search"], label="upstream calls")


def test_report_without_issues_skips_issue_search(fake_sonarqube: FakeSonarQube) -> None:
    """includeIssues=false yields a null issues slot and no issue search."""
    report = _report(fake_sonarqube.client(), "demo", includeIssues=False)
    expect_equal(report["issues"], None, label="issues")
    expect_true(
        "/api/issues/search" not in fake_sonarqube.paths(),
        message="issue search should not be called",
    )


def test_report_document_shape(fake_sonarqube: FakeSonarQube) -> None:
    """The report aggregates project, gate, metrics, and the issue summary."""
    report = _report(fake_sonarqube.client(), "demo")
    project = report["project"]
    expect_equal(project["key"] if isinstance(project, dict) else None, "demo", label="project")
    gate = report["qualityGate"]
    expect_equal(gate["status"] if isinstance(gate, dict) else None, "OK", label="gate")
    metrics = report["metrics"]
    if not isinstance(metrics, dict):
        pytest.fail("metrics should be an object")
    expect_equal(set(metrics), {"quality", "coverage"}, label="metric groups")
    issues = report["issues"]
    if not isinstance(issues, dict):
        pytest.fail("issues summary should be an object")
    expect_equal(issues["total"], 15, label="total")
    expect_equal(issues["bySeverity"], {"MINOR": 8, "MAJOR": 7}, label="bySeverity")
    expect_equal(issues["byType"], {"CODE_SMELL": 12, "BUG": 3}, label="byType")
    sample = issues["top10Issues"]
    if not isinstance(sample, list):
        pytest.fail("top10Issues should be a list")
    expect_length(sample, REPORT_SAMPLE_SIZE, label="top")
    expect_equal(report["history"], None, label="history default")
    expect_in("generatedAt", report, label="timestamp")
    issue_call = next(c for c in fake_sonarqube.calls if c.url.path == "/api/issues/search")
    expect_equal(issue_call.url.params.get("ps"), "500", label="issue page size")


def test_report_with_history(fake_sonarqube: FakeSonarQube) -> None:
    """includeHistory adds the most recent analyses."""
    report = _report(fake_sonarqube.client(), "demo", includeHistory=True)
    history = report["history"]
    if not isinstance(history, list):
        pytest.fail("history should be a list")
    expect_length(history, 2, label="history")
    call = next(c for c in fake_sonarqube.calls if c.url.path == "/api/project_analyses/search")
    expect_equal(call.url.params.get("ps"), "5", label="history page size")


def test_project_without_gate_reports_null_gate(fake_sonarqube: FakeSonarQube) -> None:
    """A 404 gate status leaves the gate slot null rather than failing."""
    report = _report(fake_sonarqube.client(), "other")
    expect_equal(report["qualityGate"], None, label="gate")


def test_upstream_failure_is_reported_as_text() -> None:
    """A failing sub-fetch turns the whole report into an error message."""
    fake = FakeSonarQube()
    fake.routes["/api/measures/component"] = status_route(500)
    text = anyio.run(generate_project_report, _args("demo"), fake.client())
    if not isinstance(text, str):
        pytest.fail("report failure should be rendered as text")
    expect_true(text.startswith("Error generating report: "), message=text)
    expect_in("status code 500", text, label="cause")


def test_concurrent_reports_match_sequential_baselines() -> None:
    """Interleaved reports for two projects equal their isolated baselines."""
    fake = FakeSonarQube()
    client = fake.client()
    baseline = {
        key: _without_timestamp(_report(client, key, includeHistory=True))
        for key in ("demo", "other")
    }
    results: dict[str, dict[str, object] | None] = {}

    async def _both() -> None:
        async def _one(key: str) -> None:
            results[key] = await build_project_report(_args(key, includeHistory=True), client)

        async with anyio.create_task_group() as tg:
            tg.start_soon(_one, "demo")
            tg.start_soon(_one, "other")

    anyio.run(_both)
    for key, expected in baseline.items():
        report = results.get(key)
        if report is None:
            pytest.fail(f"concurrent report for {key} missing")
        expect_equal(_without_timestamp(report), expected, label=key)


def test_report_through_bridge_renders_json(fake_sonarqube: FakeSonarQube) -> None:
    """The report operation returns JSON text through the bridge."""
    result = anyio.run(
        fake_sonarqube.bridge().invoke,
        "generate_project_report",
        {"projectKey": "demo", "includeIssues": False},
    )
    payload = json.loads(result.text)
    expect_equal(payload["issues"], None, label="issues")


def test_first_error_unwraps_groups() -> None:
    """Exception groups from task groups are unwrapped to the leaf cause."""
    leaf = RuntimeError("leaf")
    group = ExceptionGroup("outer", [ExceptionGroup("inner", [leaf])])
    expect_true(first_error(group) is leaf, message="leaf exception expected")
