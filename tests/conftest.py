"""Pytest configuration for the SonarQube MCP test suite."""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from tests._helpers.fakes import FakeSonarQube


@pytest.fixture
def sonarqube_env() -> Iterator[None]:
    """Snapshot and clear SONARQUBE_* environment variables, restoring them after the test."""
    prior = {key: value for key, value in os.environ.items() if key.startswith("SONARQUBE_")}
    for key in prior:
        os.environ.pop(key, None)
    try:
        yield
    finally:
        for key in list(os.environ.keys()):
            if key.startswith("SONARQUBE_") and key not in prior:
                os.environ.pop(key, None)
        for key, value in prior.items():
            os.environ[key] = value


@pytest.fixture
def fake_sonarqube() -> FakeSonarQube:
    """
    Fresh fake SonarQube server with two projects.

    Returns
    -------
    FakeSonarQube
        Fake recording every upstream request.
    """
    return FakeSonarQube()
