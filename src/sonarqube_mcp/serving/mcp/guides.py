"""Static guide documents served as MCP resources."""

from __future__ import annotations

PYTHON_CONFIG_GUIDE = """\
# SonarQube Configuration for Python Projects

## Project Configuration (sonar-project.properties)

# Project identification
sonar.projectKey=your-python-project
sonar.projectName=Your Python Project
sonar.projectVersion=1.0

# Source code configuration
sonar.sources=src
sonar.tests=tests
sonar.python.version=3.12

# File patterns
sonar.exclusions=**/.venv/**,**/build/**,**/dist/**,**/__pycache__/**
sonar.test.inclusions=tests/**/test_*.py

# Coverage and test reports
sonar.python.coverage.reportPaths=coverage.xml
sonar.python.xunit.reportPath=test-results/junit.xml

# Wait for the quality gate result in CI
sonar.qualitygate.wait=true

## Running Analysis

1. Install the scanner:
   pip install pysonar

2. Run tests with coverage:
   pytest --cov=src --cov-report=xml:coverage.xml --junitxml=test-results/junit.xml

3. Run the analysis:
   pysonar --sonar-host-url=http://localhost:9000 --sonar-token=$SONARQUBE_TOKEN

## Docker Integration

When SonarQube runs through Docker Compose:
- SonarQube URL: http://localhost:9000
- Default credentials: admin/admin
- Change the default password after first login
"""

DOCKER_SETUP_GUIDE = """\
# SonarQube Docker Setup

## Current Configuration

This MCP server talks to a SonarQube instance configured through:
- **SONARQUBE_URL** (default http://localhost:9000)
- **SONARQUBE_TOKEN**, or **SONARQUBE_USERNAME** / **SONARQUBE_PASSWORD**

## Docker Compose Configuration

The reference setup runs:
- SonarQube Community Edition 10
- H2 embedded database (suitable for development)

## Commands

### Start SonarQube
```bash
docker compose up -d
```

### Stop SonarQube
```bash
docker compose down
```

### View Logs
```bash
docker compose logs -f sonarqube
```

## Generating a Token

1. Log in at http://localhost:9000
2. Open **My Account > Security**
3. Generate a user token and export it as `SONARQUBE_TOKEN`

## Debug HTTP Surface

Run with `SONARQUBE_MCP_MODE=both` to expose `/health`, `/tools`,
`/resources` and `/projects` on port 8080 next to the stdio stream.
"""

__all__ = ["DOCKER_SETUP_GUIDE", "PYTHON_CONFIG_GUIDE"]
