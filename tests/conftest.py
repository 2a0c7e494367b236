"""
Global pytest configuration and fixtures.

This file provides:
1. Marker registration and location-based auto-marking
2. Variable snapshot and source fixtures
3. A scripted GitHub client and a ready export configuration
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Generator
import shutil
import tempfile

import pytest

from figma_variables_export.configuration import ExportConfig
from figma_variables_export.conversion import InMemoryVariableSource
from figma_variables_export.session import ExportGuard

from tests.fixtures.design_variables import two_theme_snapshot
from tests.fixtures.github_responses import FakeGitHubClient

# 2026-03-01 09:30 UTC is 10:30 CET
FIXED_NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def two_theme_data() -> Dict[str, Any]:
    return two_theme_snapshot()


@pytest.fixture
def two_theme_source(two_theme_data) -> InMemoryVariableSource:
    return InMemoryVariableSource.from_snapshot(two_theme_data)


@pytest.fixture
def fake_github() -> FakeGitHubClient:
    return FakeGitHubClient()


@pytest.fixture
def export_config() -> ExportConfig:
    return ExportConfig(
        owner="acme",
        repo="web",
        path="src/styles/tokens",
        token="ghp_" + "a" * 36,
        backoff_factor=0,
    )


@pytest.fixture
def fixed_now():
    return lambda: FIXED_NOW


@pytest.fixture
def guard() -> ExportGuard:
    """A private guard so tests never contend for the process-wide one."""
    return ExportGuard()


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests between components")
    config.addinivalue_line("markers", "requires_github: Tests that exercise the GitHub API layer")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        test_path = str(item.fspath)
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)

        if "github" in test_path or "export_flow" in test_path:
            item.add_marker(pytest.mark.requires_github)
