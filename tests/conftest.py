"""
Shared pytest fixtures and configuration for tessera tests.

This module provides:
- Registry and cache cleanup fixtures for test isolation
- Entity constructors for a small fake backend
- A helper writing project trees to a temporary directory

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments:

    def test_something(project_dir):
        root = project_dir({"_.py": "", "storage.py": "..."})
"""

import sys
import textwrap
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog

# Ensure tessera package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tessera.backends.registry import clear_registry
from tessera.core.logging import clear_context, configure_logging
from tessera.core.settings import clear_settings_cache
from tessera.model import CompositeRegistry, property_type, resource_type


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Registry Cleanup Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_state_fixture(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Reset process-wide state before and after each test.

    Backend registry, composite registry, settings cache and bound log
    context are all global; no test may leak them into another.
    """
    for name in ("TESSERA_LOG_LEVEL", "TESSERA_LOG_FORMAT", "TESSERA_OUTPUT_DIR", "TESSERA_BOUNDARY_MARKER"):
        monkeypatch.delenv(name, raising=False)
    clear_registry()
    CompositeRegistry.clear()
    clear_settings_cache()
    clear_context()
    configure_logging(level="WARNING", json_format=False)
    yield
    clear_registry()
    CompositeRegistry.clear()
    clear_settings_cache()
    clear_context()
    structlog.reset_defaults()


# =============================================================================
# Entity Fixtures
# =============================================================================


@pytest.fixture
def bucket_type() -> type:
    """Resource constructor of a fake ``test`` backend with ``arn`` / ``name`` attributes."""
    return resource_type("Test::Bucket", "test", {"arn": "Arn", "name": "BucketName"})


@pytest.fixture
def function_type() -> type:
    """Resource constructor of a fake ``test`` backend with an ``arn`` attribute."""
    return resource_type("Test::Function", "test", {"arn": "Arn"})


@pytest.fixture
def policy_type() -> type:
    """Property constructor of the fake ``test`` backend."""
    return property_type("Test::Policy", "test")


# =============================================================================
# Project Tree Fixtures
# =============================================================================


@pytest.fixture
def project_dir(tmp_path: Path) -> Callable[..., Path]:
    """
    Write a project tree and return its root.

    Keys are paths relative to the root, values are file contents
    (dedented). Calling it twice with different ``name`` values builds
    sibling projects.
    """

    def _write(files: dict[str, str], name: str = "project") -> Path:
        root = tmp_path / name
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content), encoding="utf-8")
        root.mkdir(parents=True, exist_ok=True)
        return root

    return _write
