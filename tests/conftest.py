"""Root test fixtures shared across all test types.

This conftest contains fixtures that can be used by both unit and integration tests.
Database-specific fixtures are in tests/integration/conftest.py.
"""

import os

# Set APP_ENV to testing before any app imports
os.environ.setdefault("APP_ENV", "testing")

# ruff: noqa: E402 - Imports must be after env var setup
from pathlib import Path

import pytest

from src.reactify.core.config import Settings, get_settings
from src.reactify.core.storage import ProjectStorage

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


@pytest.fixture
def projects_root(tmp_path: Path) -> Path:
    """Asset root for a single test."""
    return tmp_path / "projects"


@pytest.fixture
def settings(tmp_path: Path, projects_root: Path) -> Settings:
    """Settings pointing at a throwaway database and asset root."""
    return Settings(
        app_env="testing",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}",
        projects_root=projects_root,
    )


@pytest.fixture
def storage(settings: Settings) -> ProjectStorage:
    """Asset tree layout rooted at the test's projects_root."""
    return ProjectStorage(settings.projects_root)
