"""Integration test fixtures for database and filesystem operations.

Each test gets its own SQLite database file and asset root under tmp_path.
Uses polyfactory for type-safe test data generation.
"""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from src.reactify.core.config import Settings, get_settings
from src.reactify.core.db import get_session, init_db
from src.reactify.core.storage import ProjectStorage
from src.reactify.dependencies import get_project_service
from src.reactify.repositories import ProjectRepository
from src.reactify.services import ProjectService

TEST_TENANT = "default"


@pytest.fixture(scope="function")
async def engine(settings: Settings) -> AsyncGenerator[AsyncEngine]:
    """Create test database engine with all tables."""
    test_engine = create_async_engine(settings.database_url, poolclass=NullPool)
    await init_db(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Provide an async session for database operations.

    Repository mutations commit on their own; tests never need to commit.
    """
    async with get_session(engine) as session:
        yield session


@pytest.fixture
def project_repo(db_session: AsyncSession) -> ProjectRepository:
    """Project repository for the default test tenant."""
    return ProjectRepository(db_session, TEST_TENANT)


@pytest.fixture
def project_service(
    db_session: AsyncSession, settings: Settings
) -> ProjectService:
    """Fully wired project service for the default test tenant."""
    return get_project_service(db_session, TEST_TENANT, settings)


@pytest.fixture
def archives(tmp_path: Path) -> Path:
    """Directory for archives built by a test (outside the asset root)."""
    path = tmp_path / "archives"
    path.mkdir()
    return path


@pytest.fixture
def cli_env(
    tmp_path: Path, projects_root: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[Settings]:
    """Point the process-wide settings at a throwaway database and asset root.

    The CLI reads configuration from the environment, so this patches the
    environment and clears the settings cache around the test.
    """
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("PROJECTS_ROOT", str(projects_root))
    monkeypatch.setenv("DEFAULT_TENANT", TEST_TENANT)
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def cli_storage(cli_env: Settings) -> ProjectStorage:
    """Storage layout matching the CLI's configuration."""
    return ProjectStorage(cli_env.projects_root)
