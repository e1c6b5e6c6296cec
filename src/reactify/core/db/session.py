"""Database session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel

from src.reactify.core.db.engine import get_engine


@asynccontextmanager
async def get_session(
    engine: AsyncEngine | None = None,
) -> AsyncGenerator[AsyncSession]:
    """Create a database session.

    Tenant isolation is enforced by the repositories (every query filters
    on tenant_id), so a single session type serves all tenants.

    Args:
        engine: Optional engine override for testing.

    Yields:
        AsyncSession bound to the engine.
    """
    if engine is None:
        engine = get_engine()

    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create all tables from model metadata.

    For throwaway databases and tests; persistent databases use migrations.
    """
    # Register tables on the metadata
    from src.reactify.models import Project  # noqa: F401

    if engine is None:
        engine = get_engine()

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
