"""Database engine management."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from src.reactify.core.config import get_settings

_engine: AsyncEngine | None = None


def _get_engine_kwargs() -> dict[str, Any]:
    """Get engine options for the configured backend."""
    settings = get_settings()
    if settings.is_sqlite:
        # SQLite has no server-side pool; wait on locks instead of failing fast
        return {"connect_args": {"timeout": 30}}
    return {
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_pre_ping": True,
    }


def get_engine() -> AsyncEngine:
    """Get or create the database engine singleton."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(settings.database_url, **_get_engine_kwargs())
    return _engine


async def dispose_engine() -> None:
    """Dispose the database engine. Call during shutdown."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None


def get_sync_url() -> str:
    """Convert the async database URL to its sync driver equivalent.

    Used by Alembic, which runs migrations with a blocking connection.
    """
    url = get_settings().database_url
    return url.replace("+aiosqlite", "").replace("+asyncpg", "")
