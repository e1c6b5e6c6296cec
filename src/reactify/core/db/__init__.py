"""Database utilities - engine, session, migrations."""

from src.reactify.core.db.engine import (
    dispose_engine,
    get_engine,
    get_sync_url,
)
from src.reactify.core.db.session import get_session, init_db

__all__ = [
    # Engine (async)
    "dispose_engine",
    "get_engine",
    # Sync URL (for Alembic)
    "get_sync_url",
    # Session
    "get_session",
    "init_db",
]
