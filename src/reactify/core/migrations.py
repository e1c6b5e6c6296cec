"""Reusable migration runner for both the CLI and tests."""

import asyncio
from pathlib import Path

from alembic.config import Config

from alembic import command

ALEMBIC_DIR = Path(__file__).resolve().parents[2] / "alembic"


def get_alembic_config() -> Config:
    """Build an Alembic config pointing at the bundled migration scripts."""
    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    return alembic_cfg


def run_migrations_sync(revision: str = "head") -> None:
    """Run Alembic migrations synchronously."""
    command.upgrade(get_alembic_config(), revision)


async def run_migrations_async(revision: str = "head") -> None:
    """Run Alembic migrations from async context.

    Alembic's env.py drives a blocking engine, so it runs in a worker thread.
    """
    await asyncio.to_thread(run_migrations_sync, revision)
