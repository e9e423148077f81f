from __future__ import annotations

import sys
import time
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import Connection, create_engine, text

# api/ must be importable when alembic runs from another directory
sys.path.insert(0, str(Path(__file__).parent.parent))

import models  # noqa: F401  (registers habits, checkins, battles, ...)
from alembic import context
from core.config import get_settings
from core.database import Base
from core.logger import get_logger

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

logger = get_logger("alembic.env")

target_metadata = Base.metadata

# Shared by every worker that runs migrations during startup
HABIT_BATTLES_MIGRATION_LOCK = 518204733

LOCK_WAIT_SECONDS = 120
LOCK_POLL_SECONDS = 2


def sync_database_url() -> str:
    """psycopg2 URL for migrations.

    ``sqlalchemy.url`` in the alembic config wins when set (``migrate.py``
    passes one for ad-hoc targets); otherwise DATABASE_URL is used with its
    asyncpg driver swapped out.
    """
    url = config.get_main_option("sqlalchemy.url") or get_settings().database_url
    return url.replace("+asyncpg", "+psycopg2")


def run_migrations_offline() -> None:
    """Emit SQL for the pending revisions without connecting."""
    context.configure(
        url=sync_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def _wait_for_lock(connection: Connection) -> None:
    deadline = time.monotonic() + LOCK_WAIT_SECONDS
    while time.monotonic() < deadline:
        acquired = connection.execute(
            text("SELECT pg_try_advisory_lock(:key)"),
            {"key": HABIT_BATTLES_MIGRATION_LOCK},
        ).scalar()
        if acquired:
            connection.commit()
            logger.info("migrations.lock_acquired")
            return
        logger.debug("migrations.lock_waiting")
        time.sleep(LOCK_POLL_SECONDS)

    raise RuntimeError(
        f"Migration lock not acquired within {LOCK_WAIT_SECONDS}s; "
        "another worker may still be migrating."
    )


def run_migrations_online() -> None:
    """Apply revisions over one psycopg2 connection, one worker at a time."""
    engine = create_engine(sync_database_url())

    with engine.connect() as connection:
        _wait_for_lock(connection)
        try:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                compare_type=True,
            )
            with context.begin_transaction():
                context.run_migrations()
        finally:
            connection.execute(
                text("SELECT pg_advisory_unlock(:key)"),
                {"key": HABIT_BATTLES_MIGRATION_LOCK},
            )
            logger.info("migrations.lock_released")

    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
