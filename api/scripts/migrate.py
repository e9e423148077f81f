"""Alembic entry points shared by ``cli.py migrate`` and app startup.

    python -m cli migrate                  # upgrade to head
    python -m cli migrate downgrade -1
    python -m cli migrate current
    python -m cli migrate upgrade --sql    # print SQL instead of applying
"""

from __future__ import annotations

import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

from core.logger import get_logger

logger = get_logger(__name__)

API_DIR = Path(__file__).resolve().parents[1]

ACTIONS = ("upgrade", "downgrade", "current", "history")

DEFAULT_TARGETS = {"upgrade": "head", "downgrade": "-1"}


def get_alembic_config(database_url: str | None = None) -> Config:
    """Alembic config rooted at api/, usable from any working directory.

    ``database_url`` overrides DATABASE_URL for this run only.
    """
    if str(API_DIR) not in sys.path:
        sys.path.insert(0, str(API_DIR))

    cfg = Config(str(API_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(API_DIR / "alembic"))
    if database_url:
        cfg.set_main_option("sqlalchemy.url", database_url)
    return cfg


def run_migration(
    action: str,
    target: str | None = None,
    *,
    sql: bool = False,
    database_url: str | None = None,
) -> None:
    """Run one alembic command.

    Raises:
        ValueError: If ``action`` is not one of ACTIONS, or ``sql`` is
            requested for a read-only action.
    """
    if action not in ACTIONS:
        raise ValueError(f"Unknown migration action: {action}")
    if sql and action not in DEFAULT_TARGETS:
        raise ValueError(f"--sql only applies to upgrade/downgrade, not {action}")

    cfg = get_alembic_config(database_url)
    revision = target or DEFAULT_TARGETS.get(action)

    logger.info("migrations.starting", action=action, target=revision, sql=sql)
    match action:
        case "upgrade":
            command.upgrade(cfg, revision, sql=sql)
        case "downgrade":
            command.downgrade(cfg, revision, sql=sql)
        case "current":
            command.current(cfg, verbose=True)
        case "history":
            command.history(cfg)
    logger.info("migrations.complete", action=action, target=revision)
