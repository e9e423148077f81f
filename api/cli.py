#!/usr/bin/env python3
"""CLI for Habit Battles API management tasks.

Usage:
    python -m cli <command>

Commands:
    migrate    Run database migrations (upgrade to head by default)
    seed       Insert demo users, habits, check-ins and battles
"""

import argparse
import asyncio
import sys

from core.logger import configure_logging


def cmd_migrate(action: str, target: str | None, sql: bool) -> int:
    from scripts.migrate import run_migration

    run_migration(action, target, sql=sql)
    return 0


def cmd_seed(wipe: bool) -> int:
    """Seed demo data for two friends."""
    from scripts import seed_demo_data

    asyncio.run(seed_demo_data.main(["--wipe"] if wipe else []))
    return 0


def build_parser() -> argparse.ArgumentParser:
    from scripts.migrate import ACTIONS

    parser = argparse.ArgumentParser(
        prog="habit-battles",
        description="Habit Battles API CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    migrate_parser = subparsers.add_parser("migrate", help="Run database migrations")
    migrate_parser.add_argument(
        "action", nargs="?", default="upgrade", choices=ACTIONS
    )
    migrate_parser.add_argument(
        "target", nargs="?", default=None, help="Revision (head / -1 by default)"
    )
    migrate_parser.add_argument(
        "--sql", action="store_true", help="Print SQL instead of applying it"
    )

    seed_parser = subparsers.add_parser("seed", help="Insert demo data")
    seed_parser.add_argument(
        "--wipe",
        action="store_true",
        help="Delete the demo users' habits and battles first",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "migrate":
        return cmd_migrate(args.action, args.target, args.sql)
    elif args.command == "seed":
        return cmd_seed(args.wipe)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
