"""Seed local DB with two friends, their habits, check-ins and battles.

Creates a completed battle from last week and an active one starting today,
so the battle list, calendar and leaderboard all have something to show.
Re-running is safe: check-ins and friendships are inserted with
ON CONFLICT DO NOTHING and existing habits/battles are wiped first with --wipe.
"""

from __future__ import annotations

import argparse
import asyncio
import random
from datetime import date, timedelta

from sqlalchemy import delete, or_
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import (
    create_engine,
    create_session_maker,
    dispose_engine,
    session_scope,
)
from core.logger import configure_logging, get_logger
from models import Battle, Checkin, Friendship, FriendshipStatus, Habit, User
from repositories.battle_repository import BattleRepository
from repositories.checkin_repository import CheckinRepository
from repositories.habit_repository import HabitRepository
from services.calendar_service import battle_window

logger = get_logger(__name__)

DEFAULT_USERS = ("testuser1", "testuser2")
DEFAULT_SEED = 42
DEFAULT_DAYS = 28

DEMO_HABITS = (
    ("Morning run", 3),
    ("Read 20 pages", 5),
    ("Meditate", 7),
    ("No sugar", 4),
)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed local DB with demo battle data")
    parser.add_argument("--user-id", action="append", dest="user_ids")
    parser.add_argument("--days", type=int, default=DEFAULT_DAYS)
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    parser.add_argument(
        "--checkin-rate",
        type=float,
        default=0.6,
        help="Chance that a habit is checked in on a given day (default 0.6)",
    )
    parser.add_argument(
        "--wipe",
        action="store_true",
        help="Delete existing habits and battles for the users first",
    )
    return parser.parse_args(argv)


async def _wipe(db: AsyncSession, user_ids: list[str]) -> None:
    await db.execute(delete(Battle).where(Battle.owner_id.in_(user_ids)))
    await db.execute(delete(Habit).where(Habit.user_id.in_(user_ids)))
    await db.execute(
        delete(Friendship).where(
            or_(Friendship.user_id.in_(user_ids), Friendship.friend_id.in_(user_ids))
        )
    )


async def _ensure_users(db: AsyncSession, user_ids: list[str]) -> None:
    stmt = (
        pg_insert(User)
        .values([{"id": user_id, "username": user_id} for user_id in user_ids])
        .on_conflict_do_nothing(index_elements=["id"])
    )
    await db.execute(stmt)


async def _ensure_friendship(db: AsyncSession, user_id: str, friend_id: str) -> None:
    stmt = (
        pg_insert(Friendship)
        .values(
            user_id=user_id,
            friend_id=friend_id,
            status=FriendshipStatus.ACCEPTED,
        )
        .on_conflict_do_nothing(index_elements=["user_id", "friend_id"])
    )
    await db.execute(stmt)


async def seed(
    db: AsyncSession,
    user_ids: list[str],
    *,
    days: int,
    checkin_rate: float,
    rng: random.Random,
    today: date,
) -> dict[str, int]:
    """Insert demo rows. Returns counts per table."""
    await _ensure_users(db, user_ids)
    for friend_id in user_ids[1:]:
        await _ensure_friendship(db, user_ids[0], friend_id)

    habit_repo = HabitRepository(db)
    checkin_repo = CheckinRepository(db)
    counts = {"habits": 0, "checkins": 0, "battles": 0}

    for user_id in user_ids:
        for name, target in DEMO_HABITS:
            habit = await habit_repo.create(user_id, name, target)
            counts["habits"] += 1
            for offset in range(days):
                if rng.random() < checkin_rate:
                    created = await checkin_repo.create_if_absent(
                        user_id, habit.id, today - timedelta(days=offset)
                    )
                    counts["checkins"] += int(created)

    battle_repo = BattleRepository(db)
    owner, opponent = user_ids[0], user_ids[1]
    for start in (today - timedelta(days=8), today):
        start_date, end_date = battle_window(start)
        await battle_repo.create(
            name=f"{owner} vs {opponent}",
            owner_id=owner,
            start_date=start_date,
            end_date=end_date,
            member_ids=[owner, opponent],
        )
        counts["battles"] += 1

    return counts


async def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    configure_logging()
    user_ids = args.user_ids or list(DEFAULT_USERS)
    if len(user_ids) < 2:
        raise SystemExit("Need at least two users to seed a battle")

    engine = create_engine()
    session_maker = create_session_maker(engine)
    try:
        async with session_scope(session_maker) as db:
            if args.wipe:
                await _wipe(db, user_ids)
            counts = await seed(
                db,
                user_ids,
                days=args.days,
                checkin_rate=args.checkin_rate,
                rng=random.Random(args.seed),
                today=date.today(),
            )
        logger.info("seed.complete", users=user_ids, **counts)
    finally:
        await dispose_engine(engine)


if __name__ == "__main__":
    asyncio.run(main())
