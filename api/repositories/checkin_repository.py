"""Check-in repository for database operations."""

from collections.abc import Sequence
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from models import Checkin
from repositories.utils import log_slow_query


class CheckinRepository:
    """Repository for Checkin database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("list_checkins")
    async def list_for_user(
        self,
        user_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Checkin]:
        """A user's check-ins, optionally limited to an inclusive date range."""
        query = select(Checkin).where(Checkin.user_id == user_id)
        if start_date is not None:
            query = query.where(Checkin.checkin_date >= start_date)
        if end_date is not None:
            query = query.where(Checkin.checkin_date <= end_date)
        result = await self.db.execute(
            query.order_by(Checkin.checkin_date, Checkin.id)
        )
        return list(result.scalars().all())

    @log_slow_query("list_checkins_for_users")
    async def list_for_users(
        self,
        user_ids: Sequence[str],
        start_date: date,
        end_date: date,
    ) -> dict[str, list[Checkin]]:
        """Check-ins in [start_date, end_date] grouped by user."""
        grouped: dict[str, list[Checkin]] = {user_id: [] for user_id in user_ids}
        if not user_ids:
            return grouped

        result = await self.db.execute(
            select(Checkin)
            .where(
                Checkin.user_id.in_(user_ids),
                Checkin.checkin_date >= start_date,
                Checkin.checkin_date <= end_date,
            )
            .order_by(Checkin.checkin_date, Checkin.id)
        )
        for checkin in result.scalars().all():
            grouped.setdefault(checkin.user_id, []).append(checkin)
        return grouped

    @log_slow_query("get_checkin_dates")
    async def get_dates(self, user_id: str) -> list[date]:
        """Distinct check-in dates, most recent first."""
        result = await self.db.execute(
            select(Checkin.checkin_date)
            .where(Checkin.user_id == user_id)
            .distinct()
            .order_by(Checkin.checkin_date.desc())
        )
        return list(result.scalars().all())

    @log_slow_query("count_checkins")
    async def count_for_user(self, user_id: str) -> int:
        result = await self.db.execute(
            select(func.count(Checkin.id)).where(Checkin.user_id == user_id)
        )
        return result.scalar_one()

    @log_slow_query("count_checkins_by_habit")
    async def count_by_habit(
        self, user_id: str, start_date: date, end_date: date
    ) -> dict[int, int]:
        """Check-in counts per habit over an inclusive date range."""
        result = await self.db.execute(
            select(Checkin.habit_id, func.count(Checkin.id))
            .where(
                Checkin.user_id == user_id,
                Checkin.checkin_date >= start_date,
                Checkin.checkin_date <= end_date,
            )
            .group_by(Checkin.habit_id)
        )
        return {habit_id: count for habit_id, count in result.all()}

    @log_slow_query("create_checkin")
    async def create_if_absent(
        self, user_id: str, habit_id: int, checkin_date: date
    ) -> bool:
        """Insert a check-in. Returns False when the day was already checked in."""
        stmt = (
            pg_insert(Checkin)
            .values(user_id=user_id, habit_id=habit_id, checkin_date=checkin_date)
            .on_conflict_do_nothing(
                index_elements=["user_id", "habit_id", "checkin_date"]
            )
            .returning(Checkin.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None
