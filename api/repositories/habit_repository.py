"""Habit repository for database operations."""

from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Habit, ScheduleKind
from repositories.utils import log_slow_query


class HabitRepository:
    """Repository for Habit database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("list_habits")
    async def list_for_user(self, user_id: str) -> list[Habit]:
        """A user's habits in creation order."""
        result = await self.db.execute(
            select(Habit)
            .where(Habit.user_id == user_id)
            .order_by(Habit.created_at, Habit.id)
        )
        return list(result.scalars().all())

    @log_slow_query("list_habits_for_users")
    async def list_for_users(self, user_ids: Sequence[str]) -> dict[str, list[Habit]]:
        """Habits grouped by owner, each list in creation order."""
        grouped: dict[str, list[Habit]] = {user_id: [] for user_id in user_ids}
        if not user_ids:
            return grouped

        result = await self.db.execute(
            select(Habit)
            .where(Habit.user_id.in_(user_ids))
            .order_by(Habit.created_at, Habit.id)
        )
        for habit in result.scalars().all():
            grouped.setdefault(habit.user_id, []).append(habit)
        return grouped

    @log_slow_query("get_habit")
    async def get_for_user(self, user_id: str, habit_id: int) -> Habit | None:
        """A habit only if it belongs to ``user_id``."""
        result = await self.db.execute(
            select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
        )
        return result.scalar_one_or_none()

    @log_slow_query("create_habit")
    async def create(
        self,
        user_id: str,
        name: str,
        target_per_week: int,
        schedule_kind: ScheduleKind = ScheduleKind.DAILY,
    ) -> Habit:
        habit = Habit(
            user_id=user_id,
            name=name,
            target_per_week=target_per_week,
            schedule_kind=schedule_kind,
        )
        self.db.add(habit)
        await self.db.flush()
        await self.db.refresh(habit)
        return habit

    @log_slow_query("update_habit")
    async def update(
        self,
        habit: Habit,
        *,
        name: str | None = None,
        target_per_week: int | None = None,
        schedule_kind: ScheduleKind | None = None,
    ) -> Habit:
        """Update the given fields; None leaves a field unchanged."""
        if name is not None:
            habit.name = name
        if target_per_week is not None:
            habit.target_per_week = target_per_week
        if schedule_kind is not None:
            habit.schedule_kind = schedule_kind
        await self.db.flush()
        return habit

    @log_slow_query("delete_habit")
    async def delete(self, user_id: str, habit_id: int) -> bool:
        """Delete a habit (check-ins cascade). Returns False if nothing matched."""
        result = await self.db.execute(
            delete(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
        )
        return result.rowcount > 0
