"""Dashboard service.

Fetches a user's habits and check-ins and feeds them to the pure quota,
streak and calendar calculators.
"""

from dataclasses import dataclass
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger
from core.wide_event import set_wide_event_fields
from repositories.checkin_repository import CheckinRepository
from repositories.habit_repository import HabitRepository
from services.calendar_service import (
    MonthCalendar,
    build_month_calendar,
    month_bounds,
    week_bounds,
)
from services.quota_service import QuotaStats, compute_quota_stats
from services.streaks_service import StreakData, compute_streaks

logger = get_logger(__name__)


@dataclass(frozen=True)
class DashboardData:
    quota: QuotaStats
    streak: StreakData


async def get_quota_stats(db: AsyncSession, user_id: str, today: date) -> QuotaStats:
    """Quota completion for the current Monday-Sunday week."""
    habits = await HabitRepository(db).list_for_user(user_id)

    checkin_repo = CheckinRepository(db)
    start, end = week_bounds(today)
    week_checkins = await checkin_repo.list_for_user(user_id, start, end)
    total = await checkin_repo.count_for_user(user_id)

    stats = compute_quota_stats(habits, week_checkins, today=today, total_checkins=total)
    set_wide_event_fields(
        quota_met=stats.weekly_quotas_met, quota_habits=stats.total_habits
    )
    return stats


async def get_streak_data(db: AsyncSession, user_id: str, today: date) -> StreakData:
    """Daily and weekly streaks across all of the user's habits."""
    dates = await CheckinRepository(db).get_dates(user_id)
    streak = compute_streaks(dates, today=today)
    set_wide_event_fields(
        daily_streak=streak.daily_streak, weekly_streak=streak.weekly_streak
    )
    return streak


async def get_dashboard(db: AsyncSession, user_id: str, today: date) -> DashboardData:
    """Quota stats and streaks together.

    Queries run one after another: an AsyncSession can't run them concurrently.
    """
    quota = await get_quota_stats(db, user_id, today)
    streak = await get_streak_data(db, user_id, today)
    return DashboardData(quota=quota, streak=streak)


async def get_calendar_month(
    db: AsyncSession, user_id: str, year: int, month: int
) -> MonthCalendar:
    """Per-day check-ins for one calendar month.

    Raises:
        ValueError: If month is outside 1..12.
    """
    first, last = month_bounds(year, month)
    habits = await HabitRepository(db).list_for_user(user_id)
    checkins = await CheckinRepository(db).list_for_user(user_id, first, last)

    calendar = build_month_calendar(
        checkins, {habit.id: habit.name for habit in habits}, year, month
    )
    logger.debug(
        "calendar.built",
        year=year,
        month=month,
        total_checkins=calendar.total_checkins,
    )
    return calendar
