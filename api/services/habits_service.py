"""Habit management business logic.

Names are trimmed and must be 1-100 characters; the weekly target must be
1-7. Both rules are checked here before anything reaches the database.
"""

from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger
from core.wide_event import set_wide_event_fields
from models import MAX_TARGET_PER_WEEK, MIN_TARGET_PER_WEEK, Habit, ScheduleKind
from repositories.checkin_repository import CheckinRepository
from repositories.habit_repository import HabitRepository
from services.calendar_service import week_bounds
from services.users_service import ensure_user_exists

logger = get_logger(__name__)

MAX_HABIT_NAME_LENGTH = 100


class HabitNotFoundError(Exception):
    """Raised when a habit does not exist or belongs to another user."""


class InvalidHabitError(Exception):
    """Raised when a habit name or target is out of bounds."""


@dataclass(frozen=True)
class HabitWithProgress:
    id: int
    name: str
    target_per_week: int
    schedule_kind: ScheduleKind
    created_at: datetime
    done_today: bool
    done_this_week: int


def normalize_habit_name(name: str) -> str:
    """Trimmed name. Raises InvalidHabitError when empty or too long."""
    cleaned = name.strip()
    if not cleaned:
        raise InvalidHabitError("Habit name cannot be empty")
    if len(cleaned) > MAX_HABIT_NAME_LENGTH:
        raise InvalidHabitError(
            f"Habit name must be at most {MAX_HABIT_NAME_LENGTH} characters"
        )
    return cleaned


def validate_target_per_week(target_per_week: int) -> int:
    if not MIN_TARGET_PER_WEEK <= target_per_week <= MAX_TARGET_PER_WEEK:
        raise InvalidHabitError(
            f"Target per week must be between {MIN_TARGET_PER_WEEK} "
            f"and {MAX_TARGET_PER_WEEK}"
        )
    return target_per_week


async def list_habits_with_progress(
    db: AsyncSession, user_id: str, today: date
) -> list[HabitWithProgress]:
    """The user's habits with today's status and this week's check-in count."""
    habits = await HabitRepository(db).list_for_user(user_id)
    if not habits:
        return []

    checkin_repo = CheckinRepository(db)
    start, end = week_bounds(today)
    week_counts = await checkin_repo.count_by_habit(user_id, start, end)
    today_counts = await checkin_repo.count_by_habit(user_id, today, today)

    return [
        HabitWithProgress(
            id=habit.id,
            name=habit.name,
            target_per_week=habit.target_per_week,
            schedule_kind=habit.schedule_kind,
            created_at=habit.created_at,
            done_today=today_counts.get(habit.id, 0) > 0,
            done_this_week=week_counts.get(habit.id, 0),
        )
        for habit in habits
    ]


async def create_habit(
    db: AsyncSession,
    user_id: str,
    name: str,
    target_per_week: int,
    schedule_kind: ScheduleKind = ScheduleKind.DAILY,
) -> Habit:
    """Create a habit for the user.

    Raises:
        InvalidHabitError: If the name or target is out of bounds.
    """
    cleaned = normalize_habit_name(name)
    validate_target_per_week(target_per_week)

    await ensure_user_exists(db, user_id)
    habit = await HabitRepository(db).create(
        user_id, cleaned, target_per_week, schedule_kind
    )

    set_wide_event_fields(habit_id=habit.id, habit_action="created")
    logger.info("habit.created", habit_id=habit.id, user_id=user_id)
    return habit


async def update_habit(
    db: AsyncSession,
    user_id: str,
    habit_id: int,
    *,
    name: str | None = None,
    target_per_week: int | None = None,
    schedule_kind: ScheduleKind | None = None,
) -> Habit:
    """Rename or retarget a habit. Omitted fields are left unchanged.

    Raises:
        HabitNotFoundError: If the habit doesn't exist for this user.
        InvalidHabitError: If the new name or target is out of bounds.
    """
    cleaned = normalize_habit_name(name) if name is not None else None
    if target_per_week is not None:
        validate_target_per_week(target_per_week)

    habit_repo = HabitRepository(db)
    habit = await habit_repo.get_for_user(user_id, habit_id)
    if habit is None:
        raise HabitNotFoundError(f"Habit not found: {habit_id}")

    habit = await habit_repo.update(
        habit,
        name=cleaned,
        target_per_week=target_per_week,
        schedule_kind=schedule_kind,
    )
    set_wide_event_fields(habit_id=habit.id, habit_action="updated")
    return habit


async def delete_habit(db: AsyncSession, user_id: str, habit_id: int) -> None:
    """Delete a habit and its check-ins.

    Raises:
        HabitNotFoundError: If the habit doesn't exist for this user.
    """
    deleted = await HabitRepository(db).delete(user_id, habit_id)
    if not deleted:
        raise HabitNotFoundError(f"Habit not found: {habit_id}")

    set_wide_event_fields(habit_id=habit_id, habit_action="deleted")
    logger.info("habit.deleted", habit_id=habit_id, user_id=user_id)
