"""Check-in business logic.

Check-ins are only ever recorded for the caller's today and are never
removed individually; they go away only with their habit. Past battle
windows and streaks are therefore fixed once the day is over.

Checking in is idempotent: a second check-in for the same habit and day is
reported as not created rather than as an error.
"""

from dataclasses import dataclass
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger
from core.wide_event import set_wide_event_fields
from repositories.checkin_repository import CheckinRepository
from repositories.habit_repository import HabitRepository
from services.habits_service import HabitNotFoundError

logger = get_logger(__name__)


class InvalidCheckinDateError(Exception):
    """Raised when checking in for any day other than the caller's today."""


@dataclass(frozen=True)
class CheckinResult:
    habit_id: int
    checkin_date: date
    created: bool


async def check_in(
    db: AsyncSession,
    user_id: str,
    habit_id: int,
    checkin_date: date,
    today: date,
) -> CheckinResult:
    """Record that the habit was done today.

    ``checkin_date`` is the day the client believes it is; it must match
    ``today`` resolved from the caller's timezone.

    Raises:
        InvalidCheckinDateError: If checkin_date is not today.
        HabitNotFoundError: If the habit doesn't exist for this user.
    """
    if checkin_date != today:
        set_wide_event_fields(checkin_rejected_date=checkin_date.isoformat())
        raise InvalidCheckinDateError(
            f"Check-ins are only accepted for today ({today.isoformat()}), "
            f"got {checkin_date.isoformat()}"
        )

    habit = await HabitRepository(db).get_for_user(user_id, habit_id)
    if habit is None:
        raise HabitNotFoundError(f"Habit not found: {habit_id}")

    created = await CheckinRepository(db).create_if_absent(
        user_id, habit_id, checkin_date
    )

    set_wide_event_fields(
        habit_id=habit_id,
        checkin_date=checkin_date.isoformat(),
        checkin_created=created,
    )
    if created:
        logger.info("checkin.created", habit_id=habit_id, user_id=user_id)
    else:
        logger.debug("checkin.duplicate", habit_id=habit_id, user_id=user_id)

    return CheckinResult(habit_id=habit_id, checkin_date=checkin_date, created=created)
