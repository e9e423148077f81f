"""Calendar-date helpers shared by the quota, streak and battle scorers.

Check-ins are stored as timezone-naive calendar dates, so every boundary here
is a plain ``date``. The only timezone-aware step is turning "now" into the
caller's local date (``local_today``); everything after that is date math.

Weeks start on Monday. ``date.weekday()`` is already Monday=0, which is the
``(dow + 6) % 7`` offset for a Sunday=0 weekday index.
"""

import calendar
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

BATTLE_LENGTH_DAYS = 7


class DatedCheckin(Protocol):
    habit_id: int
    checkin_date: date


def is_valid_timezone(tz_name: str) -> bool:
    if not tz_name:
        return False
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def local_today(tz_name: str, now: datetime | None = None) -> date:
    """Calendar date of ``now`` in ``tz_name``. Unknown zones fall back to UTC.

    Naive ``now`` values are treated as UTC.
    """
    tz = ZoneInfo(tz_name) if is_valid_timezone(tz_name) else UTC
    if now is None:
        now = datetime.now(UTC)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now.astimezone(tz).date()


def coerce_date(value: object) -> date | None:
    """Accept a date, a datetime (its date part) or an ISO string; else None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return None
    return None


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def week_bounds(day: date) -> tuple[date, date]:
    """Inclusive Monday..Sunday window containing ``day``."""
    monday = week_start(day)
    return monday, monday + timedelta(days=6)


def battle_window(start: date) -> tuple[date, date]:
    """Inclusive 7-day battle window beginning on ``start``."""
    return start, start + timedelta(days=BATTLE_LENGTH_DAYS - 1)


def in_range(day: date, start: date, end: date) -> bool:
    return start <= day <= end


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month. Raises ValueError on bad input."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1..12, got {month}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


@dataclass(frozen=True)
class CalendarDay:
    date: date
    count: int
    habit_names: tuple[str, ...]


@dataclass(frozen=True)
class MonthCalendar:
    year: int
    month: int
    start_date: date
    end_date: date
    total_checkins: int
    days: list[CalendarDay]


def build_month_calendar(
    checkins: Iterable[DatedCheckin],
    habit_names: Mapping[int, str],
    year: int,
    month: int,
) -> MonthCalendar:
    """One entry per day of the month with the habits checked in that day.

    Check-ins outside the month are ignored. Habits missing from
    ``habit_names`` are listed as "Unknown Habit".
    """
    first, last = month_bounds(year, month)

    names_by_day: dict[date, list[str]] = defaultdict(list)
    total = 0
    for checkin in checkins:
        day = coerce_date(checkin.checkin_date)
        if day is None or not in_range(day, first, last):
            continue
        names_by_day[day].append(habit_names.get(checkin.habit_id, "Unknown Habit"))
        total += 1

    days = []
    for offset in range((last - first).days + 1):
        day = first + timedelta(days=offset)
        names = sorted(names_by_day.get(day, []))
        days.append(CalendarDay(date=day, count=len(names), habit_names=tuple(names)))

    return MonthCalendar(
        year=year,
        month=month,
        start_date=first,
        end_date=last,
        total_checkins=total,
        days=days,
    )
