"""Streak calculation utilities.

A streak counts consecutive days (or Monday-start weeks) with at least one
check-in on any habit. The run must reach today or yesterday (this week or
last week): a user who hasn't checked in yet today keeps the streak built
through yesterday.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from services.calendar_service import coerce_date, week_start

ONE_DAY = timedelta(days=1)
ONE_WEEK = timedelta(days=7)


@dataclass(frozen=True)
class StreakData:
    daily_streak: int
    weekly_streak: int
    last_checkin_date: date | None


def _distinct_dates_desc(checkin_dates: Iterable[object], today: date) -> list[date]:
    """Valid, deduplicated dates up to ``today``, most recent first."""
    unique = set()
    for value in checkin_dates:
        day = coerce_date(value)
        if day is not None and day <= today:
            unique.add(day)
    return sorted(unique, reverse=True)


def _consecutive_run(points: list[date], anchors: tuple[date, date], step: timedelta) -> int:
    """Length of the unbroken run starting at ``points[0]``.

    ``points`` is sorted descending and deduplicated. The run only counts if
    it starts on one of ``anchors``.
    """
    if not points or points[0] not in anchors:
        return 0

    streak = 1
    expected = points[0] - step
    for point in points[1:]:
        if point != expected:
            break
        streak += 1
        expected -= step
    return streak


def compute_streaks(checkin_dates: Iterable[object] | None, *, today: date) -> StreakData:
    """Calculate daily and weekly streaks from check-in dates.

    Args:
        checkin_dates: Check-in dates in any order, possibly repeated (one per
            habit per day). Entries that are not dates or ISO date strings are
            skipped, as are dates after ``today``.
        today: The caller's local calendar date.

    Returns:
        StreakData; zeroed when there is nothing to count.
    """
    try:
        days = _distinct_dates_desc(checkin_dates or (), today)
    except TypeError:
        days = []

    if not days:
        return StreakData(daily_streak=0, weekly_streak=0, last_checkin_date=None)

    daily = _consecutive_run(days, (today, today - ONE_DAY), ONE_DAY)

    weeks = sorted({week_start(day) for day in days}, reverse=True)
    this_week = week_start(today)
    weekly = _consecutive_run(weeks, (this_week, this_week - ONE_WEEK), ONE_WEEK)

    return StreakData(
        daily_streak=daily,
        weekly_streak=weekly,
        last_checkin_date=days[0],
    )
