"""Weekly quota tracking - pure functions.

A habit's quota is met when it has at least ``target_per_week`` check-ins
inside the window. The battle scorer reuses the same tally over a battle's
7-day range.
"""

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from services.calendar_service import DatedCheckin, coerce_date, in_range, week_bounds


class TargetedHabit(Protocol):
    id: int
    name: str
    target_per_week: int


@dataclass(frozen=True)
class HabitProgress:
    habit_id: int
    habit_name: str
    target: int
    completed: int
    is_met: bool


@dataclass(frozen=True)
class QuotaStats:
    weekly_quotas_met: int
    total_checkins: int
    total_habits: int
    week_start: date
    week_end: date
    current_week_progress: list[HabitProgress]


def count_checkins_in_range(
    checkins: Iterable[DatedCheckin], start: date, end: date
) -> Counter[int]:
    """Check-ins per habit id whose date falls in [start, end] inclusive."""
    counts: Counter[int] = Counter()
    for checkin in checkins:
        day = coerce_date(checkin.checkin_date)
        if day is not None and in_range(day, start, end):
            counts[checkin.habit_id] += 1
    return counts


def tally_habit_progress(
    habits: Sequence[TargetedHabit],
    checkins: Iterable[DatedCheckin],
    start: date,
    end: date,
) -> tuple[int, list[HabitProgress]]:
    """Per-habit progress over [start, end] and the number of habits met.

    Progress keeps the order of ``habits``. Check-ins for habits not in
    ``habits`` are ignored.
    """
    counts = count_checkins_in_range(checkins, start, end)

    met = 0
    progress = []
    for habit in habits:
        completed = counts.get(habit.id, 0)
        is_met = completed >= habit.target_per_week
        if is_met:
            met += 1
        progress.append(
            HabitProgress(
                habit_id=habit.id,
                habit_name=habit.name,
                target=habit.target_per_week,
                completed=completed,
                is_met=is_met,
            )
        )
    return met, progress


def compute_quota_stats(
    habits: Sequence[TargetedHabit],
    checkins: Sequence[DatedCheckin],
    *,
    today: date,
    total_checkins: int | None = None,
) -> QuotaStats:
    """Quota completion for the Monday-Sunday week containing ``today``.

    Args:
        habits: The user's habits in creation order.
        checkins: The user's check-ins; anything outside the week is ignored.
        today: The caller's local calendar date.
        total_checkins: All-time check-in count, when the caller fetched it.
            Defaults to ``len(checkins)``.
    """
    start, end = week_bounds(today)
    met, progress = tally_habit_progress(habits, checkins, start, end)

    return QuotaStats(
        weekly_quotas_met=met,
        total_checkins=len(checkins) if total_checkins is None else total_checkins,
        total_habits=len(habits),
        week_start=start,
        week_end=end,
        current_week_progress=progress,
    )
