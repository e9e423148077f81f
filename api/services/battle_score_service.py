"""Battle scoring - pure functions.

A member's battle score is the number of their habits that reached the
habit's weekly target inside the battle's 7-day window. A battle is exactly
one quota period, so the weekly target is applied once across the window.
"""

from collections.abc import Hashable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import TypeVar

from services.calendar_service import DatedCheckin
from services.quota_service import HabitProgress, TargetedHabit, tally_habit_progress


class BattleStatus(StrEnum):
    ACTIVE = "active"
    COMPLETED = "completed"


class Standing(StrEnum):
    WINNING = "winning"
    TIED = "tied"
    LOSING = "losing"


@dataclass(frozen=True)
class BattleScore:
    score: int
    total_habits: int
    habit_progress: list[HabitProgress]


EMPTY_SCORE = BattleScore(score=0, total_habits=0, habit_progress=[])


def compute_battle_score(
    habits: Sequence[TargetedHabit],
    checkins: Iterable[DatedCheckin],
    range_start: date,
    range_end: date,
) -> BattleScore:
    """Score one member over the inclusive range [range_start, range_end].

    Check-ins outside the range are ignored, so callers may pass a wider
    fetch than the battle window.
    """
    if not habits:
        return EMPTY_SCORE

    met, progress = tally_habit_progress(habits, checkins, range_start, range_end)
    return BattleScore(score=met, total_habits=len(habits), habit_progress=progress)


def summarize_score(score: BattleScore) -> BattleScore:
    """Opponent view of a score: totals only, no habit names or counts."""
    return BattleScore(
        score=score.score, total_habits=score.total_habits, habit_progress=[]
    )


K = TypeVar("K", bound=Hashable)


def determine_winners(scores: Mapping[K, int]) -> frozenset[K]:
    """Every member holding the maximum score. Ties produce several winners."""
    if not scores:
        return frozenset()
    best = max(scores.values())
    return frozenset(member for member, score in scores.items() if score == best)


def battle_status(start_date: date, end_date: date, today: date) -> BattleStatus:
    """Completed once ``today`` is past the end date, active otherwise.

    Battles begin on their creation day, so there is no upcoming state.
    """
    if today > end_date:
        return BattleStatus.COMPLETED
    return BattleStatus.ACTIVE


def battle_standing(my_score: int, opponent_score: int) -> Standing:
    if my_score > opponent_score:
        return Standing.WINNING
    if my_score == opponent_score:
        return Standing.TIED
    return Standing.LOSING


def days_remaining(end_date: date, today: date) -> int:
    """Whole days left after today; 0 on the final day and afterwards."""
    return max(0, (end_date - today).days)
