"""Unit tests for quota_service.

Tests cover:
- A habit meets its quota at exactly target_per_week check-ins
- Only check-ins inside the Monday-Sunday week count
- Progress order follows habit order
- Empty inputs give zeroed stats
"""

from dataclasses import dataclass
from datetime import date, timedelta

import pytest

from services.quota_service import (
    compute_quota_stats,
    count_checkins_in_range,
    tally_habit_progress,
)

pytestmark = pytest.mark.unit

# Saturday; the week is Mon 2026-01-12 .. Sun 2026-01-18
TODAY = date(2026, 1, 17)
MONDAY = date(2026, 1, 12)
SUNDAY = date(2026, 1, 18)


@dataclass
class _Habit:
    id: int
    name: str
    target_per_week: int


@dataclass
class _Checkin:
    habit_id: int
    checkin_date: date


def _checkins(habit_id: int, *days: date) -> list[_Checkin]:
    return [_Checkin(habit_id, day) for day in days]


class TestComputeQuotaStats:
    def test_target_reached_exactly_is_met(self):
        habits = [_Habit(1, "Run", 3)]
        checkins = _checkins(1, MONDAY, MONDAY + timedelta(days=1), TODAY)

        stats = compute_quota_stats(habits, checkins, today=TODAY)

        assert stats.weekly_quotas_met == 1
        assert stats.current_week_progress[0].completed == 3
        assert stats.current_week_progress[0].is_met is True

    def test_one_short_of_target_is_not_met(self):
        habits = [_Habit(1, "Run", 3)]
        checkins = _checkins(1, MONDAY, TODAY)

        stats = compute_quota_stats(habits, checkins, today=TODAY)

        assert stats.weekly_quotas_met == 0
        assert stats.current_week_progress[0].is_met is False

    def test_week_boundaries_are_inclusive(self):
        habits = [_Habit(1, "Run", 2)]
        checkins = _checkins(1, MONDAY, SUNDAY)

        stats = compute_quota_stats(habits, checkins, today=TODAY)

        assert stats.current_week_progress[0].completed == 2
        assert stats.week_start == MONDAY
        assert stats.week_end == SUNDAY

    def test_checkins_outside_week_are_ignored(self):
        habits = [_Habit(1, "Run", 1)]
        checkins = _checkins(
            1, MONDAY - timedelta(days=1), SUNDAY + timedelta(days=1)
        )

        stats = compute_quota_stats(habits, checkins, today=TODAY)

        assert stats.current_week_progress[0].completed == 0

    def test_unknown_habit_ids_are_ignored(self):
        habits = [_Habit(1, "Run", 1)]
        checkins = _checkins(42, TODAY)

        stats = compute_quota_stats(habits, checkins, today=TODAY)

        assert stats.weekly_quotas_met == 0
        assert [p.habit_id for p in stats.current_week_progress] == [1]

    def test_progress_keeps_habit_order(self):
        habits = [_Habit(3, "C", 1), _Habit(1, "A", 1), _Habit(2, "B", 1)]

        stats = compute_quota_stats(habits, [], today=TODAY)

        assert [p.habit_id for p in stats.current_week_progress] == [3, 1, 2]

    def test_no_habits(self):
        stats = compute_quota_stats([], _checkins(1, TODAY), today=TODAY)

        assert stats.weekly_quotas_met == 0
        assert stats.total_habits == 0
        assert stats.current_week_progress == []

    def test_total_checkins_defaults_to_input_length(self):
        checkins = _checkins(1, TODAY, MONDAY)
        assert compute_quota_stats([], checkins, today=TODAY).total_checkins == 2

    def test_total_checkins_override(self):
        stats = compute_quota_stats([], [], today=TODAY, total_checkins=57)
        assert stats.total_checkins == 57

    def test_identical_input_gives_identical_output(self):
        habits = [_Habit(1, "Run", 2), _Habit(2, "Read", 1)]
        checkins = _checkins(1, MONDAY, TODAY) + _checkins(2, TODAY)

        first = compute_quota_stats(habits, checkins, today=TODAY)
        second = compute_quota_stats(habits, checkins, today=TODAY)

        assert first == second


class TestTally:
    def test_count_checkins_in_range(self):
        checkins = _checkins(1, MONDAY, TODAY) + _checkins(2, TODAY)
        counts = count_checkins_in_range(checkins, MONDAY, SUNDAY)
        assert counts == {1: 2, 2: 1}

    def test_met_count_matches_progress(self):
        habits = [_Habit(1, "Run", 1), _Habit(2, "Read", 2)]
        met, progress = tally_habit_progress(
            habits, _checkins(1, TODAY) + _checkins(2, TODAY), MONDAY, SUNDAY
        )
        assert met == sum(p.is_met for p in progress) == 1
