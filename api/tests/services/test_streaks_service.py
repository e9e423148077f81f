"""Unit tests for streaks_service.

Tests cover:
- Daily streak anchored on today or yesterday
- Weekly streak over Monday-start weeks
- Duplicate, future and malformed entries
"""

from datetime import date, datetime, timedelta

import pytest

from services.streaks_service import StreakData, compute_streaks

pytestmark = pytest.mark.unit

TODAY = date(2026, 1, 17)  # Saturday


def _days_back(*offsets: int) -> list[date]:
    return [TODAY - timedelta(days=n) for n in offsets]


class TestDailyStreak:
    def test_no_checkins(self):
        assert compute_streaks([], today=TODAY) == StreakData(0, 0, None)

    def test_none_input(self):
        assert compute_streaks(None, today=TODAY) == StreakData(0, 0, None)

    def test_three_consecutive_days_ending_today(self):
        result = compute_streaks(_days_back(0, 1, 2), today=TODAY)
        assert result.daily_streak == 3
        assert result.last_checkin_date == TODAY

    def test_streak_ending_yesterday_is_still_alive(self):
        result = compute_streaks(_days_back(1, 2, 3), today=TODAY)
        assert result.daily_streak == 3

    def test_streak_ending_two_days_ago_is_broken(self):
        result = compute_streaks(_days_back(2, 3, 4), today=TODAY)
        assert result.daily_streak == 0
        assert result.last_checkin_date == TODAY - timedelta(days=2)

    def test_gap_stops_the_run(self):
        result = compute_streaks(_days_back(0, 1, 3, 4, 5), today=TODAY)
        assert result.daily_streak == 2

    def test_duplicates_count_once(self):
        # Two habits checked in on the same days
        result = compute_streaks(_days_back(0, 0, 1, 1), today=TODAY)
        assert result.daily_streak == 2

    def test_future_dates_are_ignored(self):
        dates = [TODAY + timedelta(days=1), *_days_back(0, 1)]
        result = compute_streaks(dates, today=TODAY)
        assert result.daily_streak == 2
        assert result.last_checkin_date == TODAY

    def test_order_does_not_matter(self):
        result = compute_streaks(_days_back(2, 0, 1), today=TODAY)
        assert result.daily_streak == 3


class TestWeeklyStreak:
    def test_single_checkin_this_week(self):
        assert compute_streaks([TODAY], today=TODAY).weekly_streak == 1

    def test_consecutive_weeks(self):
        # Sat this week, Mon last week, Sun two weeks ago
        dates = [TODAY, date(2026, 1, 5), date(2026, 1, 4)]
        assert compute_streaks(dates, today=TODAY).weekly_streak == 3

    def test_last_week_keeps_the_streak(self):
        dates = [date(2026, 1, 9), date(2025, 12, 30)]
        assert compute_streaks(dates, today=TODAY).weekly_streak == 2

    def test_skipped_week_breaks_the_streak(self):
        dates = [TODAY, date(2025, 12, 31)]
        assert compute_streaks(dates, today=TODAY).weekly_streak == 1

    def test_nothing_since_two_weeks_ago(self):
        assert compute_streaks([date(2026, 1, 2)], today=TODAY).weekly_streak == 0


class TestInputCoercion:
    def test_iso_strings_and_datetimes(self):
        dates = ["2026-01-17", datetime(2026, 1, 16, 9, 30), date(2026, 1, 15)]
        assert compute_streaks(dates, today=TODAY).daily_streak == 3

    def test_malformed_entries_are_skipped(self):
        dates = ["garbage", None, 42, "2026-01-17", "2026-01-16"]
        result = compute_streaks(dates, today=TODAY)
        assert result.daily_streak == 2
        assert result.last_checkin_date == TODAY

    def test_non_iterable_input_gives_zero(self):
        assert compute_streaks(12345, today=TODAY) == StreakData(0, 0, None)
