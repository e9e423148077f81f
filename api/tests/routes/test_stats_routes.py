"""Tests for stats_routes."""

from datetime import date
from unittest.mock import ANY, patch

import pytest
from httpx import AsyncClient

from services.calendar_service import build_month_calendar
from services.dashboard_service import DashboardData
from services.quota_service import HabitProgress, QuotaStats
from services.streaks_service import StreakData

pytestmark = pytest.mark.unit

QUOTA = QuotaStats(
    weekly_quotas_met=1,
    total_checkins=12,
    total_habits=2,
    week_start=date(2026, 1, 12),
    week_end=date(2026, 1, 18),
    current_week_progress=[
        HabitProgress(1, "Run", 3, 3, True),
        HabitProgress(2, "Read", 5, 1, False),
    ],
)
STREAK = StreakData(daily_streak=4, weekly_streak=2, last_checkin_date=date(2026, 1, 14))


class TestQuotaAndStreak:
    """Tests for GET /api/stats/quota and /api/stats/streak."""

    async def test_quota(self, authenticated_client: AsyncClient):
        with patch(
            "routes.stats_routes.get_quota_stats", autospec=True, return_value=QUOTA
        ):
            response = await authenticated_client.get("/api/stats/quota")

        assert response.status_code == 200
        data = response.json()
        assert data["weekly_quotas_met"] == 1
        assert data["week_start"] == "2026-01-12"
        assert data["current_week_progress"][1] == {
            "habit_id": 2,
            "habit_name": "Read",
            "target": 5,
            "completed": 1,
            "is_met": False,
        }

    async def test_streak(self, authenticated_client: AsyncClient):
        with patch(
            "routes.stats_routes.get_streak_data", autospec=True, return_value=STREAK
        ):
            response = await authenticated_client.get("/api/stats/streak")

        assert response.status_code == 200
        assert response.json() == {
            "daily_streak": 4,
            "weekly_streak": 2,
            "last_checkin_date": "2026-01-14",
        }

    async def test_requires_authentication(self, client: AsyncClient):
        assert (await client.get("/api/stats/quota")).status_code == 401
        assert (await client.get("/api/stats/streak")).status_code == 401


class TestDashboard:
    """Tests for GET /api/dashboard."""

    async def test_combines_quota_and_streak(
        self, authenticated_client: AsyncClient, test_user_id: str
    ):
        with patch(
            "routes.stats_routes.get_dashboard",
            autospec=True,
            return_value=DashboardData(quota=QUOTA, streak=STREAK),
        ) as mock_dashboard:
            response = await authenticated_client.get("/api/dashboard")

        assert response.status_code == 200
        data = response.json()
        assert data["quota"]["total_checkins"] == 12
        assert data["streak"]["daily_streak"] == 4
        mock_dashboard.assert_awaited_once_with(ANY, test_user_id, ANY)


class TestCalendar:
    """Tests for GET /api/calendar/{year}/{month}."""

    async def test_month(self, authenticated_client: AsyncClient, test_user_id: str):
        calendar = build_month_calendar([], {}, 2026, 2)
        with patch(
            "routes.stats_routes.get_calendar_month",
            autospec=True,
            return_value=calendar,
        ) as mock_calendar:
            response = await authenticated_client.get("/api/calendar/2026/2")

        assert response.status_code == 200
        data = response.json()
        assert len(data["days"]) == 28
        assert data["days"][0] == {"date": "2026-02-01", "count": 0, "habit_names": []}
        mock_calendar.assert_awaited_once_with(ANY, test_user_id, 2026, 2)

    @pytest.mark.parametrize("path", ["/api/calendar/2026/13", "/api/calendar/2026/0"])
    async def test_rejects_bad_month(self, authenticated_client: AsyncClient, path):
        response = await authenticated_client.get(path)

        assert response.status_code == 422
