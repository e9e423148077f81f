"""Tests for habits_routes.

Services are patched in the route module; these tests cover status codes,
request validation and error mapping.
"""

from datetime import UTC, date, datetime
from types import SimpleNamespace
from unittest.mock import ANY, patch

import pytest
import time_machine
from httpx import AsyncClient

from models import ScheduleKind
from services.checkins_service import CheckinResult, InvalidCheckinDateError
from services.habits_service import (
    HabitNotFoundError,
    HabitWithProgress,
    InvalidHabitError,
)

pytestmark = pytest.mark.unit

CREATED_AT = datetime(2026, 1, 10, 9, 0, tzinfo=UTC)


def _habit(**overrides):
    fields = {
        "id": 1,
        "name": "Run",
        "target_per_week": 3,
        "schedule_kind": ScheduleKind.DAILY,
        "created_at": CREATED_AT,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestListHabits:
    """Tests for GET /api/habits."""

    async def test_returns_habits_with_progress(
        self, authenticated_client: AsyncClient, test_user_id: str
    ):
        habit = HabitWithProgress(
            id=1,
            name="Run",
            target_per_week=3,
            schedule_kind=ScheduleKind.DAILY,
            created_at=CREATED_AT,
            done_today=True,
            done_this_week=2,
        )
        with patch(
            "routes.habits_routes.list_habits_with_progress",
            autospec=True,
            return_value=[habit],
        ) as mock_list:
            response = await authenticated_client.get("/api/habits")

        assert response.status_code == 200
        data = response.json()
        assert data[0]["name"] == "Run"
        assert data[0]["done_today"] is True
        assert data[0]["done_this_week"] == 2
        assert data[0]["schedule_kind"] == "daily"
        mock_list.assert_awaited_once_with(ANY, test_user_id, ANY)

    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.get("/api/habits")

        assert response.status_code == 401

    @time_machine.travel(datetime(2026, 1, 17, 20, 0, tzinfo=UTC), tick=False)
    async def test_today_follows_timezone_header(
        self, authenticated_client: AsyncClient, test_user_id: str
    ):
        """20:00 UTC is already the next day in Tokyo."""
        with patch(
            "routes.habits_routes.list_habits_with_progress",
            autospec=True,
            return_value=[],
        ) as mock_list:
            await authenticated_client.get(
                "/api/habits", headers={"X-Timezone": "Asia/Tokyo"}
            )
            await authenticated_client.get(
                "/api/habits", headers={"X-Timezone": "Not/AZone"}
            )

        first, second = mock_list.await_args_list
        assert first.args[2] == date(2026, 1, 18)
        assert second.args[2] == date(2026, 1, 17)


class TestCreateHabit:
    """Tests for POST /api/habits."""

    async def test_creates_habit(
        self, authenticated_client: AsyncClient, test_user_id: str
    ):
        with patch(
            "routes.habits_routes.create_habit",
            autospec=True,
            return_value=_habit(name="Read", target_per_week=5),
        ) as mock_create:
            response = await authenticated_client.post(
                "/api/habits", json={"name": "  Read ", "target_per_week": 5}
            )

        assert response.status_code == 201
        assert response.json()["name"] == "Read"
        assert response.json()["done_today"] is False
        mock_create.assert_awaited_once_with(
            ANY, test_user_id, "Read", 5, ScheduleKind.DAILY
        )

    @pytest.mark.parametrize(
        "body",
        [
            {"name": "", "target_per_week": 3},
            {"name": "   ", "target_per_week": 3},
            {"name": "x" * 101, "target_per_week": 3},
            {"name": "Run", "target_per_week": 0},
            {"name": "Run", "target_per_week": 8},
            {"name": "Run"},
            {"name": "Run", "target_per_week": 3, "schedule_kind": "hourly"},
        ],
    )
    async def test_rejects_invalid_body(
        self, authenticated_client: AsyncClient, body: dict
    ):
        with patch("routes.habits_routes.create_habit", autospec=True) as mock_create:
            response = await authenticated_client.post("/api/habits", json=body)

        assert response.status_code == 422
        mock_create.assert_not_called()

    async def test_service_validation_error_is_422(
        self, authenticated_client: AsyncClient
    ):
        with patch(
            "routes.habits_routes.create_habit",
            autospec=True,
            side_effect=InvalidHabitError("Habit name cannot be empty"),
        ):
            response = await authenticated_client.post(
                "/api/habits", json={"name": "Run", "target_per_week": 3}
            )

        assert response.status_code == 422
        assert response.json()["detail"] == "Habit name cannot be empty"


class TestUpdateHabit:
    """Tests for PATCH /api/habits/{habit_id}."""

    async def test_partial_update(
        self, authenticated_client: AsyncClient, test_user_id: str
    ):
        with patch(
            "routes.habits_routes.update_habit",
            autospec=True,
            return_value=_habit(target_per_week=6),
        ) as mock_update:
            response = await authenticated_client.patch(
                "/api/habits/1", json={"target_per_week": 6}
            )

        assert response.status_code == 200
        assert response.json()["target_per_week"] == 6
        mock_update.assert_awaited_once_with(
            ANY,
            test_user_id,
            1,
            name=None,
            target_per_week=6,
            schedule_kind=None,
        )

    async def test_not_found(self, authenticated_client: AsyncClient):
        with patch(
            "routes.habits_routes.update_habit",
            autospec=True,
            side_effect=HabitNotFoundError("Habit not found: 9"),
        ):
            response = await authenticated_client.patch(
                "/api/habits/9", json={"name": "New"}
            )

        assert response.status_code == 404

    async def test_rejects_non_positive_id(self, authenticated_client: AsyncClient):
        response = await authenticated_client.patch("/api/habits/0", json={})

        assert response.status_code == 422


class TestDeleteHabit:
    """Tests for DELETE /api/habits/{habit_id}."""

    async def test_deletes(self, authenticated_client: AsyncClient):
        with patch("routes.habits_routes.delete_habit", autospec=True):
            response = await authenticated_client.delete("/api/habits/1")

        assert response.status_code == 204
        assert response.content == b""

    async def test_not_found(self, authenticated_client: AsyncClient):
        with patch(
            "routes.habits_routes.delete_habit",
            autospec=True,
            side_effect=HabitNotFoundError("Habit not found: 1"),
        ):
            response = await authenticated_client.delete("/api/habits/1")

        assert response.status_code == 404
        assert response.json()["detail"] == "Habit not found: 1"


class TestCheckIn:
    """Tests for PUT/DELETE /api/habits/{habit_id}/checkins/{date}."""

    @time_machine.travel(datetime(2026, 1, 14, 12, 0, tzinfo=UTC), tick=False)
    async def test_check_in_today(
        self, authenticated_client: AsyncClient, test_user_id: str
    ):
        with patch(
            "routes.habits_routes.check_in",
            autospec=True,
            return_value=CheckinResult(1, date(2026, 1, 14), created=True),
        ) as mock_check_in:
            response = await authenticated_client.put(
                "/api/habits/1/checkins/2026-01-14"
            )

        assert response.status_code == 200
        assert response.json() == {
            "habit_id": 1,
            "checkin_date": "2026-01-14",
            "created": True,
        }
        mock_check_in.assert_awaited_once_with(
            ANY, test_user_id, 1, date(2026, 1, 14), date(2026, 1, 14)
        )

    async def test_repeat_reports_not_created(self, authenticated_client: AsyncClient):
        with patch(
            "routes.habits_routes.check_in",
            autospec=True,
            return_value=CheckinResult(1, date(2026, 1, 14), created=False),
        ):
            response = await authenticated_client.put(
                "/api/habits/1/checkins/2026-01-14"
            )

        assert response.status_code == 200
        assert response.json()["created"] is False

    async def test_date_other_than_today_is_422(
        self, authenticated_client: AsyncClient
    ):
        with patch(
            "routes.habits_routes.check_in",
            autospec=True,
            side_effect=InvalidCheckinDateError("Check-ins are only accepted for today"),
        ):
            response = await authenticated_client.put(
                "/api/habits/1/checkins/2026-01-10"
            )

        assert response.status_code == 422

    async def test_checkins_cannot_be_removed(self, authenticated_client: AsyncClient):
        response = await authenticated_client.delete(
            "/api/habits/1/checkins/2026-01-14"
        )

        assert response.status_code == 405

    async def test_malformed_date_is_422(self, authenticated_client: AsyncClient):
        response = await authenticated_client.put("/api/habits/1/checkins/yesterday")

        assert response.status_code == 422

    async def test_unknown_habit_is_404(self, authenticated_client: AsyncClient):
        with patch(
            "routes.habits_routes.check_in",
            autospec=True,
            side_effect=HabitNotFoundError("Habit not found: 1"),
        ):
            response = await authenticated_client.put(
                "/api/habits/1/checkins/2026-01-14"
            )

        assert response.status_code == 404
