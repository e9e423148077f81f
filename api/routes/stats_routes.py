"""Quota, streak, dashboard and calendar endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, Request

from core.auth import UserId
from core.database import DbSession
from core.local_time import UserToday
from core.ratelimit import READ_LIMIT, limiter
from schemas import (
    CalendarMonthResponse,
    DashboardResponse,
    QuotaStatsResponse,
    StreakResponse,
)
from services.dashboard_service import (
    get_calendar_month,
    get_dashboard,
    get_quota_stats,
    get_streak_data,
)

router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/stats/quota", response_model=QuotaStatsResponse)
@limiter.limit(READ_LIMIT)
async def quota_stats_endpoint(
    request: Request,
    user_id: UserId,
    db: DbSession,
    today: UserToday,
) -> QuotaStatsResponse:
    """Weekly quota completion for the caller's current Monday-Sunday week."""
    stats = await get_quota_stats(db, user_id, today)
    return QuotaStatsResponse.model_validate(stats)


@router.get("/stats/streak", response_model=StreakResponse)
@limiter.limit(READ_LIMIT)
async def streak_endpoint(
    request: Request,
    user_id: UserId,
    db: DbSession,
    today: UserToday,
) -> StreakResponse:
    streak = await get_streak_data(db, user_id, today)
    return StreakResponse.model_validate(streak)


@router.get("/dashboard", response_model=DashboardResponse)
@limiter.limit(READ_LIMIT)
async def dashboard_endpoint(
    request: Request,
    user_id: UserId,
    db: DbSession,
    today: UserToday,
) -> DashboardResponse:
    """Quota stats and streaks in one response."""
    dashboard = await get_dashboard(db, user_id, today)
    return DashboardResponse.model_validate(dashboard)


@router.get("/calendar/{year}/{month}", response_model=CalendarMonthResponse)
@limiter.limit(READ_LIMIT)
async def calendar_endpoint(
    request: Request,
    year: Annotated[int, Path(ge=1970, le=9999)],
    month: Annotated[int, Path(ge=1, le=12)],
    user_id: UserId,
    db: DbSession,
) -> CalendarMonthResponse:
    """Check-ins per day for one month, with the habit names done each day."""
    calendar = await get_calendar_month(db, user_id, year, month)
    return CalendarMonthResponse.model_validate(calendar)
