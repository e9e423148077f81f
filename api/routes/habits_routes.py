"""Habit and check-in endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Request, Response

from core.auth import UserId
from core.database import DbSession
from core.local_time import UserToday
from core.ratelimit import READ_LIMIT, WRITE_LIMIT, limiter
from schemas import (
    CheckinResponse,
    HabitCreateRequest,
    HabitResponse,
    HabitUpdateRequest,
)
from services.checkins_service import InvalidCheckinDateError, check_in
from services.habits_service import (
    HabitNotFoundError,
    InvalidHabitError,
    create_habit,
    delete_habit,
    list_habits_with_progress,
    update_habit,
)

router = APIRouter(prefix="/api/habits", tags=["habits"])

ValidatedHabitId = Annotated[int, Path(ge=1)]


@router.get("", response_model=list[HabitResponse])
@limiter.limit(READ_LIMIT)
async def list_habits_endpoint(
    request: Request,
    user_id: UserId,
    db: DbSession,
    today: UserToday,
) -> list[HabitResponse]:
    """List the caller's habits with today's status and this week's count."""
    habits = await list_habits_with_progress(db, user_id, today)
    return [HabitResponse.model_validate(habit) for habit in habits]


@router.post(
    "",
    response_model=HabitResponse,
    status_code=201,
    responses={422: {"description": "Invalid name or weekly target"}},
)
@limiter.limit(WRITE_LIMIT)
async def create_habit_endpoint(
    request: Request,
    body: HabitCreateRequest,
    user_id: UserId,
    db: DbSession,
) -> HabitResponse:
    try:
        habit = await create_habit(
            db, user_id, body.name, body.target_per_week, body.schedule_kind
        )
    except InvalidHabitError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return HabitResponse.model_validate(habit)


@router.patch(
    "/{habit_id}",
    response_model=HabitResponse,
    responses={
        404: {"description": "Habit not found"},
        422: {"description": "Invalid name or weekly target"},
    },
)
@limiter.limit(WRITE_LIMIT)
async def update_habit_endpoint(
    request: Request,
    habit_id: ValidatedHabitId,
    body: HabitUpdateRequest,
    user_id: UserId,
    db: DbSession,
) -> HabitResponse:
    """Rename or retarget a habit."""
    try:
        habit = await update_habit(
            db,
            user_id,
            habit_id,
            name=body.name,
            target_per_week=body.target_per_week,
            schedule_kind=body.schedule_kind,
        )
    except HabitNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidHabitError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return HabitResponse.model_validate(habit)


@router.delete(
    "/{habit_id}",
    status_code=204,
    responses={404: {"description": "Habit not found"}},
)
@limiter.limit(WRITE_LIMIT)
async def delete_habit_endpoint(
    request: Request,
    habit_id: ValidatedHabitId,
    user_id: UserId,
    db: DbSession,
) -> Response:
    """Delete a habit along with all of its check-ins."""
    try:
        await delete_habit(db, user_id, habit_id)
    except HabitNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return Response(status_code=204)


@router.put(
    "/{habit_id}/checkins/{checkin_date}",
    response_model=CheckinResponse,
    responses={
        404: {"description": "Habit not found"},
        422: {"description": "Date is not the caller's today"},
    },
)
@limiter.limit(WRITE_LIMIT)
async def check_in_endpoint(
    request: Request,
    habit_id: ValidatedHabitId,
    checkin_date: date,
    user_id: UserId,
    db: DbSession,
    today: UserToday,
) -> CheckinResponse:
    """Mark a habit done for today in the caller's timezone.

    Any other date is rejected, so past days stay as they were. Repeating
    the call for the same day is safe: the response reports
    ``created: false`` instead of failing.
    """
    try:
        result = await check_in(db, user_id, habit_id, checkin_date, today)
    except HabitNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidCheckinDateError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return CheckinResponse.model_validate(result)

