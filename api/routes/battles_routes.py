"""Battle endpoints."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Request

from core.auth import UserId
from core.database import DbSession
from core.local_time import UserToday
from core.ratelimit import READ_LIMIT, WRITE_LIMIT, limiter
from schemas import BattleCreateRequest, BattleListResponse, BattleResponse
from services.battle_score_service import BattleStatus
from services.battles_service import (
    BattleConflictError,
    BattleNotFoundError,
    BattleOpponentNotFoundError,
    create_battle,
    get_battle,
    list_battles,
)

router = APIRouter(prefix="/api/battles", tags=["battles"])


@router.post(
    "",
    response_model=BattleResponse,
    status_code=201,
    responses={
        404: {"description": "Friend not found"},
        409: {"description": "Self-battle or an active battle already exists"},
    },
)
@limiter.limit(WRITE_LIMIT)
async def create_battle_endpoint(
    request: Request,
    body: BattleCreateRequest,
    user_id: UserId,
    db: DbSession,
    today: UserToday,
) -> BattleResponse:
    """Start a 7-day battle against an accepted friend, beginning today."""
    try:
        battle = await create_battle(db, user_id, body.friend_id, today)
    except BattleOpponentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BattleConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return BattleResponse.model_validate(battle)


@router.get("", response_model=BattleListResponse)
@limiter.limit(READ_LIMIT)
async def list_battles_endpoint(
    request: Request,
    user_id: UserId,
    db: DbSession,
    today: UserToday,
) -> BattleListResponse:
    """The caller's battles split into active and completed, newest first."""
    battles = [
        BattleResponse.model_validate(b) for b in await list_battles(db, user_id, today)
    ]
    return BattleListResponse(
        active=[b for b in battles if b.status is BattleStatus.ACTIVE],
        completed=[b for b in battles if b.status is BattleStatus.COMPLETED],
    )


@router.get(
    "/{battle_id}",
    response_model=BattleResponse,
    responses={404: {"description": "Battle not found"}},
)
@limiter.limit(READ_LIMIT)
async def get_battle_endpoint(
    request: Request,
    battle_id: Annotated[int, Path(ge=1)],
    user_id: UserId,
    db: DbSession,
    today: UserToday,
) -> BattleResponse:
    try:
        battle = await get_battle(db, user_id, battle_id, today)
    except BattleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return BattleResponse.model_validate(battle)
