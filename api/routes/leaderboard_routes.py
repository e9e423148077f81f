"""Friend leaderboard endpoint."""

from fastapi import APIRouter, Request

from core.auth import UserId
from core.database import DbSession
from core.local_time import UserToday
from core.ratelimit import LEADERBOARD_LIMIT, limiter
from schemas import LeaderboardEntryResponse, LeaderboardResponse
from services.leaderboard_service import get_leaderboard

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


@router.get("", response_model=LeaderboardResponse)
@limiter.limit(LEADERBOARD_LIMIT)
async def leaderboard_endpoint(
    request: Request,
    user_id: UserId,
    db: DbSession,
    today: UserToday,
) -> LeaderboardResponse:
    """The caller and their accepted friends, ranked by battles won.

    Ties on wins are broken by total goals completed across all battles.
    """
    entries = await get_leaderboard(db, user_id, today)
    return LeaderboardResponse(
        entries=[LeaderboardEntryResponse.model_validate(e) for e in entries]
    )
