"""Friend leaderboard.

``build_leaderboard`` is pure: it ranks a friend group from already-scored
battle outcomes. ``get_leaderboard`` fetches the group, their battles and the
check-ins needed to score them.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from core.wide_event import set_wide_event_fields
from repositories.battle_repository import BattleRepository
from repositories.friendship_repository import FriendshipRepository
from repositories.user_repository import UserRepository
from services.battle_score_service import (
    BattleScore,
    BattleStatus,
    battle_status,
    determine_winners,
)
from services.battles_service import score_battles


class Profile(Protocol):
    username: str | None
    avatar_url: str | None


@dataclass(frozen=True)
class BattleOutcome:
    battle_id: int
    start_date: date
    end_date: date
    scores: Mapping[str, BattleScore]


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: str
    username: str
    avatar_url: str | None
    battles_participated: int
    battles_won: int
    total_goals_completed: int


def build_leaderboard(
    user_ids: Sequence[str],
    outcomes: Iterable[BattleOutcome],
    *,
    today: date,
    profiles: Mapping[str, Profile] | None = None,
) -> list[LeaderboardEntry]:
    """Rank ``user_ids`` by battles won, then total goals completed.

    A user participates in every battle whose scores include them. Wins only
    count for completed battles, where every member sharing the top score
    wins. Goals are summed over all of a user's battles, active or completed.
    Users with no profile row are shown by id.
    """
    profiles = profiles or {}
    participated = dict.fromkeys(user_ids, 0)
    won = dict.fromkeys(user_ids, 0)
    goals = dict.fromkeys(user_ids, 0)

    for outcome in outcomes:
        winners: frozenset[str] = frozenset()
        if battle_status(outcome.start_date, outcome.end_date, today) is (
            BattleStatus.COMPLETED
        ):
            winners = determine_winners(
                {member: score.score for member, score in outcome.scores.items()}
            )

        for member, score in outcome.scores.items():
            if member not in participated:
                continue
            participated[member] += 1
            goals[member] += score.score
            if member in winners:
                won[member] += 1

    entries = []
    for user_id in participated:
        profile = profiles.get(user_id)
        entries.append(
            LeaderboardEntry(
                user_id=user_id,
                username=(profile.username if profile else None) or user_id,
                avatar_url=profile.avatar_url if profile else None,
                battles_participated=participated[user_id],
                battles_won=won[user_id],
                total_goals_completed=goals[user_id],
            )
        )

    # sorted() is stable: full ties keep the order of user_ids
    return sorted(
        entries,
        key=lambda e: (e.battles_won, e.total_goals_completed),
        reverse=True,
    )


async def get_leaderboard(
    db: AsyncSession, user_id: str, today: date
) -> list[LeaderboardEntry]:
    """Leaderboard for the caller and their accepted friends."""
    friend_ids = await FriendshipRepository(db).accepted_friend_ids(user_id)
    group = [user_id, *friend_ids]

    battles = await BattleRepository(db).list_for_users(group)
    scores = await score_battles(db, battles)
    outcomes = [
        BattleOutcome(
            battle_id=battle.id,
            start_date=battle.start_date,
            end_date=battle.end_date,
            scores=scores.get(battle.id, {}),
        )
        for battle in battles
    ]

    profiles = await UserRepository(db).get_many(group)
    entries = build_leaderboard(group, outcomes, today=today, profiles=profiles)

    set_wide_event_fields(
        leaderboard_size=len(entries), leaderboard_battles=len(outcomes)
    )
    return entries
