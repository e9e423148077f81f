"""Battle business logic.

A battle is a fixed 7-day window starting on the day it is created. Each
member's score is the number of their habits that met the weekly target
inside the window. Only the caller sees their own per-habit breakdown;
opponents are shown as totals.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger
from core.wide_event import set_wide_event_fields
from models import Battle, User
from repositories.battle_repository import BattleRepository
from repositories.checkin_repository import CheckinRepository
from repositories.friendship_repository import FriendshipRepository
from repositories.habit_repository import HabitRepository
from repositories.user_repository import UserRepository
from services.battle_score_service import (
    EMPTY_SCORE,
    BattleScore,
    BattleStatus,
    Standing,
    battle_standing,
    battle_status,
    compute_battle_score,
    days_remaining,
    determine_winners,
    summarize_score,
)
from services.calendar_service import battle_window
from services.users_service import ensure_user_exists

logger = get_logger(__name__)


class BattleNotFoundError(Exception):
    """Raised when a battle doesn't exist or the caller isn't a member."""


class BattleOpponentNotFoundError(Exception):
    """Raised when the requested opponent isn't one of the caller's friends."""


class BattleConflictError(Exception):
    """Raised for self-battles or a second active battle with the same friend."""


@dataclass(frozen=True)
class BattleMemberScore:
    user_id: str
    username: str | None
    avatar_url: str | None
    is_me: bool
    score: BattleScore


@dataclass(frozen=True)
class BattleView:
    id: int
    name: str
    owner_id: str
    start_date: date
    end_date: date
    status: BattleStatus
    days_remaining: int
    members: list[BattleMemberScore]
    winner_ids: list[str]
    standing: Standing | None


def battle_name(owner: User | None, opponent: User | None) -> str:
    owner_name = owner.username if owner and owner.username else "You"
    opponent_name = opponent.username if opponent and opponent.username else "Friend"
    return f"{owner_name} vs {opponent_name}"


async def score_battles(
    db: AsyncSession, battles: Sequence[Battle]
) -> dict[int, dict[str, BattleScore]]:
    """Score every member of every battle.

    Habits and check-ins are fetched once for all members across the span
    of all battles; each battle then only counts its own window.
    """
    if not battles:
        return {}

    member_ids = sorted({m for battle in battles for m in battle.member_ids})
    habits = await HabitRepository(db).list_for_users(member_ids)
    checkins = await CheckinRepository(db).list_for_users(
        member_ids,
        min(battle.start_date for battle in battles),
        max(battle.end_date for battle in battles),
    )

    return {
        battle.id: {
            member: compute_battle_score(
                habits.get(member, []),
                checkins.get(member, []),
                battle.start_date,
                battle.end_date,
            )
            for member in battle.member_ids
        }
        for battle in battles
    }


def build_battle_view(
    battle: Battle,
    scores: Mapping[str, BattleScore],
    viewer_id: str,
    today: date,
    profiles: Mapping[str, User],
) -> BattleView:
    """Assemble what ``viewer_id`` sees of one battle.

    Winners are only reported once the battle is completed. Standing compares
    the viewer with their opponent and is None when the viewer isn't a member.
    """
    status = battle_status(battle.start_date, battle.end_date, today)

    members = []
    for member_id in battle.member_ids:
        score = scores.get(member_id, EMPTY_SCORE)
        profile = profiles.get(member_id)
        is_me = member_id == viewer_id
        members.append(
            BattleMemberScore(
                user_id=member_id,
                username=profile.username if profile else None,
                avatar_url=profile.avatar_url if profile else None,
                is_me=is_me,
                score=score if is_me else summarize_score(score),
            )
        )

    winner_ids: list[str] = []
    if status is BattleStatus.COMPLETED:
        winners = determine_winners({m.user_id: m.score.score for m in members})
        winner_ids = [m.user_id for m in members if m.user_id in winners]

    standing = None
    mine = [m for m in members if m.is_me]
    others = [m for m in members if not m.is_me]
    if mine and others:
        standing = battle_standing(
            mine[0].score.score, max(m.score.score for m in others)
        )

    return BattleView(
        id=battle.id,
        name=battle.name,
        owner_id=battle.owner_id,
        start_date=battle.start_date,
        end_date=battle.end_date,
        status=status,
        days_remaining=days_remaining(battle.end_date, today),
        members=members,
        winner_ids=winner_ids,
        standing=standing,
    )


async def _views_for(
    db: AsyncSession, battles: Sequence[Battle], viewer_id: str, today: date
) -> list[BattleView]:
    scores = await score_battles(db, battles)
    member_ids = sorted({m for battle in battles for m in battle.member_ids})
    profiles = await UserRepository(db).get_many(member_ids)
    return [
        build_battle_view(battle, scores.get(battle.id, {}), viewer_id, today, profiles)
        for battle in battles
    ]


async def create_battle(
    db: AsyncSession, owner_id: str, friend_id: str, today: date
) -> BattleView:
    """Start a 7-day battle between the caller and an accepted friend.

    Raises:
        BattleConflictError: If friend_id is the caller, or the pair already
            has a battle that hasn't ended.
        BattleOpponentNotFoundError: If friend_id isn't an accepted friend.
    """
    if friend_id == owner_id:
        raise BattleConflictError("You cannot battle yourself")

    friend_ids = await FriendshipRepository(db).accepted_friend_ids(owner_id)
    if friend_id not in friend_ids:
        raise BattleOpponentNotFoundError(f"Friend not found: {friend_id}")

    battle_repo = BattleRepository(db)
    await battle_repo.lock_pair(owner_id, friend_id)
    existing = await battle_repo.find_active_between(owner_id, friend_id, today)
    if existing is not None:
        set_wide_event_fields(battle_conflict_id=existing.id)
        raise BattleConflictError("You already have an active battle with this friend")

    await ensure_user_exists(db, owner_id)
    profiles = await UserRepository(db).get_many([owner_id, friend_id])

    start, end = battle_window(today)
    battle = await battle_repo.create(
        name=battle_name(profiles.get(owner_id), profiles.get(friend_id)),
        owner_id=owner_id,
        start_date=start,
        end_date=end,
        member_ids=[owner_id, friend_id],
    )

    set_wide_event_fields(battle_id=battle.id, battle_action="created")
    logger.info(
        "battle.created",
        battle_id=battle.id,
        owner_id=owner_id,
        opponent_id=friend_id,
        start_date=start.isoformat(),
    )

    views = await _views_for(db, [battle], owner_id, today)
    return views[0]


async def list_battles(db: AsyncSession, user_id: str, today: date) -> list[BattleView]:
    """All of the caller's battles, newest first, active and completed."""
    battles = await BattleRepository(db).list_for_user(user_id)
    views = await _views_for(db, battles, user_id, today)
    set_wide_event_fields(
        battles_total=len(views),
        battles_active=sum(1 for v in views if v.status is BattleStatus.ACTIVE),
    )
    return views


async def get_battle(
    db: AsyncSession, user_id: str, battle_id: int, today: date
) -> BattleView:
    """One battle as the caller sees it.

    Raises:
        BattleNotFoundError: If it doesn't exist or the caller isn't a member.
    """
    battle = await BattleRepository(db).get_by_id(battle_id)
    if battle is None or user_id not in battle.member_ids:
        raise BattleNotFoundError(f"Battle not found: {battle_id}")

    views = await _views_for(db, [battle], user_id, today)
    set_wide_event_fields(battle_id=battle_id, battle_status=views[0].status.value)
    return views[0]
