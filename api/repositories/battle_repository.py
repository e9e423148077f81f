"""Battle repository for database operations."""

from collections.abc import Sequence
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Battle, BattleMember
from repositories.utils import log_slow_query


def _battle_ids_for(user_id: str):
    return select(BattleMember.battle_id).where(BattleMember.user_id == user_id)


def pair_lock_key(user_a: str, user_b: str) -> str:
    """Advisory lock name for a pair, independent of argument order."""
    first, second = sorted((user_a, user_b))
    return f"battle-pair:{first}:{second}"


class BattleRepository:
    """Repository for Battle and BattleMember database operations.

    Members are eager-loaded (selectin) with every battle.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("create_battle")
    async def create(
        self,
        *,
        name: str,
        owner_id: str,
        start_date: date,
        end_date: date,
        member_ids: Sequence[str],
    ) -> Battle:
        battle = Battle(
            name=name,
            owner_id=owner_id,
            start_date=start_date,
            end_date=end_date,
            members=[BattleMember(user_id=member_id) for member_id in member_ids],
        )
        self.db.add(battle)
        await self.db.flush()
        return battle

    @log_slow_query("get_battle")
    async def get_by_id(self, battle_id: int) -> Battle | None:
        result = await self.db.execute(select(Battle).where(Battle.id == battle_id))
        return result.scalar_one_or_none()

    @log_slow_query("list_battles_for_user")
    async def list_for_user(self, user_id: str) -> list[Battle]:
        """Battles the user is a member of, newest first."""
        result = await self.db.execute(
            select(Battle)
            .where(Battle.id.in_(_battle_ids_for(user_id)))
            .order_by(Battle.start_date.desc(), Battle.id.desc())
        )
        return list(result.scalars().all())

    @log_slow_query("list_battles_for_users")
    async def list_for_users(self, user_ids: Sequence[str]) -> list[Battle]:
        """Battles with at least one member in ``user_ids``, each listed once."""
        if not user_ids:
            return []
        member_battles = select(BattleMember.battle_id).where(
            BattleMember.user_id.in_(user_ids)
        )
        result = await self.db.execute(
            select(Battle)
            .where(Battle.id.in_(member_battles))
            .order_by(Battle.start_date, Battle.id)
        )
        return list(result.scalars().all())

    @log_slow_query("lock_battle_pair")
    async def lock_pair(self, user_a: str, user_b: str) -> None:
        """Serialize battle creation for this pair until the transaction ends.

        Concurrent callers block here, so the active-battle check that follows
        sees any battle a competing request has just committed.
        """
        key = func.hashtext(pair_lock_key(user_a, user_b))
        await self.db.execute(select(func.pg_advisory_xact_lock(key)))

    @log_slow_query("find_active_battle_between")
    async def find_active_between(
        self, user_a: str, user_b: str, today: date
    ) -> Battle | None:
        """A battle both users are in that has not ended by ``today``."""
        result = await self.db.execute(
            select(Battle)
            .where(
                Battle.end_date >= today,
                Battle.id.in_(_battle_ids_for(user_a)),
                Battle.id.in_(_battle_ids_for(user_b)),
            )
            .limit(1)
        )
        return result.scalar_one_or_none()
