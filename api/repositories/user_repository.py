"""User repository for database operations."""

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from models import User
from repositories.utils import log_slow_query


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("get_user_by_id")
    async def get_by_id(self, user_id: str) -> User | None:
        """Get a user by their ID."""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @log_slow_query("get_users_by_ids")
    async def get_many(self, user_ids: Sequence[str]) -> dict[str, User]:
        """Users keyed by id. Unknown ids are simply absent."""
        if not user_ids:
            return {}
        result = await self.db.execute(select(User).where(User.id.in_(user_ids)))
        return {user.id: user for user in result.scalars().all()}

    @log_slow_query("get_or_create_user")
    async def get_or_create(self, user_id: str) -> User:
        """Get user from DB or create a placeholder row.

        Uses INSERT ... ON CONFLICT DO NOTHING so concurrent first requests
        from the same user don't collide.
        """
        user = await self.get_by_id(user_id)
        if user:
            return user

        stmt = (
            pg_insert(User)
            .values(id=user_id)
            .on_conflict_do_nothing(index_elements=["id"])
        )
        await self.db.execute(stmt)

        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one()
