"""Friendship repository (read-only)."""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Friendship, FriendshipStatus
from repositories.utils import log_slow_query


class FriendshipRepository:
    """Friend links are managed elsewhere; the API only reads accepted ones."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("list_accepted_friend_ids")
    async def accepted_friend_ids(self, user_id: str) -> list[str]:
        """Ids of accepted friends in either direction, in a stable order."""
        result = await self.db.execute(
            select(Friendship.user_id, Friendship.friend_id)
            .where(
                Friendship.status == FriendshipStatus.ACCEPTED,
                or_(Friendship.user_id == user_id, Friendship.friend_id == user_id),
            )
            .order_by(Friendship.created_at, Friendship.id)
        )
        friend_ids: list[str] = []
        for requester, addressee in result.all():
            other = addressee if requester == user_id else requester
            if other != user_id and other not in friend_ids:
                friend_ids.append(other)
        return friend_ids
