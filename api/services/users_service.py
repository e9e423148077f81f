"""User service for user-related business logic."""

from sqlalchemy.ext.asyncio import AsyncSession

from repositories.user_repository import UserRepository


async def ensure_user_exists(db: AsyncSession, user_id: str) -> None:
    """Ensure the user row exists in DB (for FK constraints).

    The row is created as a placeholder on the first authenticated write;
    username and avatar are filled in by the profile sync outside this API.
    """
    user_repo = UserRepository(db)
    await user_repo.get_or_create(user_id)
