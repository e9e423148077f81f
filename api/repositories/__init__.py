"""Repository layer for database operations.

Repositories encapsulate all database queries, keeping services free of SQL.
Each repository is constructed with the request's AsyncSession and never
commits; the session dependency owns the transaction.
"""

from repositories.battle_repository import BattleRepository
from repositories.checkin_repository import CheckinRepository
from repositories.friendship_repository import FriendshipRepository
from repositories.habit_repository import HabitRepository
from repositories.user_repository import UserRepository
from repositories.utils import log_slow_query

__all__ = [
    "BattleRepository",
    "CheckinRepository",
    "FriendshipRepository",
    "HabitRepository",
    "UserRepository",
    "log_slow_query",
]
