"""API route modules."""

from routes.battles_routes import router as battles_router
from routes.habits_routes import router as habits_router
from routes.health_routes import router as health_router
from routes.leaderboard_routes import router as leaderboard_router
from routes.stats_routes import router as stats_router

__all__ = [
    "battles_router",
    "habits_router",
    "health_router",
    "leaderboard_router",
    "stats_router",
]
