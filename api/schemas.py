"""Pydantic schemas for API request/response validation."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models import MAX_TARGET_PER_WEEK, MIN_TARGET_PER_WEEK, ScheduleKind
from services.battle_score_service import BattleStatus, Standing


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str


# Habits


class HabitCreateRequest(BaseModel):
    """Request to create a habit."""

    name: str = Field(min_length=1, max_length=100)
    target_per_week: int = Field(ge=MIN_TARGET_PER_WEEK, le=MAX_TARGET_PER_WEEK)
    schedule_kind: ScheduleKind = ScheduleKind.DAILY

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Habit name cannot be empty")
        return v


class HabitUpdateRequest(BaseModel):
    """Partial update. Omitted fields keep their current value."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    target_per_week: int | None = Field(
        default=None, ge=MIN_TARGET_PER_WEEK, le=MAX_TARGET_PER_WEEK
    )
    schedule_kind: ScheduleKind | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Habit name cannot be empty")
        return v


class HabitResponse(BaseModel):
    """A habit, with this week's progress when listed."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    target_per_week: int
    schedule_kind: ScheduleKind
    created_at: datetime
    done_today: bool = False
    done_this_week: int = 0


class CheckinResponse(BaseModel):
    """Result of an idempotent check-in. created is False for a repeat."""

    model_config = ConfigDict(from_attributes=True)

    habit_id: int
    checkin_date: date
    created: bool


# Stats


class HabitProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    habit_id: int
    habit_name: str
    target: int
    completed: int
    is_met: bool


class QuotaStatsResponse(BaseModel):
    """Weekly quota completion for the current Monday-Sunday week."""

    model_config = ConfigDict(from_attributes=True)

    weekly_quotas_met: int
    total_checkins: int
    total_habits: int
    week_start: date
    week_end: date
    current_week_progress: list[HabitProgressResponse]


class StreakResponse(BaseModel):
    """Response containing user's streak information."""

    model_config = ConfigDict(from_attributes=True)

    daily_streak: int
    weekly_streak: int
    last_checkin_date: date | None = None


class DashboardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    quota: QuotaStatsResponse
    streak: StreakResponse


class CalendarDayResponse(BaseModel):
    """Check-ins for a single day (for calendar display)."""

    model_config = ConfigDict(from_attributes=True)

    date: date
    count: int
    habit_names: list[str]


class CalendarMonthResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    year: int
    month: int
    start_date: date
    end_date: date
    total_checkins: int
    days: list[CalendarDayResponse]


# Battles


class BattleCreateRequest(BaseModel):
    """Request to start a battle against a friend."""

    friend_id: str = Field(min_length=1, max_length=255)


class BattleScoreResponse(BaseModel):
    """A member's score. habit_progress is empty for opponents."""

    model_config = ConfigDict(from_attributes=True)

    score: int
    total_habits: int
    habit_progress: list[HabitProgressResponse]


class BattleMemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    username: str | None = None
    avatar_url: str | None = None
    is_me: bool
    score: BattleScoreResponse


class BattleResponse(BaseModel):
    """A battle as seen by the caller."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    owner_id: str
    start_date: date
    end_date: date
    status: BattleStatus
    days_remaining: int
    members: list[BattleMemberResponse]
    winner_ids: list[str]
    standing: Standing | None = None


class BattleListResponse(BaseModel):
    active: list[BattleResponse]
    completed: list[BattleResponse]


# Leaderboard


class LeaderboardEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    username: str
    avatar_url: str | None = None
    battles_participated: int
    battles_won: int
    total_goals_completed: int


class LeaderboardResponse(BaseModel):
    """Friends ranked by battles won, ties broken by total goals completed."""

    entries: list[LeaderboardEntryResponse]
