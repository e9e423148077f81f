"""SQLAlchemy models for habits, check-ins, battles and friendships."""

from datetime import UTC, date, datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship

from core.database import Base

MIN_TARGET_PER_WEEK = 1
MAX_TARGET_PER_WEEK = 7


def utcnow() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamp columns."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utcnow)

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class User(TimestampMixin, Base):
    """User profile - id is the hosted auth service's subject."""

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("username", name="uq_users_username"),)

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    username: Mapped[str | None] = mapped_column(String(50), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    habits: Mapped[list["Habit"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )


class ScheduleKind(str, PyEnum):
    DAILY = "daily"
    WEEKLY = "weekly"


class Habit(Base):
    """A recurring task with a weekly check-in target."""

    __tablename__ = "habits"
    __table_args__ = (
        CheckConstraint(
            f"target_per_week BETWEEN {MIN_TARGET_PER_WEEK} AND {MAX_TARGET_PER_WEEK}",
            name="ck_habits_target_per_week",
        ),
        Index("ix_habits_user_created", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    target_per_week: Mapped[int] = mapped_column(Integer, nullable=False)
    schedule_kind: Mapped[ScheduleKind] = mapped_column(
        Enum(
            ScheduleKind,
            name="schedule_kind",
            native_enum=False,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=ScheduleKind.DAILY,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
    )

    user: Mapped["User"] = relationship(back_populates="habits")
    checkins: Mapped[list["Checkin"]] = relationship(
        back_populates="habit",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Checkin(Base):
    """One habit done on one calendar day.

    Note: Only has created_at since check-ins are never edited.
    """

    __tablename__ = "checkins"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "habit_id", "checkin_date", name="uq_checkins_user_habit_date"
        ),
        Index("ix_checkins_user_date", "user_id", "checkin_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    habit_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("habits.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    checkin_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
    )

    habit: Mapped["Habit"] = relationship(back_populates="checkins")


class Battle(Base):
    """A 7-day head-to-head between two users. Immutable once created."""

    __tablename__ = "battles"
    __table_args__ = (
        CheckConstraint(
            "end_date = start_date + 6", name="ck_battles_seven_day_window"
        ),
        Index("ix_battles_dates", "start_date", "end_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    owner_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
    )

    members: Mapped[list["BattleMember"]] = relationship(
        back_populates="battle",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=lambda: [BattleMember.joined_at, BattleMember.user_id],
    )

    @property
    def member_ids(self) -> list[str]:
        return [m.user_id for m in self.members]


class BattleMember(Base):
    __tablename__ = "battle_members"
    __table_args__ = (Index("ix_battle_members_user", "user_id"),)

    battle_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("battles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
    )

    battle: Mapped["Battle"] = relationship(back_populates="members")


class FriendshipStatus(str, PyEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"


class Friendship(TimestampMixin, Base):
    """A friend link between two users, stored once per pair."""

    __tablename__ = "friendships"
    __table_args__ = (
        UniqueConstraint("user_id", "friend_id", name="uq_friendships_pair"),
        Index("ix_friendships_friend", "friend_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    friend_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[FriendshipStatus] = mapped_column(
        Enum(
            FriendshipStatus,
            name="friendship_status",
            native_enum=False,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=FriendshipStatus.PENDING,
    )
