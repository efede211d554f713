"""
SQLAlchemy ORM models for the NFL Bozo Bets tracker.

Defines database schema for teams, users, weekly prop bets, payments,
management audit records, bozo statistics, cached FanDuel props and the
NFL game schedule.
"""
from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.pool import StaticPool


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how rows are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class BetType(str, PyEnum):
    """Which of a user's two weekly picks a bet is."""

    BOZO = "BOZO"  # Risky long-shot pick
    FAVORITE = "FAVORITE"  # Safe pick


class BetStatus(str, PyEnum):
    """Bet lifecycle status."""

    PENDING = "PENDING"
    HIT = "HIT"
    BOZO = "BOZO"  # Missed
    PUSH = "PUSH"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, PyEnum):
    """Weekly buy-in payment status."""

    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


class ManagementAction(str, PyEnum):
    """Audit actions recorded by managers."""

    MARK_HIT = "MARK_HIT"
    MARK_BOZO = "MARK_BOZO"
    MARK_PUSH = "MARK_PUSH"
    MARK_CANCELLED = "MARK_CANCELLED"
    OVERRIDE_STATUS = "OVERRIDE_STATUS"


class NotificationType(str, PyEnum):
    """Kinds of outbound user notifications."""

    PAYMENT_REMINDER = "PAYMENT_REMINDER"
    PROP_RESULT = "PROP_RESULT"
    WEEKLY_REMINDER = "WEEKLY_REMINDER"


class Team(Base):
    """A group of friends betting together."""

    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    color: Mapped[str] = mapped_column(String(7), default="#3b82f6", nullable=False)

    # Allowed American odds range for bozo picks
    lowest_odds: Mapped[int] = mapped_column(Integer, default=-120, nullable=False)
    highest_odds: Mapped[int] = mapped_column(Integer, default=130, nullable=False)

    is_locked: Mapped[bool] = mapped_column(Boolean, default=False)
    biggest_bozo_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey(
            "users.id",
            use_alter=True,
            name="fk_teams_biggest_bozo_id",
            ondelete="SET NULL",
        ),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    # Relationships
    users: Mapped[list["User"]] = relationship(
        back_populates="team", foreign_keys="User.team_id"
    )
    biggest_bozo: Mapped[Optional["User"]] = relationship(
        foreign_keys=[biggest_bozo_id], post_update=True
    )
    weekly_bets: Mapped[list["WeeklyBet"]] = relationship(back_populates="team")
    invitations: Mapped[list["TeamInvitation"]] = relationship(
        back_populates="team", cascade="all, delete-orphan"
    )


class User(Base):
    """A bettor. Password is absent for members added by name only."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    # Running totals
    total_bozos: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_hits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_fav_misses: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Privileges
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_biggest_bozo: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    management_week: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    management_season: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    team_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    # Relationships
    team: Mapped[Optional["Team"]] = relationship(
        back_populates="users", foreign_keys=[team_id]
    )
    weekly_bets: Mapped[list["WeeklyBet"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    payments: Mapped[list["Payment"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    sessions: Mapped[list["UserSession"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    password_resets: Mapped[list["PasswordReset"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    notifications: Mapped[list["Notification"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    bozo_stats: Mapped[list["BozoStat"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    management_actions: Mapped[list["BetManagement"]] = relationship(
        back_populates="manager",
        foreign_keys="BetManagement.manager_id",
        cascade="all, delete-orphan",
    )
    targeted_actions: Mapped[list["BetManagement"]] = relationship(
        back_populates="target_user", foreign_keys="BetManagement.target_user_id"
    )
    sent_invitations: Mapped[list["TeamInvitation"]] = relationship(
        back_populates="invited_by"
    )

    @property
    def bozo_rate(self) -> float:
        """Percentage of settled bozo picks that missed."""
        settled = self.total_bozos + self.total_hits
        if settled == 0:
            return 0.0
        return self.total_bozos / settled * 100


class UserSession(Base):
    """A logged-in session keyed by its bearer token."""

    __tablename__ = "sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token: Mapped[str] = mapped_column(String(512), unique=True, nullable=False)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )

    user: Mapped["User"] = relationship(back_populates="sessions")


class PasswordReset(Base):
    """One-shot password reset token."""

    __tablename__ = "password_resets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    used: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )

    user: Mapped["User"] = relationship(back_populates="password_resets")


class TeamInvitation(Base):
    """Emailed invitation to join a team."""

    __tablename__ = "team_invitations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    team_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    invited_by_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    used: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )

    team: Mapped["Team"] = relationship(back_populates="invitations")
    invited_by: Mapped[Optional["User"]] = relationship(
        back_populates="sent_invitations"
    )


class WeeklyBet(Base):
    """A user's bozo or favorite prop pick for one NFL week."""

    __tablename__ = "weekly_bets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    team_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True, index=True
    )
    week: Mapped[int] = mapped_column(Integer, nullable=False)
    season: Mapped[int] = mapped_column(Integer, nullable=False)

    prop: Mapped[str] = mapped_column(String(500), nullable=False)
    odds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # American odds
    fanduel_id: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    bet_type: Mapped[BetType] = mapped_column(
        Enum(BetType), default=BetType.BOZO, nullable=False
    )
    status: Mapped[BetStatus] = mapped_column(
        Enum(BetStatus), default=BetStatus.PENDING, nullable=False
    )
    result: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    # Outcome already added to the owner's total_hits/total_bozos
    counted_status: Mapped[Optional[BetStatus]] = mapped_column(
        Enum(BetStatus), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="weekly_bets")
    team: Mapped[Optional["Team"]] = relationship(back_populates="weekly_bets")
    payments: Mapped[list["Payment"]] = relationship(
        back_populates="weekly_bet", cascade="all, delete-orphan"
    )
    management_records: Mapped[list["BetManagement"]] = relationship(
        back_populates="weekly_bet"
    )

    __table_args__ = (
        UniqueConstraint(
            "user_id", "week", "season", "bet_type", name="uq_weekly_bets_user_week_type"
        ),
        Index("ix_weekly_bets_season_week", "season", "week"),
    )


class Payment(Base):
    """Buy-in payment attached to a weekly bet."""

    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    weekly_bet_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("weekly_bets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    method: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    user: Mapped["User"] = relationship(back_populates="payments")
    weekly_bet: Mapped["WeeklyBet"] = relationship(back_populates="payments")


class BozoStat(Base):
    """Per-user, per-week bozo record."""

    __tablename__ = "bozo_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    week: Mapped[int] = mapped_column(Integer, nullable=False)
    season: Mapped[int] = mapped_column(Integer, nullable=False)
    is_biggest_bozo: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    odds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    prop: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )

    user: Mapped["User"] = relationship(back_populates="bozo_stats")

    __table_args__ = (
        UniqueConstraint("user_id", "week", "season", name="uq_bozo_stats_user_week"),
        Index("ix_bozo_stats_season_week", "season", "week"),
    )


class BetManagement(Base):
    """Audit trail of manager actions on bets and stats."""

    __tablename__ = "bet_management"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    weekly_bet_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("weekly_bets.id", ondelete="SET NULL"), nullable=True
    )
    manager_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    target_user_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    week: Mapped[int] = mapped_column(Integer, nullable=False)
    season: Mapped[int] = mapped_column(Integer, nullable=False)
    action: Mapped[ManagementAction] = mapped_column(
        Enum(ManagementAction), nullable=False
    )
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Populated for stats overrides
    bozo_change: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    hit_change: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )

    weekly_bet: Mapped[Optional["WeeklyBet"]] = relationship(
        back_populates="management_records"
    )
    manager: Mapped["User"] = relationship(
        back_populates="management_actions", foreign_keys=[manager_id]
    )
    target_user: Mapped[Optional["User"]] = relationship(
        back_populates="targeted_actions", foreign_keys=[target_user_id]
    )

    __table_args__ = (Index("ix_bet_management_season_week", "season", "week"),)


class FanduelProp(Base):
    """Sportsbook prop line cached from the odds feed."""

    __tablename__ = "fanduel_props"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    fanduel_id: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    player: Mapped[str] = mapped_column(String(200), nullable=False)
    team: Mapped[str] = mapped_column(String(100), nullable=False)
    prop: Mapped[str] = mapped_column(String(100), nullable=False)
    line: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    odds: Mapped[int] = mapped_column(Integer, nullable=False)
    over_odds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    under_odds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    bookmaker: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    week: Mapped[int] = mapped_column(Integer, nullable=False)
    season: Mapped[int] = mapped_column(Integer, nullable=False)
    game_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[BetStatus] = mapped_column(
        Enum(BetStatus), default=BetStatus.PENDING, nullable=False
    )
    result: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # over/under/push

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    __table_args__ = (Index("ix_fanduel_props_season_week", "season", "week"),)


class GameType(str, PyEnum):
    """Kickoff slot of a regular-season game."""

    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"
    MONDAY = "MONDAY"


class NFLGame(Base):
    """One scheduled NFL game. Kickoff is US/Eastern wall-clock time."""

    __tablename__ = "nfl_games"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)  # e.g. week1-thursday
    season: Mapped[int] = mapped_column(Integer, nullable=False)
    week: Mapped[int] = mapped_column(Integer, nullable=False)
    home_team: Mapped[str] = mapped_column(String(100), nullable=False)
    away_team: Mapped[str] = mapped_column(String(100), nullable=False)
    game_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    game_type: Mapped[GameType] = mapped_column(Enum(GameType), nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_nfl_games_season_week", "season", "week"),
        Index("ix_nfl_games_game_time", "game_time"),
    )


class Notification(Base):
    """Log of SMS/push notifications sent to users."""

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[NotificationType] = mapped_column(
        Enum(NotificationType), nullable=False
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )

    user: Mapped["User"] = relationship(back_populates="notifications")


class ApiUsage(Base):
    """Monthly request counter for the odds API."""

    __tablename__ = "api_usage"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    month: Mapped[str] = mapped_column(String(7), unique=True, nullable=False)  # YYYY-MM
    requests_used: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_reset: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )


def get_engine(database_url: str) -> Engine:
    """
    Get SQLAlchemy engine for database operations.

    In-memory SQLite shares one connection so every session sees the
    same tables.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        SQLAlchemy Engine
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True)


def init_db(database_url: str) -> Engine:
    """
    Initialize the database with all tables.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        The engine the tables were created on
    """
    engine = get_engine(database_url)
    Base.metadata.create_all(engine)
    return engine
