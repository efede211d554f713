"""
Pydantic schemas for data validation and serialization.

Used for API request bodies, responses, and data transfer between
services.
"""
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field, field_validator

from bozo_bets.config.constants import MIN_SEASON, REGULAR_SEASON_WEEKS
from bozo_bets.database.models import (
    BetStatus,
    BetType,
    GameType,
    ManagementAction,
    NotificationType,
    PaymentStatus,
)

EASTERN = ZoneInfo("America/New_York")


# =============================================================================
# TEAM SCHEMAS
# =============================================================================
class TeamSummary(BaseModel):
    """Minimal team info embedded in user payloads."""

    id: int
    name: str
    color: str

    class Config:
        from_attributes = True


class TeamBase(BaseModel):
    """Base schema for team data."""

    name: str = Field(min_length=1, max_length=50)
    description: Optional[str] = None
    color: str = Field(default="#3b82f6", pattern=r"^#[0-9A-Fa-f]{6}$")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Team name is required")
        return v


class TeamCreate(TeamBase):
    """Schema for creating a team."""

    lowest_odds: int = -120
    highest_odds: int = 130


class TeamUpdate(BaseModel):
    """Schema for editing a team. Omitted fields are left unchanged."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
    lowest_odds: Optional[int] = None
    highest_odds: Optional[int] = None
    is_locked: Optional[bool] = None


class TeamMember(BaseModel):
    """User listed inside a team."""

    id: int
    name: str
    email: str
    total_bozos: int
    total_hits: int
    is_biggest_bozo: bool

    class Config:
        from_attributes = True


class TeamResponse(TeamBase):
    """Schema for team response."""

    id: int
    lowest_odds: int
    highest_odds: int
    is_locked: bool
    biggest_bozo_id: Optional[int] = None
    created_at: datetime
    users: list[TeamMember] = []

    class Config:
        from_attributes = True


class TeamInvite(BaseModel):
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class JoinTeam(BaseModel):
    token: str = Field(min_length=1)


class TeamMemberRequest(BaseModel):
    user_id: int


# =============================================================================
# USER SCHEMAS
# =============================================================================
class UserCreate(BaseModel):
    """Schema for adding a member by name."""

    name: str = Field(min_length=1, max_length=100)
    team_id: Optional[int] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class UserUpdate(BaseModel):
    """Schema for moving a user between teams."""

    team_id: Optional[int] = None


class UserResponse(BaseModel):
    """Public user payload. Never includes the password hash."""

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    total_bozos: int
    total_hits: int
    total_fav_misses: int
    is_admin: bool
    is_biggest_bozo: bool
    management_week: Optional[int] = None
    management_season: Optional[int] = None
    team_id: Optional[int] = None
    team: Optional[TeamSummary] = None
    created_at: datetime

    class Config:
        from_attributes = True


# =============================================================================
# AUTH SCHEMAS
# =============================================================================
class RegisterRequest(BaseModel):
    """Self-registration body."""

    name: str = Field(min_length=2, max_length=100)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str
    team_id: Optional[int] = None


class LoginRequest(BaseModel):
    """Credentials body."""

    email: str
    password: str


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str
    password: str


class AuthResponse(BaseModel):
    """Successful login or registration."""

    success: bool = True
    message: str
    user: UserResponse
    token: str


# =============================================================================
# WEEKLY BET SCHEMAS
# =============================================================================
class WeeklyBetCreate(BaseModel):
    """Schema for submitting a weekly pick."""

    user_id: int
    week: int = Field(ge=1, le=REGULAR_SEASON_WEEKS)
    season: int = Field(ge=MIN_SEASON)
    prop: str = Field(min_length=1, max_length=500)
    odds: Optional[int] = None
    fanduel_id: Optional[str] = None
    bet_type: BetType = BetType.BOZO

    @field_validator("prop")
    @classmethod
    def strip_prop(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Prop is required")
        return v


class WeeklyBetUpdate(BaseModel):
    """Schema for editing a pick."""

    prop: Optional[str] = Field(default=None, min_length=1, max_length=500)
    odds: Optional[int] = None
    fanduel_id: Optional[str] = None


class PaymentResponse(BaseModel):
    """Schema for payment response."""

    id: int
    user_id: int
    weekly_bet_id: int
    amount: float
    method: str
    status: PaymentStatus
    paid_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class BetUser(BaseModel):
    """Bettor info embedded in bet payloads."""

    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class WeeklyBetResponse(BaseModel):
    """Schema for weekly bet response."""

    id: int
    user_id: int
    team_id: Optional[int] = None
    week: int
    season: int
    prop: str
    odds: Optional[int] = None
    fanduel_id: Optional[str] = None
    bet_type: BetType
    status: BetStatus
    result: Optional[str] = None
    created_at: datetime
    user: Optional[BetUser] = None
    payments: list[PaymentResponse] = []

    class Config:
        from_attributes = True


# =============================================================================
# PAYMENT SCHEMAS
# =============================================================================
class PaymentCreate(BaseModel):
    """Schema for recording a payment."""

    user_id: int
    weekly_bet_id: int
    amount: float = Field(gt=0)
    method: str = Field(min_length=1, max_length=50)
    status: PaymentStatus = PaymentStatus.PENDING


class PaymentMark(BaseModel):
    """Toggle a bet's payment between paid and unpaid."""

    weekly_bet_id: int
    status: str = Field(pattern="^(PAID|UNPAID)$")
    method: Optional[str] = Field(default=None, min_length=1, max_length=50)
    amount: Optional[float] = Field(default=None, gt=0)


class PaymentUpdate(BaseModel):
    status: Optional[PaymentStatus] = None
    method: Optional[str] = Field(default=None, min_length=1, max_length=50)


# =============================================================================
# MANAGEMENT SCHEMAS
# =============================================================================
class ManagementRecordResponse(BaseModel):
    """Audit record of a manager action."""

    id: int
    weekly_bet_id: Optional[int] = None
    manager_id: int
    target_user_id: Optional[int] = None
    week: int
    season: int
    action: ManagementAction
    reason: Optional[str] = None
    bozo_change: int
    hit_change: int
    created_at: datetime

    class Config:
        from_attributes = True


class StatsUpdate(BaseModel):
    """One user's stat delta in a bulk update."""

    user_id: int
    bozo_change: int = 0
    hit_change: int = 0


class WeekScope(BaseModel):
    week: int = Field(ge=1, le=REGULAR_SEASON_WEEKS)
    season: int = Field(ge=MIN_SEASON)


class MarkBetStatus(WeekScope):
    """Manager settling a bet by hand."""

    bet_id: int
    status: BetStatus
    manager_id: int
    reason: Optional[str] = Field(default=None, max_length=500)


class ManagementRequest(BaseModel):
    """
    Body of ``POST /management``.

    Which optional fields are required depends on ``action``.
    """

    action: str
    # mark_bet_status
    bet_id: Optional[int] = None
    status: Optional[BetStatus] = None
    manager_id: Optional[int] = None
    reason: Optional[str] = None
    # admin_access
    passcode: Optional[str] = None
    sub_action: Optional[str] = None
    total_bozos: Optional[int] = None
    total_hits: Optional[int] = None
    # assign_biggest_bozo
    user_id: Optional[int] = None
    team_id: Optional[int] = None
    week: Optional[int] = Field(default=None, ge=1, le=REGULAR_SEASON_WEEKS)
    season: Optional[int] = Field(default=None, ge=MIN_SEASON)


class UpdateStats(WeekScope):
    user_id: int
    bozo_change: int = 0
    hit_change: int = 0
    manager_id: int
    reason: Optional[str] = Field(default=None, max_length=500)


class BulkUpdateStats(WeekScope):
    updates: list[StatsUpdate] = Field(min_length=1)
    manager_id: int


class RotatePrivileges(WeekScope):
    team_id: int


class AutomatedProcessingRequest(BaseModel):
    """Manual run of the settlement jobs."""

    action: str = Field(pattern="^(run_automated|process_daily|process_tuesday)$")
    week: Optional[int] = Field(default=None, ge=1, le=REGULAR_SEASON_WEEKS)
    season: Optional[int] = Field(default=None, ge=MIN_SEASON)


class NFLGameIn(BaseModel):
    """One game of an uploaded schedule. Aware kickoffs are converted to ET."""

    id: str = Field(min_length=1, max_length=50)
    week: int = Field(ge=1, le=REGULAR_SEASON_WEEKS)
    season: int = Field(ge=MIN_SEASON)
    home_team: str = Field(min_length=1, max_length=100)
    away_team: str = Field(min_length=1, max_length=100)
    game_time: datetime
    game_type: GameType
    is_completed: bool = False

    @field_validator("game_time")
    @classmethod
    def eastern_wall_clock(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v
        return v.astimezone(EASTERN).replace(tzinfo=None)


class NFLScheduleRequest(BaseModel):
    """
    Body of ``POST /management/nfl-schedule``.

    ``games`` is required for update_schedule and ``game_id`` for
    mark_game_completed.
    """

    action: str
    games: Optional[list[NFLGameIn]] = None
    game_id: Optional[str] = None
    week: Optional[int] = Field(default=None, ge=1, le=REGULAR_SEASON_WEEKS)
    season: Optional[int] = Field(default=None, ge=MIN_SEASON)


# =============================================================================
# BOZO STAT SCHEMAS
# =============================================================================
class BozoStatResponse(BaseModel):
    id: int
    user_id: int
    week: int
    season: int
    is_biggest_bozo: bool
    odds: Optional[int] = None
    prop: Optional[str] = None

    class Config:
        from_attributes = True


class LeaderboardEntry(BaseModel):
    """Row in the all-time bozo leaderboard."""

    user_id: int
    user_name: str
    total_bozos: int
    total_hits: int
    bozo_rate: float
    team_name: Optional[str] = None
    team_color: Optional[str] = None


# =============================================================================
# PROP SCHEMAS
# =============================================================================
class FanduelPropResponse(BaseModel):
    """Schema for a cached sportsbook prop."""

    id: int
    fanduel_id: str
    player: str
    team: str
    prop: str
    line: float
    odds: int
    over_odds: Optional[int] = None
    under_odds: Optional[int] = None
    bookmaker: Optional[str] = None
    week: int
    season: int
    game_time: datetime
    status: BetStatus
    result: Optional[str] = None

    class Config:
        from_attributes = True


class PropResultUpdate(BaseModel):
    """Settled outcome for one prop."""

    fanduel_id: str
    status: BetStatus
    result: Optional[str] = Field(default=None, pattern="^(over|under|push)$")


class PropResultsRequest(WeekScope):
    results: list[PropResultUpdate]


class OddsFetchRequest(WeekScope):
    pass


class PropSearchRequest(BaseModel):
    """Free-text prop lookup; either field may carry the text."""

    prop_text: Optional[str] = None
    search_query: Optional[str] = None

    @property
    def text(self) -> str:
        return (self.prop_text or self.search_query or "").strip()


# =============================================================================
# NOTIFICATION SCHEMAS
# =============================================================================
class NotificationCron(BaseModel):
    type: str
    week: Optional[int] = Field(default=None, ge=1, le=REGULAR_SEASON_WEEKS)
    season: Optional[int] = Field(default=None, ge=MIN_SEASON)


class NotificationResponse(BaseModel):
    id: int
    user_id: int
    type: NotificationType
    message: str
    sent: bool
    sent_at: Optional[datetime] = None

    class Config:
        from_attributes = True
