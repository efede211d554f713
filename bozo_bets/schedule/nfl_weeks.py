"""
NFL week calendar.

Each regular-season week owns a seven day betting window. Week N's window
opens on the Tuesday after week N-1's Monday night game, i.e. two days
before week N's Thursday kickoff, and closes when week N+1's opens.

All functions accept an explicit ``now`` so callers (and tests) control
the clock.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from bozo_bets.config.constants import (
    REGULAR_SEASON_WEEKS,
    SEASON_KICKOFFS,
    WINDOW_LEAD_DAYS,
)


@dataclass(frozen=True)
class NFLWeekInfo:
    """Betting window for one NFL week."""

    week: int
    season: int
    start_date: datetime
    end_date: datetime
    is_active: bool
    is_past: bool
    is_future: bool

    def to_dict(self) -> dict:
        return {
            "week": self.week,
            "season": self.season,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "is_active": self.is_active,
            "is_past": self.is_past,
            "is_future": self.is_future,
        }


@dataclass(frozen=True)
class BetWindowCheck:
    """Whether a bet may be submitted for a week, and why not."""

    can_submit: bool
    reason: Optional[str] = None
    current_week: Optional[NFLWeekInfo] = None


def get_season_kickoff(season: int) -> date:
    """
    Thursday of week 1.

    Uses the published opener when known, otherwise the Thursday after
    Labor Day (first Monday of September).
    """
    if season in SEASON_KICKOFFS:
        return SEASON_KICKOFFS[season]

    labor_day = date(season, 9, 1)
    while labor_day.weekday() != 0:
        labor_day += timedelta(days=1)
    return labor_day + timedelta(days=3)


def _window_start(week: int, season: int) -> datetime:
    kickoff = get_season_kickoff(season)
    start = kickoff + timedelta(days=(week - 1) * 7 - WINDOW_LEAD_DAYS)
    return datetime(start.year, start.month, start.day)


def get_nfl_week_info(
    week: int, season: int, now: Optional[datetime] = None
) -> NFLWeekInfo:
    """
    Get information about a specific NFL week.

    Raises:
        ValueError: If week is outside the regular season
    """
    if not 1 <= week <= REGULAR_SEASON_WEEKS:
        raise ValueError(f"Week must be between 1 and {REGULAR_SEASON_WEEKS}")

    now = now or datetime.now()
    start = _window_start(week, season)
    closes = start + timedelta(days=7)

    return NFLWeekInfo(
        week=week,
        season=season,
        start_date=start,
        end_date=start + timedelta(days=6),
        is_active=start <= now < closes,
        is_past=now >= closes,
        is_future=now < start,
    )


def get_current_nfl_week(
    season: Optional[int] = None, now: Optional[datetime] = None
) -> Optional[NFLWeekInfo]:
    """
    Find the week whose betting window contains ``now``.

    Before week 1 of ``season`` the previous season is searched. Returns
    None between seasons.
    """
    now = now or datetime.now()
    if season is None:
        season = now.year

    if now < _window_start(1, season):
        season -= 1

    for week in range(1, REGULAR_SEASON_WEEKS + 1):
        info = get_nfl_week_info(week, season, now=now)
        if info.is_active:
            return info
    return None


def can_submit_bet_for_week(
    week: int, season: int, now: Optional[datetime] = None
) -> BetWindowCheck:
    """Only the current week accepts bets."""
    current = get_current_nfl_week(season, now=now)

    if current is None or current.season != season:
        return BetWindowCheck(
            can_submit=False, reason="NFL season is not currently active"
        )

    if week < current.week:
        return BetWindowCheck(
            can_submit=False,
            reason=f"Week {week} has already passed. Current week is {current.week}",
            current_week=current,
        )
    if week > current.week:
        return BetWindowCheck(
            can_submit=False,
            reason=f"Week {week} is in the future. Current week is {current.week}",
            current_week=current,
        )

    if not current.is_active:
        return BetWindowCheck(
            can_submit=False,
            reason=f"Week {week} is no longer active. Betting period has ended.",
            current_week=current,
        )

    return BetWindowCheck(can_submit=True, current_week=current)


def get_available_weeks(season: int, now: Optional[datetime] = None) -> list[NFLWeekInfo]:
    return [
        get_nfl_week_info(week, season, now=now)
        for week in range(1, REGULAR_SEASON_WEEKS + 1)
    ]


def format_nfl_week_date(value: date) -> str:
    """Format like 'Thursday, Sep 4, 2025'."""
    return f"{value:%A}, {value:%b} {value.day}, {value.year}"


def get_week_status_description(
    week: int, season: int, now: Optional[datetime] = None
) -> str:
    check = can_submit_bet_for_week(week, season, now=now)
    if check.can_submit:
        return f"Week {week} is currently active - you can submit bets!"
    return check.reason or "Unable to determine week status"
