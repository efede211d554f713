"""
Per-game NFL schedule and settlement timing.

A week is ready to settle ``GAME_PROCESSING_DELAY`` after its last
kickoff. Kickoffs are stored as US/Eastern wall-clock times, the same
clock the scheduler jobs run on.

Loading a schedule replaces every stored game of the weeks it covers, so
an admin can resend a corrected week without clearing the table first.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional

from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from bozo_bets.config.constants import GAME_PROCESSING_DELAY, PROCESSING_WINDOW
from bozo_bets.database.models import GameType, NFLGame
from bozo_bets.errors import NotFoundError, ValidationError

from .schedule_2025 import SCHEDULE_2025, SEASON_2025

log = logger.bind(component="nfl_schedule")


@dataclass(frozen=True)
class WeekSchedule:
    """The games of one week and when its bets can be settled."""

    week: int
    season: int
    games: list[NFLGame]
    last_game_time: datetime
    processing_time: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "week": self.week,
            "season": self.season,
            "games": [game_to_dict(game) for game in self.games],
            "last_game_time": self.last_game_time.isoformat(),
            "processing_time": self.processing_time.isoformat(),
        }


def game_to_dict(game: NFLGame) -> dict[str, Any]:
    return {
        "id": game.id,
        "week": game.week,
        "season": game.season,
        "home_team": game.home_team,
        "away_team": game.away_team,
        "game_time": game.game_time.isoformat(),
        "game_type": game.game_type.value,
        "is_completed": game.is_completed,
    }


def _week_games(db: Session, week: int, season: int) -> list[NFLGame]:
    return list(
        db.scalars(
            select(NFLGame)
            .where(NFLGame.week == week, NFLGame.season == season)
            .order_by(NFLGame.game_time, NFLGame.id)
        )
    )


def update_schedule(db: Session, games: Iterable[dict[str, Any]]) -> int:
    """
    Store ``games``, replacing the stored games of every week they cover.

    Each item needs ``id``, ``week``, ``season``, ``home_team``,
    ``away_team``, ``game_time`` and ``game_type``; ``is_completed``
    defaults to False.

    Returns:
        Number of games stored

    Raises:
        ValidationError: Empty schedule or a game id given twice
    """
    games = list(games)
    if not games:
        raise ValidationError("Schedule must contain at least one game")

    ids = [item["id"] for item in games]
    duplicates = sorted({game_id for game_id in ids if ids.count(game_id) > 1})
    if duplicates:
        raise ValidationError("Duplicate game ids in schedule", details=duplicates)

    weeks = {(item["season"], item["week"]) for item in games}
    for season, week in weeks:
        db.execute(delete(NFLGame).where(NFLGame.season == season, NFLGame.week == week))
    # Ids may move between weeks in a corrected schedule
    db.execute(delete(NFLGame).where(NFLGame.id.in_(ids)))

    for item in games:
        db.add(
            NFLGame(
                id=item["id"],
                week=item["week"],
                season=item["season"],
                home_team=item["home_team"],
                away_team=item["away_team"],
                game_time=item["game_time"],
                game_type=GameType(item["game_type"]),
                is_completed=item.get("is_completed", False),
            )
        )
    db.commit()

    log.info(f"Updated NFL schedule with {len(games)} games across {len(weeks)} weeks")
    return len(games)


def load_bundled_schedule(db: Session) -> int:
    """Store the bundled 2025 schedule (weeks 1-4)."""
    return update_schedule(
        db,
        (
            {
                "id": game_id,
                "week": week,
                "season": SEASON_2025,
                "home_team": home,
                "away_team": away,
                "game_time": datetime.fromisoformat(kickoff),
                "game_type": game_type,
            }
            for game_id, week, kickoff, home, away, game_type in SCHEDULE_2025
        ),
    )


def get_week_schedule(db: Session, week: int, season: int) -> Optional[WeekSchedule]:
    """The week's games, or None when no schedule is stored for it."""
    games = _week_games(db, week, season)
    if not games:
        return None

    last_game_time = max(game.game_time for game in games)
    return WeekSchedule(
        week=week,
        season=season,
        games=games,
        last_game_time=last_game_time,
        processing_time=last_game_time + GAME_PROCESSING_DELAY,
    )


def get_last_game_start_time(db: Session, week: int, season: int) -> Optional[datetime]:
    schedule = get_week_schedule(db, week, season)
    return schedule.last_game_time if schedule else None


def get_processing_time(db: Session, week: int, season: int) -> Optional[datetime]:
    schedule = get_week_schedule(db, week, season)
    return schedule.processing_time if schedule else None


def should_process_bets_for_week(
    db: Session, week: int, season: int, now: Optional[datetime] = None
) -> bool:
    """True within ``PROCESSING_WINDOW`` either side of the week's processing time."""
    processing_time = get_processing_time(db, week, season)
    if processing_time is None:
        return False

    now = now or datetime.now()
    return abs(now - processing_time) <= PROCESSING_WINDOW


def get_games_for_day(db: Session, day: date, week: int, season: int) -> list[NFLGame]:
    start = datetime(day.year, day.month, day.day)
    return list(
        db.scalars(
            select(NFLGame)
            .where(
                NFLGame.week == week,
                NFLGame.season == season,
                NFLGame.game_time >= start,
                NFLGame.game_time < start + timedelta(days=1),
            )
            .order_by(NFLGame.game_time, NFLGame.id)
        )
    )


def has_games_to_settle(db: Session, day: date, week: int, season: int) -> bool:
    """
    Whether the daily run should settle ``day``.

    Weeks without a stored schedule are always settled.
    """
    has_schedule = db.scalar(
        select(func.count(NFLGame.id)).where(NFLGame.week == week, NFLGame.season == season)
    )
    if not has_schedule:
        return True
    return bool(get_games_for_day(db, day, week, season))


def are_all_games_completed(db: Session, week: int, season: int) -> bool:
    games = _week_games(db, week, season)
    return bool(games) and all(game.is_completed for game in games)


def mark_game_completed(db: Session, game_id: str) -> NFLGame:
    game = db.get(NFLGame, game_id)
    if game is None:
        raise NotFoundError("Game not found", details={"game_id": game_id})

    game.is_completed = True
    db.commit()
    log.info(f"Marked game {game_id} completed")
    return game


def mark_started_games_completed(db: Session, now: Optional[datetime] = None) -> int:
    """Complete every game that kicked off at least ``GAME_PROCESSING_DELAY`` ago."""
    now = now or datetime.now()
    games = db.scalars(
        select(NFLGame).where(
            NFLGame.is_completed.is_(False),
            NFLGame.game_time <= now - GAME_PROCESSING_DELAY,
        )
    ).all()
    for game in games:
        game.is_completed = True
    if games:
        db.commit()
        log.info(f"Marked {len(games)} games completed")
    return len(games)


def format_processing_time(value: datetime) -> str:
    """Format like 'Tuesday, Sep 16, 12:15 AM ET'."""
    clock = f"{value:%I:%M %p}".lstrip("0")
    return f"{value:%A}, {value:%b} {value.day}, {clock} ET"


def get_week_processing_status(
    db: Session, week: int, season: int, now: Optional[datetime] = None
) -> dict[str, Any]:
    schedule = get_week_schedule(db, week, season)
    games = schedule.games if schedule else []

    return {
        "week": week,
        "season": season,
        "last_game_time": schedule.last_game_time.isoformat() if schedule else None,
        "processing_time": schedule.processing_time.isoformat() if schedule else None,
        "should_process": should_process_bets_for_week(db, week, season, now=now),
        "next_processing_time": (
            format_processing_time(schedule.processing_time) if schedule else None
        ),
        "games_completed": sum(1 for game in games if game.is_completed),
        "total_games": len(games),
    }
