"""
Automated bet processing.

Two runs drive the weekly cycle:
- daily at 01:00, after a day with games, pending bets are settled
- Tuesday at 02:00 the previous week's Biggest Bozo receives management
  privileges and players are told how their props went

The same entry points back the cron endpoint, the admin endpoint and the
scheduler jobs.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from bozo_bets.config.constants import REGULAR_SEASON_WEEKS
from bozo_bets.database.models import BetStatus, BetType, WeeklyBet
from bozo_bets.notifications.service import NotificationService
from bozo_bets.schedule.games import has_games_to_settle, mark_started_games_completed
from bozo_bets.schedule.nfl_weeks import get_current_nfl_week, get_nfl_week_info
from bozo_bets.tracking.bozo_stats import calculate_biggest_bozo, update_bozo_stats

from .results import FanduelPropResolver, ResultResolver

log = logger.bind(component="automated_processing")

DAILY_RESULTS_HOUR = 1
TUESDAY_ANNOTATION_HOUR = 2
TUESDAY = 1  # datetime.weekday()


@dataclass
class BetProcessingResult:
    """Counts from one daily settlement run."""

    week: int
    season: int
    processed_bets: int = 0
    hits: int = 0
    bozos: int = 0
    pushes: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "week": self.week,
            "season": self.season,
            "processed_bets": self.processed_bets,
            "hits": self.hits,
            "bozos": self.bozos,
            "pushes": self.pushes,
            "errors": self.errors,
        }


def process_daily_bet_results(
    db: Session,
    week: int,
    season: int,
    resolver: Optional[ResultResolver] = None,
) -> BetProcessingResult:
    """
    Settle the week's pending bets that the resolver can decide.

    A failure on one bet is recorded in ``errors`` and the run moves on.
    Bozo stats are recomputed when at least one bet was settled.
    """
    resolver = resolver or FanduelPropResolver()
    result = BetProcessingResult(week=week, season=season)

    pending = db.scalars(
        select(WeeklyBet)
        .where(
            WeeklyBet.week == week,
            WeeklyBet.season == season,
            WeeklyBet.status == BetStatus.PENDING,
        )
        .order_by(WeeklyBet.id)
    ).all()
    log.info(f"Processing {len(pending)} pending bets for week {week}, {season}")

    for bet in pending:
        bet_id = bet.id
        try:
            resolution = resolver.resolve(db, bet)
            if resolution is None:
                continue

            bet.status = resolution.status
            bet.result = resolution.result
            db.commit()
        except Exception as e:
            db.rollback()
            message = f"Error processing bet {bet_id}: {e}"
            log.error(message)
            result.errors.append(message)
            continue

        result.processed_bets += 1
        if resolution.status == BetStatus.HIT:
            result.hits += 1
        elif resolution.status == BetStatus.BOZO:
            result.bozos += 1
        elif resolution.status == BetStatus.PUSH:
            result.pushes += 1

    if result.processed_bets > 0:
        update_bozo_stats(db, week, season)

    log.info(
        f"Daily processing complete: {result.processed_bets} bets processed, "
        f"{len(result.errors)} errors"
    )
    return result


def settle_previous_day(
    db: Session,
    now: Optional[datetime] = None,
    resolver: Optional[ResultResolver] = None,
) -> Optional[BetProcessingResult]:
    """
    Settle the week of yesterday's games.

    Games that kicked off long enough ago are marked completed first. When
    the week has a stored schedule with no game yesterday nothing is
    settled and None is returned.
    """
    now = now or datetime.now()
    yesterday = now - timedelta(days=1)
    week, season = get_current_processing_week(yesterday)

    mark_started_games_completed(db, now)
    if not has_games_to_settle(db, yesterday.date(), week, season):
        log.info(f"No games on {yesterday:%Y-%m-%d}, skipping daily results for week {week}")
        return None

    log.info(f"Running daily bet results for week {week}, {season}")
    return process_daily_bet_results(db, week, season, resolver=resolver)


def process_tuesday_bozo_annotation(
    db: Session,
    week: int,
    season: int,
    notifier: Optional[NotificationService] = None,
) -> dict[str, Any]:
    """
    Crown the previous week's Biggest Bozo as ``week``'s manager.

    Returns ``{"success": True, "biggest_bozo": {...} | None}``.
    """
    user = calculate_biggest_bozo(db, week, season)
    if user is None:
        log.info(f"No biggest bozo found for week {week}, {season}")
        return {"success": True, "biggest_bozo": None}

    bet = db.scalar(
        select(WeeklyBet)
        .where(
            WeeklyBet.user_id == user.id,
            WeeklyBet.week == week - 1,
            WeeklyBet.season == season,
            WeeklyBet.bet_type == BetType.BOZO,
            WeeklyBet.status == BetStatus.BOZO,
        )
        .order_by(WeeklyBet.odds.desc())
    )
    biggest = {
        "user_id": user.id,
        "user_name": user.name,
        "odds": bet.odds if bet and bet.odds is not None else 0,
        "prop": bet.prop if bet else None,
    }
    log.info(
        f"Biggest bozo assigned: {user.name} with {biggest['odds']} odds "
        f"on \"{biggest['prop']}\""
    )

    (notifier or NotificationService()).send_prop_result_notifications(
        db, week - 1, season
    )
    return {"success": True, "biggest_bozo": biggest}


def should_process_daily_bet_results(now: Optional[datetime] = None) -> bool:
    now = now or datetime.now()
    return now.hour == DAILY_RESULTS_HOUR


def should_process_tuesday_bozo_annotation(now: Optional[datetime] = None) -> bool:
    now = now or datetime.now()
    return now.weekday() == TUESDAY and now.hour == TUESDAY_ANNOTATION_HOUR


def get_current_processing_week(now: Optional[datetime] = None) -> tuple[int, int]:
    """
    ``(week, season)`` to process at ``now``.

    Between seasons this is the final regular-season week of the season
    that just ended.
    """
    now = now or datetime.now()
    current = get_current_nfl_week(now=now)
    if current is not None:
        return current.week, current.season

    season = now.year - 1 if get_nfl_week_info(1, now.year, now=now).is_future else now.year
    return REGULAR_SEASON_WEEKS, season


def run_automated_processing(
    db: Session,
    now: Optional[datetime] = None,
    resolver: Optional[ResultResolver] = None,
    notifier: Optional[NotificationService] = None,
) -> dict[str, Any]:
    """
    Run whichever job is due at ``now``.

    The Tuesday run takes precedence. The daily run settles the week of
    the previous day's games, so the 01:00 Tuesday run still covers
    Monday night. It is skipped (``processed`` False) when the stored
    schedule had no game that day.

    Returns:
        ``{"processed": bool, "type": "daily" | "tuesday" | "none",
        "result": dict | None}``
    """
    now = now or datetime.now()

    if should_process_tuesday_bozo_annotation(now):
        week, season = get_current_processing_week(now)
        log.info(f"Running Tuesday bozo annotation for week {week}, {season}")
        result = process_tuesday_bozo_annotation(db, week, season, notifier=notifier)
        return {"processed": True, "type": "tuesday", "result": result}

    if should_process_daily_bet_results(now):
        result = settle_previous_day(db, now=now, resolver=resolver)
        if result is None:
            return {"processed": False, "type": "daily", "result": None}
        return {"processed": True, "type": "daily", "result": result.to_dict()}

    log.info("No automated processing needed at this time")
    return {"processed": False, "type": "none", "result": None}
