"""
Background job definitions for the scheduler.

Each job is an async function that performs one task:
- run_daily_results: Settle the previous day's pending bets
- run_bozo_annotation: Crown the Biggest Bozo for the new week
- refresh_week_props: Refresh the current week's props from the odds feed
- send_weekly_reminders: Remind everyone that the new week is open
"""

import logging
import time
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy.orm import sessionmaker

from bozo_bets.database.session import session_scope
from bozo_bets.notifications.service import NotificationService
from bozo_bets.processing import (
    get_current_processing_week,
    process_tuesday_bozo_annotation,
    settle_previous_day,
)
from bozo_bets.props.fanduel import fetch_week_props
from bozo_bets.schedule.nfl_weeks import get_current_nfl_week

logger = logging.getLogger(__name__)


async def run_daily_results(
    session_factory: sessionmaker,
    now: Optional[datetime] = None,
) -> Optional[dict[str, Any]]:
    """
    Settle pending bets for the week of yesterday's games.

    Runs after the last game of the day, so the Tuesday 01:00 run still
    lands in the week that Monday night closed. Returns None on days the
    stored schedule had no game.
    """
    now = now or datetime.now()
    logger.info(f"Starting daily results for {now - timedelta(days=1):%Y-%m-%d}")
    start = time.time()

    with session_scope(session_factory) as db:
        result = settle_previous_day(db, now=now)

    if result is None:
        logger.info("No games yesterday, nothing to settle")
        return None

    elapsed = time.time() - start
    logger.info(
        f"Daily results complete in {elapsed:.1f}s: {result.processed_bets} settled, "
        f"{result.hits} hits, {result.bozos} bozos, {result.pushes} pushes"
    )
    if result.errors:
        logger.warning(f"Daily results errors (first 5): {result.errors[:5]}")
    return result.to_dict()


async def run_bozo_annotation(
    session_factory: sessionmaker,
    notifier: Optional[NotificationService] = None,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Hand the new week's management privileges to last week's worst miss."""
    week, season = get_current_processing_week(now)
    logger.info(f"Starting bozo annotation for week {week}, {season}")

    with session_scope(session_factory) as db:
        result = process_tuesday_bozo_annotation(db, week, season, notifier=notifier)

    biggest = result.get("biggest_bozo")
    if biggest:
        logger.info(f"Biggest bozo for week {week}: {biggest['user_name']} ({biggest['odds']})")
    else:
        logger.info(f"No biggest bozo for week {week}")
    return result


async def refresh_week_props(
    session_factory: sessionmaker,
    odds_client: Any,
    cache: Any = None,
    ttl_seconds: Optional[int] = None,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """
    Refresh the current week's props.

    Skipped between seasons. The odds client enforces the monthly quota
    and falls back to stored props when the feed is unavailable.
    """
    current = get_current_nfl_week(now=now)
    if current is None:
        logger.info("NFL season not active, skipping props refresh")
        return {"status": "skipped", "props": 0}

    with session_scope(session_factory) as db:
        props = await fetch_week_props(
            db,
            odds_client,
            current.week,
            current.season,
            cache=cache,
            ttl_seconds=ttl_seconds,
        )

    logger.info(f"Props refresh complete: {len(props)} props for week {current.week}")
    return {"status": "success", "week": current.week, "season": current.season, "props": len(props)}


async def send_weekly_reminders(
    session_factory: sessionmaker,
    notifier: Optional[NotificationService] = None,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Tell everyone the current week is open for bets."""
    current = get_current_nfl_week(now=now)
    if current is None:
        logger.info("NFL season not active, skipping weekly reminders")
        return {"status": "skipped", "sent": 0}

    notifier = notifier or NotificationService()
    with session_scope(session_factory) as db:
        sent = notifier.send_weekly_reminders(db, current.week, current.season)
        payment_reminders = notifier.send_payment_reminders(db, current.week, current.season)

    return {
        "status": "success",
        "week": current.week,
        "sent": sent,
        "payment_reminders": payment_reminders,
    }
