"""
Hooks for an external cron.

Both endpoints require ``Authorization: Bearer {cron_secret}``. They let a
hosted cron drive the same work the in-process scheduler does.
"""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.dependencies import get_app_state, get_clock, get_db, require_cron_secret
from api.state import AppState
from bozo_bets.database.schemas import NotificationCron
from bozo_bets.processing import get_current_processing_week, run_automated_processing

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_cron_secret)])


@router.post("/cron/automated-processing")
async def cron_automated_processing(
    state: AppState = Depends(get_app_state),
    now: datetime = Depends(get_clock),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    outcome = run_automated_processing(db, now=now, notifier=state.notifier)
    logger.info(f"Cron automated processing: {outcome['type']}")
    return {"success": True, "timestamp": now.isoformat(), **outcome}


@router.post("/cron/notifications")
async def cron_notifications(
    body: NotificationCron,
    state: AppState = Depends(get_app_state),
    now: datetime = Depends(get_clock),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """
    Send one batch of notifications.

    Types: payment_reminders, prop_results, automated_processing.
    """
    week, season = body.week, body.season
    if week is None or season is None:
        current_week, current_season = get_current_processing_week(now)
        week = week or current_week
        season = season or current_season

    if body.type == "payment_reminders":
        sent = state.notifier.send_payment_reminders(db, week, season)
        return {"success": True, "type": body.type, "week": week, "season": season, "sent": sent}

    if body.type == "prop_results":
        sent = state.notifier.send_prop_result_notifications(db, week, season)
        return {"success": True, "type": body.type, "week": week, "season": season, "sent": sent}

    if body.type == "automated_processing":
        outcome = run_automated_processing(db, now=now, notifier=state.notifier)
        return {"success": True, **outcome}

    raise HTTPException(status_code=400, detail="Invalid notification type")
