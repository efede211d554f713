"""
Management endpoints.

The week's Biggest Bozo (or an admin) settles bets and corrects stats for
their team. Automated processing can also be run by hand from here, and
admins keep the NFL game schedule that times settlement.
"""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.dependencies import get_app_state, get_clock, get_db, require_admin
from api.state import AppState
from bozo_bets.database.schemas import (
    AutomatedProcessingRequest,
    BulkUpdateStats,
    ManagementRequest,
    NFLScheduleRequest,
    RotatePrivileges,
    UpdateStats,
    WeeklyBetResponse,
)
from bozo_bets.processing import (
    get_current_processing_week,
    process_daily_bet_results,
    process_tuesday_bozo_annotation,
    run_automated_processing,
    should_process_daily_bet_results,
    should_process_tuesday_bozo_annotation,
)
from bozo_bets.schedule.games import (
    game_to_dict,
    get_week_processing_status,
    get_week_schedule,
    load_bundled_schedule,
    mark_game_completed,
    update_schedule,
)
from bozo_bets.tracking import (
    admin_access,
    assign_biggest_bozo,
    bulk_update_stats,
    get_management_view,
    get_rotation_status,
    get_stats_history,
    mark_bet_status,
    rotate_privileges,
    update_user_stats,
)
from bozo_bets.transport import send_bet_status_update

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_fields(body: ManagementRequest, *names: str) -> None:
    missing = [name for name in names if getattr(body, name) is None]
    if missing:
        raise HTTPException(
            status_code=400,
            detail=f"Missing required fields: {', '.join(missing)}",
        )


@router.post("/management")
async def manage(
    body: ManagementRequest,
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Dispatch a management action: mark_bet_status, admin_access or assign_biggest_bozo."""
    if body.action == "mark_bet_status":
        _require_fields(body, "bet_id", "status", "manager_id", "week", "season")
        bet = mark_bet_status(
            db,
            body.bet_id,
            body.status,
            body.manager_id,
            body.week,
            body.season,
            reason=body.reason,
        )
        if state.transport is not None:
            await send_bet_status_update(
                bet.id, bet.user_id, bet.status.value, manager=state.transport
            )
        return {
            "success": True,
            "bet": WeeklyBetResponse.model_validate(bet),
            "message": f"Bet marked as {bet.status.value}",
        }

    if body.action == "admin_access":
        _require_fields(body, "passcode", "sub_action")
        result = admin_access(
            db,
            body.passcode,
            state.settings.auth.admin_passcode,
            body.sub_action,
            user_id=body.user_id,
            total_bozos=body.total_bozos,
            total_hits=body.total_hits,
        )
        return {"success": True, **result}

    if body.action == "assign_biggest_bozo":
        _require_fields(body, "user_id", "week", "season", "team_id")
        user = assign_biggest_bozo(db, body.user_id, body.week, body.season, body.team_id)
        return {
            "success": True,
            "user": {
                "id": user.id,
                "name": user.name,
                "is_biggest_bozo": user.is_biggest_bozo,
                "management_week": user.management_week,
                "management_season": user.management_season,
            },
            "message": f"{user.name} is now the Biggest Bozo for week {body.week}",
        }

    raise HTTPException(status_code=400, detail="Invalid action")


@router.get("/management")
async def management_view(
    user_id: int, week: int, season: int, db: Session = Depends(get_db)
) -> dict[str, Any]:
    return get_management_view(db, user_id, week, season)


@router.post("/management/update-stats")
async def update_stats(body: UpdateStats, db: Session = Depends(get_db)) -> dict[str, Any]:
    result = update_user_stats(
        db,
        body.user_id,
        body.bozo_change,
        body.hit_change,
        body.manager_id,
        body.week,
        body.season,
        reason=body.reason,
    )
    return {"success": True, **result}


@router.post("/management/bulk-update-stats")
async def bulk_update(body: BulkUpdateStats, db: Session = Depends(get_db)) -> dict[str, Any]:
    result = bulk_update_stats(
        db,
        [update.model_dump() for update in body.updates],
        body.manager_id,
        body.week,
        body.season,
    )
    return {"success": True, **result}


@router.get("/management/stats-history")
async def stats_history(
    week: int, season: int, limit: int = 50, db: Session = Depends(get_db)
) -> dict[str, Any]:
    return {"history": get_stats_history(db, week, season, limit=limit)}


@router.post("/management/rotate-privileges")
async def rotate(body: RotatePrivileges, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Hand the week's privileges to the team's previous-week Biggest Bozo."""
    user = rotate_privileges(db, body.week, body.season, body.team_id)
    return {
        "success": True,
        "new_biggest_bozo": {
            "id": user.id,
            "name": user.name,
            "management_week": user.management_week,
            "management_season": user.management_season,
        },
        "message": f"Management privileges rotated to {user.name}",
    }


@router.get("/management/rotate-privileges")
async def rotation_status(
    week: int, season: int, team_id: int, db: Session = Depends(get_db)
) -> dict[str, Any]:
    return get_rotation_status(db, week, season, team_id)


@router.post("/management/automated-processing", dependencies=[Depends(require_admin)])
async def trigger_processing(
    body: AutomatedProcessingRequest,
    state: AppState = Depends(get_app_state),
    now: datetime = Depends(get_clock),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Run settlement now instead of waiting for the scheduler."""
    if body.action == "run_automated":
        return {"success": True, **run_automated_processing(db, now=now, notifier=state.notifier)}

    week, season = body.week, body.season
    if week is None or season is None:
        current_week, current_season = get_current_processing_week(now)
        week = week or current_week
        season = season or current_season

    if body.action == "process_daily":
        result = process_daily_bet_results(db, week, season)
        logger.info(f"Manual daily processing for week {week}, {season}")
        return {"success": True, "type": "daily", "result": result.to_dict()}

    result = process_tuesday_bozo_annotation(db, week, season, notifier=state.notifier)
    logger.info(f"Manual Tuesday annotation for week {week}, {season}")
    return {"success": True, "type": "tuesday", "result": result}


@router.get("/management/automated-processing", dependencies=[Depends(require_admin)])
async def processing_status(now: datetime = Depends(get_clock)) -> dict[str, Any]:
    week, season = get_current_processing_week(now)
    return {
        "current_time": now.isoformat(),
        "current_week": week,
        "current_season": season,
        "should_process_daily": should_process_daily_bet_results(now),
        "should_process_tuesday": should_process_tuesday_bozo_annotation(now),
    }


def _schedule_week(body: NFLScheduleRequest, now: datetime) -> tuple[int, int]:
    if body.week is not None and body.season is not None:
        return body.week, body.season
    week, season = get_current_processing_week(now)
    return body.week or week, body.season or season


@router.post("/management/nfl-schedule", dependencies=[Depends(require_admin)])
async def nfl_schedule(
    body: NFLScheduleRequest,
    now: datetime = Depends(get_clock),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """
    Dispatch a schedule action.

    Actions: update_schedule, load_bundled_schedule, get_schedule,
    get_processing_status and mark_game_completed.
    """
    if body.action == "update_schedule":
        if not body.games:
            raise HTTPException(status_code=400, detail="Invalid schedule data")
        added = update_schedule(db, (game.model_dump() for game in body.games))
        return {
            "success": True,
            "message": f"Updated NFL schedule with {added} games",
            "games_added": added,
        }

    if body.action == "load_bundled_schedule":
        added = load_bundled_schedule(db)
        return {
            "success": True,
            "message": f"Loaded bundled NFL schedule with {added} games",
            "games_added": added,
        }

    if body.action == "get_schedule":
        if body.week is None or body.season is None:
            raise HTTPException(status_code=400, detail="Week and season required")
        schedule = get_week_schedule(db, body.week, body.season)
        return {"success": True, "schedule": schedule.to_dict() if schedule else None}

    if body.action == "get_processing_status":
        week, season = _schedule_week(body, now)
        return {"success": True, "status": get_week_processing_status(db, week, season, now=now)}

    if body.action == "mark_game_completed":
        if not body.game_id:
            raise HTTPException(status_code=400, detail="Missing required fields: game_id")
        game = mark_game_completed(db, body.game_id)
        return {"success": True, "game": game_to_dict(game)}

    raise HTTPException(status_code=400, detail="Invalid action")


@router.get("/management/nfl-schedule", dependencies=[Depends(require_admin)])
async def nfl_schedule_status(
    now: datetime = Depends(get_clock), db: Session = Depends(get_db)
) -> dict[str, Any]:
    """Settlement status of the week currently being processed."""
    week, season = get_current_processing_week(now)
    return {
        "success": True,
        "status": get_week_processing_status(db, week, season, now=now),
        "timestamp": now.isoformat(),
    }
