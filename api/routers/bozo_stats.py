"""Leaderboard and weekly bozo statistics endpoints."""

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from api.dependencies import get_app_state, get_db
from api.state import AppState
from bozo_bets.database.schemas import WeekScope
from bozo_bets.tracking import (
    get_biggest_bozos_by_week,
    get_bozo_leaderboard,
    get_weekly_bozo_stats,
    update_bozo_stats,
)

router = APIRouter()


@router.get("/bozo-stats")
async def get_bozo_stats(
    type: str = Query(default="leaderboard"),
    week: Optional[int] = None,
    season: Optional[int] = None,
    limit: int = 10,
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """
    Bozo statistics.

    Types:
        leaderboard: All-time totals, most bozos first
        weekly: One week's Biggest Bozo and totals (needs ``week``)
        biggest-bozos: Every week's Biggest Bozo in a season
    """
    season = season or state.settings.betting.default_season

    if type == "leaderboard":
        return {"leaderboard": get_bozo_leaderboard(db, limit=limit)}

    if type == "weekly":
        if week is None:
            raise HTTPException(status_code=400, detail="Week is required for weekly stats")
        return get_weekly_bozo_stats(db, week, season)

    if type == "biggest-bozos":
        return {"season": season, "biggest_bozos": get_biggest_bozos_by_week(db, season)}

    raise HTTPException(status_code=400, detail="Invalid type parameter")


@router.post("/bozo-stats")
async def recompute_bozo_stats(body: WeekScope, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Recount the week's bozos and hits and re-crown its Biggest Bozo."""
    summary = update_bozo_stats(db, body.week, body.season)
    return {"success": True, **summary.to_dict()}
