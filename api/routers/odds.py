"""Odds feed and sportsbook prop endpoints."""

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.dependencies import get_app_state, get_clock, get_db
from api.state import AppState
from bozo_bets.data.sources.base import DataSourceError
from bozo_bets.database.schemas import OddsFetchRequest, PropResultsRequest, PropSearchRequest
from bozo_bets.errors import QuotaExceededError
from bozo_bets.processing import BetResolution, update_prop_results
from bozo_bets.props.fanduel import (
    fetch_week_props,
    find_matching_prop,
    get_available_props,
    get_live_odds,
    invalidate_week_props,
    prop_to_dict,
    search_props,
    upsert_props,
)
from bozo_bets.schedule.nfl_weeks import get_current_nfl_week

logger = logging.getLogger(__name__)

router = APIRouter()


def _resolve_week(
    week: Optional[int], season: Optional[int], now: datetime
) -> tuple[int, int]:
    """Fill in missing week/season from the current NFL week."""
    if week is not None and season is not None:
        return week, season

    current = get_current_nfl_week(season=season, now=now)
    if current is None:
        raise HTTPException(status_code=400, detail="No active NFL week; pass week and season")
    return week or current.week, season or current.season


def _require_odds_client(state: AppState):
    if state.odds_client is None or not state.odds_client.enabled:
        raise HTTPException(status_code=503, detail="Odds API not configured")
    return state.odds_client


@router.post("/odds-api/fetch")
async def fetch_odds(
    body: OddsFetchRequest,
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """
    Pull the week's lines from the odds feed and store them as props.

    Each call spends one request of the monthly quota.
    """
    client = _require_odds_client(state)

    check = client.can_make_request(db)
    if not check.allowed:
        raise QuotaExceededError(
            check.reason or "Monthly API limit reached",
            details=client.get_usage_stats(db),
        )

    try:
        records = await client.fetch_nfl_odds(db, body.week, body.season)
    except DataSourceError as e:
        logger.error(f"Odds fetch failed for week {body.week}: {e}")
        raise HTTPException(status_code=502, detail=f"Odds API request failed: {e}")

    props = upsert_props(db, records)
    await invalidate_week_props(state.cache, body.week, body.season)
    logger.info(f"Stored {len(props)} props for week {body.week}, {body.season}")

    return {
        "success": True,
        "week": body.week,
        "season": body.season,
        "props_count": len(props),
        "usage": client.get_usage_stats(db),
    }


@router.get("/odds-api/usage")
async def odds_usage(
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Monthly request usage plus the provider's last reported credits."""
    if state.odds_client is None:
        raise HTTPException(status_code=503, detail="Odds API not configured")

    return {
        "enabled": state.odds_client.enabled,
        "usage": state.odds_client.get_usage_stats(db),
        "credits": state.odds_client.get_credit_status(),
    }


@router.get("/fanduel-props")
async def get_fanduel_props(
    week: Optional[int] = None,
    season: Optional[int] = None,
    refresh: bool = False,
    state: AppState = Depends(get_app_state),
    now: datetime = Depends(get_clock),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """
    The week's props.

    With ``refresh`` the odds feed is consulted (through the cache and the
    monthly quota); otherwise only stored props are returned.
    """
    week, season = _resolve_week(week, season, now)

    if refresh and state.odds_client is not None and state.odds_client.enabled:
        props = await fetch_week_props(
            db,
            state.odds_client,
            week,
            season,
            cache=state.cache,
            ttl_seconds=state.settings.odds_api.cache_ttl_seconds,
        )
    else:
        props = [prop_to_dict(prop) for prop in get_available_props(db, week, season)]

    return {"week": week, "season": season, "count": len(props), "props": props}


@router.post("/fanduel-props")
async def apply_prop_results(
    body: PropResultsRequest,
    db: Session = Depends(get_db),
    state: AppState = Depends(get_app_state),
) -> dict[str, Any]:
    """Settle props and every bet linked to them."""
    results = {
        item.fanduel_id: BetResolution(status=item.status, result=item.result)
        for item in body.results
    }
    summary = update_prop_results(db, body.week, body.season, results)
    await invalidate_week_props(state.cache, body.week, body.season)
    return {"success": True, "updated": len(results), "stats": summary.to_dict()}


@router.post("/prop-search")
async def prop_search(
    body: PropSearchRequest,
    week: Optional[int] = None,
    season: Optional[int] = None,
    now: datetime = Depends(get_clock),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Best match for free prop text, plus plain substring hits."""
    text = body.text
    if not text:
        raise HTTPException(status_code=400, detail="Prop text is required")

    week, season = _resolve_week(week, season, now)
    match = find_matching_prop(db, text, week, season)

    return {
        "week": week,
        "season": season,
        "match": match.to_dict(),
        "results": [prop_to_dict(prop) for prop in search_props(db, text, week, season)],
    }


@router.get("/live-odds")
async def live_odds(fanduel_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    odds = get_live_odds(db, fanduel_id)
    if odds is None:
        raise HTTPException(status_code=404, detail="Prop not found")
    return {"fanduel_id": fanduel_id, **odds}
