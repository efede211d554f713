"""Weekly pick endpoints."""

from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.dependencies import get_app_state, get_clock, get_db
from api.state import AppState
from bozo_bets.database.schemas import WeeklyBetCreate, WeeklyBetResponse, WeeklyBetUpdate
from bozo_bets.schedule.nfl_weeks import get_available_weeks, get_current_nfl_week
from bozo_bets.tracking import BetSubmission, delete_bet, list_bets, submit_bet, update_bet

router = APIRouter()


@router.get("/weekly-bets", response_model=list[WeeklyBetResponse])
async def get_weekly_bets(
    week: Optional[int] = None,
    season: Optional[int] = None,
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
) -> list[WeeklyBetResponse]:
    """Bets with their bettor and payments, newest first."""
    bets = list_bets(db, week=week, season=season, user_id=user_id)
    return [WeeklyBetResponse.model_validate(bet) for bet in bets]


@router.get("/weekly-bets/weeks")
async def get_betting_weeks(
    season: Optional[int] = None,
    now: datetime = Depends(get_clock),
) -> dict[str, Any]:
    """The current NFL week and every week of the season."""
    current = get_current_nfl_week(season=season, now=now)
    season = season or (current.season if current else now.year)
    return {
        "current_week": current.to_dict() if current else None,
        "weeks": [week.to_dict() for week in get_available_weeks(season, now=now)],
    }


@router.post("/weekly-bets", response_model=WeeklyBetResponse, status_code=201)
async def create_weekly_bet(
    body: WeeklyBetCreate,
    state: AppState = Depends(get_app_state),
    now: datetime = Depends(get_clock),
    db: Session = Depends(get_db),
) -> WeeklyBetResponse:
    bet = submit_bet(
        db,
        BetSubmission(
            user_id=body.user_id,
            week=body.week,
            season=body.season,
            prop=body.prop,
            odds=body.odds,
            fanduel_id=body.fanduel_id,
            bet_type=body.bet_type,
        ),
        now=now,
        enforce_week_window=state.settings.betting.enforce_week_window,
    )
    return WeeklyBetResponse.model_validate(bet)


@router.put("/weekly-bets/{bet_id}", response_model=WeeklyBetResponse)
async def edit_weekly_bet(
    bet_id: int, body: WeeklyBetUpdate, db: Session = Depends(get_db)
) -> WeeklyBetResponse:
    bet = update_bet(db, bet_id, prop=body.prop, odds=body.odds, fanduel_id=body.fanduel_id)
    return WeeklyBetResponse.model_validate(bet)


@router.delete("/weekly-bets/{bet_id}")
async def remove_weekly_bet(bet_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    delete_bet(db, bet_id)
    return {"success": True, "message": "Bet deleted successfully"}
