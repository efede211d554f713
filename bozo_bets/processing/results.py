"""
Settling bets from prop outcomes.

A resolver decides the outcome of a single pending bet. The default one
reads the bet's linked sportsbook prop; results for those props are
entered through ``update_prop_results``.
"""
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from bozo_bets.database.models import BetStatus, FanduelProp, WeeklyBet
from bozo_bets.tracking.bozo_stats import BozoStatsSummary, update_bozo_stats

log = logger.bind(component="results")


@dataclass(frozen=True)
class BetResolution:
    """Settled outcome for a bet or prop."""

    status: BetStatus
    result: Optional[str] = None  # over/under/push


class ResultResolver(Protocol):
    def resolve(self, db: Session, bet: WeeklyBet) -> Optional[BetResolution]:
        """Return the bet's outcome, or None while it is still undecided."""
        ...


class FanduelPropResolver:
    """Settles a bet once its linked prop is no longer pending."""

    def resolve(self, db: Session, bet: WeeklyBet) -> Optional[BetResolution]:
        if not bet.fanduel_id:
            return None

        prop = db.scalar(
            select(FanduelProp).where(FanduelProp.fanduel_id == bet.fanduel_id)
        )
        if prop is None or prop.status == BetStatus.PENDING:
            return None
        return BetResolution(status=prop.status, result=prop.result)


def update_prop_results(
    db: Session,
    week: int,
    season: int,
    results: Mapping[str, BetResolution],
) -> BozoStatsSummary:
    """
    Apply final prop outcomes and settle the bets linked to them.

    Args:
        db: Database session
        week: NFL week
        season: NFL season
        results: Outcome per ``fanduel_id``; unknown ids are ignored

    Returns:
        Summary of the recomputed bozo stats for the week
    """
    props = db.scalars(
        select(FanduelProp).where(
            FanduelProp.week == week,
            FanduelProp.season == season,
            FanduelProp.status == BetStatus.PENDING,
            FanduelProp.fanduel_id.in_(list(results)),
        )
    ).all()

    settled_bets = 0
    for prop in props:
        outcome = results[prop.fanduel_id]
        prop.status = outcome.status
        prop.result = outcome.result

        bets = db.scalars(
            select(WeeklyBet).where(
                WeeklyBet.fanduel_id == prop.fanduel_id,
                WeeklyBet.week == week,
                WeeklyBet.season == season,
            )
        ).all()
        for bet in bets:
            bet.status = outcome.status
            bet.result = outcome.result
        settled_bets += len(bets)

    db.commit()
    log.info(
        f"Applied {len(props)} prop results for week {week}, {season} "
        f"({settled_bets} bets settled)"
    )
    return update_bozo_stats(db, week, season)
