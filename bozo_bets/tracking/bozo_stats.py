"""
Bozo statistics.

Keeps per-week BozoStat rows and users' running hit/bozo totals in step
with settled bets, and crowns each week's Biggest Bozo.
"""
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Optional

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, selectinload

from bozo_bets.database.models import BetStatus, BetType, BozoStat, User, WeeklyBet

log = logger.bind(component="bozo_stats")


@dataclass
class BozoStatsSummary:
    """Outcome of recomputing one week's stats."""

    week: int
    season: int
    bozos: int
    hits: int
    biggest_bozo_bet_id: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "week": self.week,
            "season": self.season,
            "bozos": self.bozos,
            "hits": self.hits,
            "biggest_bozo_bet_id": self.biggest_bozo_bet_id,
        }


def _compare_bozo_odds(a: WeeklyBet, b: WeeklyBet) -> int:
    """Worst miss first: most negative favorites, then longest underdogs."""
    if a.odds < 0 and b.odds < 0:
        return a.odds - b.odds
    if a.odds > 0 and b.odds > 0:
        return b.odds - a.odds
    return a.odds - b.odds


def _team_fields(user: User) -> dict[str, Optional[str]]:
    return {
        "team_name": user.team.name if user.team else None,
        "team_color": user.team.color if user.team else None,
    }


def _upsert_stat(db: Session, user_id: int, week: int, season: int) -> BozoStat:
    stat = db.scalar(
        select(BozoStat).where(
            BozoStat.user_id == user_id,
            BozoStat.week == week,
            BozoStat.season == season,
        )
    )
    if stat is None:
        stat = BozoStat(user_id=user_id, week=week, season=season)
        db.add(stat)
    return stat


_TOTAL_FIELDS = {BetStatus.HIT: "total_hits", BetStatus.BOZO: "total_bozos"}


def credit_bet_outcome(bet: WeeklyBet) -> bool:
    """
    Bring the owner's totals in line with the bet's current status.

    ``counted_status`` remembers what was already credited, so a bet adds
    to ``total_hits``/``total_bozos`` once however often its week is
    recomputed. Re-marking a bet moves its count to the new outcome.
    Returns True when the totals changed.
    """
    previous = _TOTAL_FIELDS.get(bet.counted_status)
    current = _TOTAL_FIELDS.get(bet.status)
    if previous == current:
        return False

    user = bet.user
    if previous:
        setattr(user, previous, max(0, getattr(user, previous) - 1))
    if current:
        setattr(user, current, getattr(user, current) + 1)
    bet.counted_status = bet.status if current else None
    return True


def update_bozo_stats(db: Session, week: int, season: int) -> BozoStatsSummary:
    """
    Record the week's settled bets.

    Every missed bet gets a BozoStat (the worst one flagged as the
    Biggest Bozo). Owners' totals are credited through
    ``credit_bet_outcome``, so running this again for the same week
    leaves them unchanged.
    """
    week_bets = db.scalars(
        select(WeeklyBet)
        .where(WeeklyBet.week == week, WeeklyBet.season == season)
        .order_by(WeeklyBet.id)
    ).all()
    bozo_bets = [bet for bet in week_bets if bet.status == BetStatus.BOZO]
    hit_bets = [bet for bet in week_bets if bet.status == BetStatus.HIT]

    with_odds = sorted(
        (bet for bet in bozo_bets if bet.odds is not None),
        key=cmp_to_key(_compare_bozo_odds),
    )
    biggest = with_odds[0] if with_odds else None

    for bet in bozo_bets:
        stat = _upsert_stat(db, bet.user_id, week, season)
        stat.is_biggest_bozo = biggest is not None and biggest.id == bet.id
        stat.odds = bet.odds
        stat.prop = bet.prop

    # Also takes back credit from bets re-marked PUSH or CANCELLED
    for bet in week_bets:
        credit_bet_outcome(bet)

    db.commit()

    log.info(
        f"Updated bozo stats for week {week}, {season}: "
        f"{len(bozo_bets)} bozos, {len(hit_bets)} hits"
    )
    if biggest is not None:
        log.info(
            f"Biggest bozo: {biggest.user.name} with {biggest.odds} odds on \"{biggest.prop}\""
        )

    return BozoStatsSummary(
        week=week,
        season=season,
        bozos=len(bozo_bets),
        hits=len(hit_bets),
        biggest_bozo_bet_id=biggest.id if biggest else None,
    )


def calculate_biggest_bozo(db: Session, week: int, season: int) -> Optional[User]:
    """
    Hand ``week``'s management privileges to the previous week's worst miss.

    The previous week's missed BOZO picks are compared by odds; the
    longest odds win (first bet on ties). Returns None for week 1 or when
    nobody missed.
    """
    previous_week = week - 1
    if previous_week < 1:
        return None

    bets = db.scalars(
        select(WeeklyBet)
        .where(
            WeeklyBet.week == previous_week,
            WeeklyBet.season == season,
            WeeklyBet.bet_type == BetType.BOZO,
            WeeklyBet.status == BetStatus.BOZO,
        )
        .order_by(WeeklyBet.id)
    ).all()
    if not bets:
        return None

    worst = bets[0]
    for bet in bets[1:]:
        if (bet.odds or 0) > (worst.odds or 0):
            worst = bet

    user = worst.user
    db.execute(
        update(User)
        .where(User.id != user.id, User.is_biggest_bozo.is_(True))
        .values(is_biggest_bozo=False, management_week=None, management_season=None)
        .execution_options(synchronize_session="fetch")
    )
    user.is_biggest_bozo = True
    user.management_week = week
    user.management_season = season

    stat = _upsert_stat(db, user.id, week, season)
    stat.is_biggest_bozo = True
    if stat.prop is None:
        stat.prop = worst.prop
        stat.odds = worst.odds

    db.commit()
    log.info(f"{user.name} is the Biggest Bozo for week {week}, {season}")
    return user


def get_bozo_leaderboard(db: Session, limit: int = 10) -> list[dict[str, Any]]:
    users = db.scalars(
        select(User)
        .options(selectinload(User.team))
        .order_by(User.total_bozos.desc(), User.id)
        .limit(limit)
    ).all()

    return [
        {
            "user_id": user.id,
            "user_name": user.name,
            "total_bozos": user.total_bozos,
            "total_hits": user.total_hits,
            "bozo_rate": user.bozo_rate,
            **_team_fields(user),
        }
        for user in users
    ]


def get_weekly_bozo_stats(db: Session, week: int, season: int) -> dict[str, Any]:
    biggest = db.scalar(
        select(BozoStat)
        .where(
            BozoStat.week == week,
            BozoStat.season == season,
            BozoStat.is_biggest_bozo.is_(True),
        )
        .order_by(BozoStat.created_at.desc())
    )
    total_bozos = db.scalar(
        select(func.count(BozoStat.id)).where(
            BozoStat.week == week, BozoStat.season == season
        )
    )
    total_hits = db.scalar(
        select(func.count(WeeklyBet.id)).where(
            WeeklyBet.week == week,
            WeeklyBet.season == season,
            WeeklyBet.status == BetStatus.HIT,
        )
    )

    return {
        "week": week,
        "season": season,
        "biggest_bozo": (
            {
                "user_id": biggest.user_id,
                "user_name": biggest.user.name,
                "prop": biggest.prop,
                "odds": biggest.odds or 0,
                **_team_fields(biggest.user),
            }
            if biggest
            else None
        ),
        "total_bozos": total_bozos or 0,
        "total_hits": total_hits or 0,
    }


def get_biggest_bozos_by_week(db: Session, season: int) -> list[dict[str, Any]]:
    stats = db.scalars(
        select(BozoStat)
        .where(BozoStat.season == season, BozoStat.is_biggest_bozo.is_(True))
        .order_by(BozoStat.week, BozoStat.id)
    ).all()

    return [
        {
            "week": stat.week,
            "biggest_bozo": {
                "user_id": stat.user_id,
                "user_name": stat.user.name,
                "prop": stat.prop,
                "odds": stat.odds or 0,
                **_team_fields(stat.user),
            },
        }
        for stat in stats
    ]
