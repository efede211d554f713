"""
Weekly picks and their buy-in payments.

Each user gets one BOZO and one FAVORITE pick per week, submitted only
while that week's betting window is open and within their team's odds
range.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from bozo_bets.database.models import (
    BetType,
    Payment,
    PaymentStatus,
    User,
    WeeklyBet,
    utcnow,
)
from bozo_bets.errors import ConflictError, NotFoundError, ValidationError
from bozo_bets.schedule.nfl_weeks import can_submit_bet_for_week

log = logger.bind(component="bets")


@dataclass
class BetSubmission:
    user_id: int
    week: int
    season: int
    prop: str
    odds: Optional[int] = None
    fanduel_id: Optional[str] = None
    bet_type: BetType = BetType.BOZO


def _get_bet(db: Session, bet_id: int) -> WeeklyBet:
    bet = db.get(WeeklyBet, bet_id)
    if bet is None:
        raise NotFoundError("Bet not found")
    return bet


# =============================================================================
# Weekly bets
# =============================================================================


def list_bets(
    db: Session,
    week: Optional[int] = None,
    season: Optional[int] = None,
    user_id: Optional[int] = None,
) -> list[WeeklyBet]:
    query = select(WeeklyBet).options(
        selectinload(WeeklyBet.user), selectinload(WeeklyBet.payments)
    )
    if week is not None:
        query = query.where(WeeklyBet.week == week)
    if season is not None:
        query = query.where(WeeklyBet.season == season)
    if user_id is not None:
        query = query.where(WeeklyBet.user_id == user_id)
    return list(
        db.scalars(query.order_by(WeeklyBet.created_at.desc(), WeeklyBet.id.desc())).all()
    )


def submit_bet(
    db: Session,
    submission: BetSubmission,
    now: Optional[datetime] = None,
    enforce_week_window: bool = True,
) -> WeeklyBet:
    """
    Record a weekly pick.

    Checks run in order: betting window, one pick per type per week,
    user, then the team's odds range.

    Raises:
        ValidationError: Week not open (details carry the reason and the
            current week) or odds outside the team range
        NotFoundError: Unknown user
        ConflictError: The user already has this kind of pick this week
    """
    if enforce_week_window:
        check = can_submit_bet_for_week(submission.week, submission.season, now=now)
        if not check.can_submit:
            raise ValidationError(
                "Cannot submit bet for this week",
                details={
                    "reason": check.reason,
                    "current_week": check.current_week.to_dict() if check.current_week else None,
                },
            )

    existing = db.scalar(
        select(WeeklyBet.id).where(
            WeeklyBet.user_id == submission.user_id,
            WeeklyBet.week == submission.week,
            WeeklyBet.season == submission.season,
            WeeklyBet.bet_type == submission.bet_type,
        )
    )
    if existing is not None:
        raise ConflictError(
            f"User already has a {submission.bet_type.value.lower()} bet for this week"
        )

    user = db.get(User, submission.user_id)
    if user is None:
        raise NotFoundError("User not found")

    team = user.team
    if submission.odds is not None and team is not None:
        if not team.lowest_odds <= submission.odds <= team.highest_odds:
            raise ValidationError(
                f"Odds must be between {team.lowest_odds} and {team.highest_odds} for this team"
            )

    bet = WeeklyBet(
        user_id=user.id,
        team_id=user.team_id,
        week=submission.week,
        season=submission.season,
        prop=submission.prop.strip(),
        odds=submission.odds,
        fanduel_id=submission.fanduel_id,
        bet_type=submission.bet_type,
    )
    db.add(bet)
    db.commit()

    log.info(
        f"User {user.id} submitted {bet.bet_type.value} bet for week "
        f"{bet.week}, {bet.season}: {bet.prop}"
    )
    return bet


def update_bet(
    db: Session,
    bet_id: int,
    prop: Optional[str] = None,
    odds: Optional[int] = None,
    fanduel_id: Optional[str] = None,
) -> WeeklyBet:
    bet = _get_bet(db, bet_id)
    if prop is not None:
        bet.prop = prop.strip()
    if odds is not None:
        bet.odds = odds
    if fanduel_id is not None:
        bet.fanduel_id = fanduel_id
    db.commit()
    return bet


def delete_bet(db: Session, bet_id: int) -> None:
    """Delete a bet together with its payments."""
    bet = _get_bet(db, bet_id)
    db.delete(bet)
    db.commit()
    log.info(f"Deleted bet {bet_id}")


# =============================================================================
# Payments
# =============================================================================


def _get_payment(db: Session, payment_id: int) -> Payment:
    payment = db.get(Payment, payment_id)
    if payment is None:
        raise NotFoundError("Payment not found")
    return payment


def list_payments(
    db: Session,
    user_id: Optional[int] = None,
    weekly_bet_id: Optional[int] = None,
    status: Optional[PaymentStatus] = None,
) -> list[Payment]:
    query = select(Payment)
    if user_id is not None:
        query = query.where(Payment.user_id == user_id)
    if weekly_bet_id is not None:
        query = query.where(Payment.weekly_bet_id == weekly_bet_id)
    if status is not None:
        query = query.where(Payment.status == status)
    return list(
        db.scalars(query.order_by(Payment.created_at.desc(), Payment.id.desc())).all()
    )


def create_payment(
    db: Session,
    user_id: int,
    weekly_bet_id: int,
    amount: float,
    method: str,
    status: PaymentStatus = PaymentStatus.PENDING,
) -> Payment:
    if db.get(User, user_id) is None:
        raise NotFoundError("User not found")
    _get_bet(db, weekly_bet_id)

    payment = Payment(
        user_id=user_id,
        weekly_bet_id=weekly_bet_id,
        amount=amount,
        method=method,
        status=status,
        paid_at=utcnow() if status == PaymentStatus.PAID else None,
    )
    db.add(payment)
    db.commit()
    return payment


def mark_payment(
    db: Session,
    weekly_bet_id: int,
    paid: bool,
    method: Optional[str] = None,
    amount: Optional[float] = None,
    default_amount: float = 10.0,
    default_method: str = "Cash",
) -> Payment:
    """
    Flip a bet's payment between PAID and PENDING, creating it if needed.

    Raises:
        NotFoundError: Unknown bet
    """
    bet = _get_bet(db, weekly_bet_id)
    status = PaymentStatus.PAID if paid else PaymentStatus.PENDING

    payment = db.scalar(
        select(Payment)
        .where(Payment.weekly_bet_id == bet.id)
        .order_by(Payment.created_at, Payment.id)
    )
    if payment is None:
        payment = Payment(
            user_id=bet.user_id,
            weekly_bet_id=bet.id,
            amount=amount or default_amount,
            method=method or default_method,
        )
        db.add(payment)
    else:
        if method:
            payment.method = method
        if amount:
            payment.amount = amount

    payment.status = status
    payment.paid_at = utcnow() if paid else None
    db.commit()

    log.info(f"Payment for bet {bet.id} marked {status.value}")
    return payment


def update_payment(
    db: Session,
    payment_id: int,
    status: Optional[PaymentStatus] = None,
    method: Optional[str] = None,
) -> Payment:
    payment = _get_payment(db, payment_id)
    if status is not None:
        payment.status = status
        payment.paid_at = utcnow() if status == PaymentStatus.PAID else None
    if method is not None:
        payment.method = method
    db.commit()
    return payment


def delete_payment(db: Session, payment_id: int) -> None:
    payment = _get_payment(db, payment_id)
    db.delete(payment)
    db.commit()
