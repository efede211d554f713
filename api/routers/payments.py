"""Buy-in payment endpoints."""

from typing import Any, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.dependencies import get_app_state, get_db
from api.state import AppState
from bozo_bets.database.models import PaymentStatus
from bozo_bets.database.schemas import PaymentCreate, PaymentMark, PaymentResponse, PaymentUpdate
from bozo_bets.tracking import (
    create_payment,
    delete_payment,
    list_payments,
    mark_payment,
    update_payment,
)
from bozo_bets.transport import send_payment_update

router = APIRouter()


@router.get("/payments", response_model=list[PaymentResponse])
async def get_payments(
    user_id: Optional[int] = None,
    weekly_bet_id: Optional[int] = None,
    status: Optional[PaymentStatus] = None,
    db: Session = Depends(get_db),
) -> list[PaymentResponse]:
    payments = list_payments(db, user_id=user_id, weekly_bet_id=weekly_bet_id, status=status)
    return [PaymentResponse.model_validate(payment) for payment in payments]


@router.post("/payments", response_model=PaymentResponse, status_code=201)
async def add_payment(body: PaymentCreate, db: Session = Depends(get_db)) -> PaymentResponse:
    payment = create_payment(
        db,
        body.user_id,
        body.weekly_bet_id,
        amount=body.amount,
        method=body.method,
        status=body.status,
    )
    return PaymentResponse.model_validate(payment)


@router.post("/payments/mark", response_model=PaymentResponse)
async def mark_bet_payment(
    body: PaymentMark,
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> PaymentResponse:
    """Mark a bet's buy-in PAID or UNPAID, creating the payment if needed."""
    paid = body.status == "PAID"
    payment = mark_payment(
        db,
        body.weekly_bet_id,
        paid=paid,
        method=body.method,
        amount=body.amount,
        default_amount=state.settings.betting.default_payment_amount,
        default_method=state.settings.betting.default_payment_method,
    )

    if state.transport is not None:
        await send_payment_update(
            payment.weekly_bet_id, payment.user_id, paid, manager=state.transport
        )

    return PaymentResponse.model_validate(payment)


@router.patch("/payments/{payment_id}", response_model=PaymentResponse)
async def edit_payment(
    payment_id: int, body: PaymentUpdate, db: Session = Depends(get_db)
) -> PaymentResponse:
    payment = update_payment(db, payment_id, status=body.status, method=body.method)
    return PaymentResponse.model_validate(payment)


@router.delete("/payments/{payment_id}")
async def remove_payment(payment_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    delete_payment(db, payment_id)
    return {"success": True, "message": "Payment deleted successfully"}
