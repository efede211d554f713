"""Account endpoints: register, login, logout and password reset."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from api.dependencies import get_app_state, get_bearer_token, get_current_user, get_db
from api.state import AppState
from bozo_bets.database.models import User
from bozo_bets.database.schemas import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UserResponse,
)
from bozo_bets.notifications import password_reset_email, send_email, welcome_email
from bozo_bets.tracking import register_user

logger = logging.getLogger(__name__)

router = APIRouter()

FORGOT_PASSWORD_MESSAGE = "If an account exists with that email, a reset link has been sent"


@router.post("/auth/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Create an account and log it in."""
    user, token = register_user(
        db, state.auth, body.name, body.email, body.password, team_id=body.team_id
    )

    send_email(welcome_email(user.name, user.email, state.settings.email.app_url))

    return {
        "success": True,
        "message": "Account created successfully",
        "user": UserResponse.model_validate(user),
        "token": token,
    }


@router.post("/auth/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    user = state.auth.authenticate(db, body.email, body.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = state.auth.create_session(db, user)
    logger.info(f"User {user.id} logged in")
    return {
        "success": True,
        "message": "Login successful",
        "user": UserResponse.model_validate(user),
        "token": token,
    }


@router.post("/auth/logout")
async def logout(
    token: str = Depends(get_bearer_token),
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    state.auth.delete_session(db, token)
    return {"success": True, "message": "Logged out successfully"}


@router.get("/auth/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(user)


@router.post("/auth/forgot-password")
async def forgot_password(
    body: ForgotPasswordRequest,
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """
    Email a reset link.

    The response is identical whether or not the address is registered.
    """
    user = db.scalar(select(User).where(User.email == body.email.strip().lower()))
    if user is not None:
        reset = state.auth.create_password_reset(db, user)
        send_email(
            password_reset_email(
                user.name, user.email, reset.token, state.settings.email.app_url
            )
        )

    return {"success": True, "message": FORGOT_PASSWORD_MESSAGE}


@router.post("/auth/reset-password")
async def reset_password(
    body: ResetPasswordRequest,
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    state.auth.consume_password_reset(db, body.token, body.password)
    return {"success": True, "message": "Password has been reset successfully"}
