"""
Shared FastAPI dependencies.

Routers pull the database session, clock and the current user from here,
so tests can swap any of them with ``app.dependency_overrides``.
"""

from datetime import datetime
from typing import Iterator, Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from api.state import AppState
from bozo_bets.database.models import User


def get_app_state(request: Request) -> AppState:
    state = getattr(request.app.state, "app_state", None)
    if state is None or state.session_factory is None:
        raise HTTPException(status_code=503, detail="Application not initialized")
    return state


def get_db(state: AppState = Depends(get_app_state)) -> Iterator[Session]:
    """Request-scoped database session."""
    db = state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_clock() -> datetime:
    """Local wall-clock time used for week-window rules."""
    return datetime.now()


def get_bearer_token(authorization: Optional[str] = Header(default=None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="No token provided")
    return authorization[len("Bearer "):].strip()


def get_current_user(
    token: str = Depends(get_bearer_token),
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> User:
    user = state.auth.validate_session(db, token)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def require_cron_secret(
    authorization: Optional[str] = Header(default=None),
    state: AppState = Depends(get_app_state),
) -> None:
    """Cron callers authenticate with ``Bearer {cron_secret}``."""
    secret = state.settings.auth.cron_secret
    if not secret or authorization != f"Bearer {secret}":
        raise HTTPException(status_code=401, detail="Unauthorized")
