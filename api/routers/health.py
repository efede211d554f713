"""Health check endpoints."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> dict[str, Any]:
    """
    Health check endpoint.

    Returns status of all system components.
    """
    app_state = request.app.state.app_state

    components = app_state.get_health_status()

    database_ok = False
    if app_state.session_factory is not None:
        db = app_state.session_factory()
        try:
            db.execute(text("SELECT 1"))
            database_ok = True
        except SQLAlchemyError:
            database_ok = False
        finally:
            db.close()
    components["database_reachable"] = database_ok

    cache_ok = True
    if app_state.cache is not None:
        cache_health = await app_state.cache.health_check()
        components["cache_health"] = cache_health
        cache_ok = cache_health["status"] != "unhealthy"

    is_healthy = components.get("initialized", False) and database_ok and cache_ok

    return {
        "status": "healthy" if is_healthy else "degraded",
        "timestamp": datetime.now().isoformat(),
        "components": components,
    }


@router.get("/health/ready")
async def readiness_check(request: Request) -> dict[str, Any]:
    """Readiness check: 200 with ``ready`` once startup finished."""
    app_state = request.app.state.app_state

    return {
        "ready": app_state.is_initialized,
        "timestamp": datetime.now().isoformat(),
    }


@router.get("/health/live")
async def liveness_check() -> dict[str, Any]:
    return {
        "alive": True,
        "timestamp": datetime.now().isoformat(),
    }
