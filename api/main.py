"""
FastAPI application for NFL Bozo Bets.

Main entry point for the REST API that exposes:
- Accounts, users and teams
- Weekly bets and payments
- Biggest Bozo management and leaderboards
- Props and odds
- Cron hooks, scheduler job control and live transport

Run with:
    uvicorn api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routers import (
    auth,
    bozo_stats,
    cron,
    health,
    jobs,
    management,
    odds,
    payments,
    teams,
    transport,
    users,
    weekly_bets,
)
from api.state import AppState
from bozo_bets.errors import BozoBetsError

logger = logging.getLogger(__name__)


def create_app(settings: Any = None) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Settings to run with; defaults to ``get_settings()``
    """
    if settings is None:
        from bozo_bets.config.settings import get_settings

        settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        Initializes components on startup and cleans up on shutdown.
        """
        logger.info("Starting NFL Bozo Bets API...")

        state = AppState(settings)
        await state.initialize()
        app.state.app_state = state

        logger.info("NFL Bozo Bets API started successfully")

        yield

        logger.info("Shutting down NFL Bozo Bets API...")
        await state.shutdown()
        logger.info("NFL Bozo Bets API shutdown complete")

    app = FastAPI(
        title="NFL Bozo Bets API",
        description="Weekly prop bet tracker for friend groups",
        version="0.1.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BozoBetsError)
    async def bozo_bets_error_handler(request: Request, exc: BozoBetsError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        content = {"detail": exc.message}
        if exc.details is not None:
            content["details"] = exc.details
        return JSONResponse(status_code=exc.status_code, content=content)

    app.include_router(health.router, prefix="/api", tags=["Health"])
    app.include_router(auth.router, prefix="/api", tags=["Auth"])
    app.include_router(users.router, prefix="/api", tags=["Users"])
    app.include_router(teams.router, prefix="/api", tags=["Teams"])
    app.include_router(weekly_bets.router, prefix="/api", tags=["Weekly Bets"])
    app.include_router(payments.router, prefix="/api", tags=["Payments"])
    app.include_router(management.router, prefix="/api", tags=["Management"])
    app.include_router(bozo_stats.router, prefix="/api", tags=["Bozo Stats"])
    app.include_router(odds.router, prefix="/api", tags=["Odds"])
    app.include_router(cron.router, prefix="/api", tags=["Cron"])
    app.include_router(jobs.router, prefix="/api", tags=["Jobs"])
    app.include_router(transport.router, prefix="/api", tags=["Transport"])

    @app.get("/")
    async def root():
        """Root endpoint points at the API documentation."""
        return {
            "name": "NFL Bozo Bets API",
            "version": "0.1.0",
            "docs": "/api/docs",
            "health": "/api/health",
        }

    return app


app = create_app()
