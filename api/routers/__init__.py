"""API routers for NFL Bozo Bets."""

from . import (
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

__all__ = [
    "auth",
    "bozo_stats",
    "cron",
    "health",
    "jobs",
    "management",
    "odds",
    "payments",
    "teams",
    "transport",
    "users",
    "weekly_bets",
]
