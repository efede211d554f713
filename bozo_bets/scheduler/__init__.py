"""
Job scheduling module.

Provides APScheduler-based background jobs for:
- Daily bet settlement
- Tuesday Biggest Bozo annotation
- Daily props refresh
- Wednesday reminders

Example:
    >>> from bozo_bets.scheduler import SchedulerOrchestrator
    >>>
    >>> scheduler = SchedulerOrchestrator(settings, session_factory, odds_client)
    >>> scheduler.start()
    >>>
    >>> # Manual trigger
    >>> scheduler.trigger_job("daily_results")
    >>>
    >>> scheduler.stop()
"""

from .jobs import (
    refresh_week_props,
    run_bozo_annotation,
    run_daily_results,
    send_weekly_reminders,
)
from .orchestrator import SchedulerOrchestrator

__all__ = [
    "SchedulerOrchestrator",
    "refresh_week_props",
    "run_bozo_annotation",
    "run_daily_results",
    "send_weekly_reminders",
]
