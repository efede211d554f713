"""
APScheduler orchestrator for the weekly betting cycle.

The cycle, in America/New_York by default:
- 01:00 daily: settle yesterday's pending bets
- 02:00 Tuesday: crown the Biggest Bozo of the week that just ended
- ``odds_job_hour`` daily: refresh the week's props from the odds feed
- Wednesday noon: remind everyone to get their bets in
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import sessionmaker

from bozo_bets.notifications.service import NotificationService

from . import jobs

logger = logging.getLogger(__name__)


@dataclass
class JobRecord:
    """Outcome bookkeeping for one registered job."""

    last_run: Optional[datetime] = None
    last_status: str = "pending"
    last_error: Optional[str] = None
    run_count: int = 0

    def mark(self, status: str, error: Optional[str] = None) -> None:
        self.last_run = datetime.now()
        self.last_status = status
        self.last_error = error
        self.run_count += 1


class SchedulerOrchestrator:
    """
    Owns the ``AsyncIOScheduler`` and the four betting-cycle jobs.

    Each job opens its own session from ``session_factory`` and works on
    wall-clock time in the configured timezone, so a job fired at 01:00 New
    York time settles the right NFL week whatever the host clock says.

    Example:
        >>> scheduler = SchedulerOrchestrator(settings, session_factory, odds_client)
        >>> scheduler.start()
        >>> scheduler.trigger_job("bozo_annotation")
        >>> scheduler.stop()
    """

    def __init__(
        self,
        settings: Any,
        session_factory: sessionmaker,
        odds_client: Any = None,
        cache: Any = None,
        notifier: Optional[NotificationService] = None,
    ):
        self.settings = settings
        self.session_factory = session_factory
        self.odds_client = odds_client
        self.cache = cache
        self.notifier = notifier or NotificationService()

        self.timezone = ZoneInfo(settings.scheduler.timezone)
        self.scheduler = AsyncIOScheduler(
            timezone=self.timezone,
            job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": 300},
        )
        self._records: dict[str, JobRecord] = {}
        self._running = False

        self.scheduler.add_listener(self._record_outcome, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    def _job_table(self) -> list[tuple[str, str, Any, CronTrigger]]:
        cfg = self.settings.scheduler
        return [
            (
                "daily_results",
                "Settle Daily Bet Results",
                self._daily_results_job,
                CronTrigger(hour=cfg.daily_results_hour, minute=0),
            ),
            (
                "bozo_annotation",
                "Biggest Bozo Annotation",
                self._bozo_annotation_job,
                CronTrigger(
                    day_of_week=cfg.bozo_annotation_weekday,
                    hour=cfg.bozo_annotation_hour,
                    minute=0,
                ),
            ),
            # Spends odds API quota, so once a day only
            (
                "daily_odds",
                "Refresh Week Props",
                self._daily_odds_job,
                CronTrigger(hour=cfg.odds_job_hour, minute=0),
            ),
            (
                "weekly_reminders",
                "Weekly Reminders",
                self._weekly_reminders_job,
                CronTrigger(day_of_week="wed", hour=12, minute=0),
            ),
        ]

    def start(self) -> None:
        if self._running:
            logger.warning("Scheduler already running")
            return

        for job_id, name, func, trigger in self._job_table():
            self.scheduler.add_job(func, trigger=trigger, id=job_id, name=name, replace_existing=True)
            self._records[job_id] = JobRecord()

        self.scheduler.start()
        self._running = True

        summary = ", ".join(
            f"{job.id} @ {job.next_run_time:%a %H:%M}" if job.next_run_time else f"{job.id} paused"
            for job in self.scheduler.get_jobs()
        )
        logger.info(f"Scheduler started: {summary}")

    def stop(self) -> None:
        if not self._running:
            return
        self.scheduler.shutdown(wait=False)
        self._running = False
        logger.info("Scheduler stopped")

    def _now(self) -> datetime:
        """Wall-clock time in the scheduler timezone, without tzinfo."""
        return datetime.now(self.timezone).replace(tzinfo=None)

    async def _daily_results_job(self) -> None:
        await jobs.run_daily_results(self.session_factory, now=self._now())

    async def _bozo_annotation_job(self) -> None:
        await jobs.run_bozo_annotation(self.session_factory, notifier=self.notifier, now=self._now())

    async def _daily_odds_job(self) -> None:
        if self.odds_client is None or not self.odds_client.enabled:
            logger.debug("Odds API not configured, skipping props refresh")
            return
        await jobs.refresh_week_props(
            self.session_factory,
            self.odds_client,
            cache=self.cache,
            ttl_seconds=self.settings.odds_api.cache_ttl_seconds,
            now=self._now(),
        )

    async def _weekly_reminders_job(self) -> None:
        await jobs.send_weekly_reminders(
            self.session_factory, notifier=self.notifier, now=self._now()
        )

    def _record_outcome(self, event: JobExecutionEvent) -> None:
        record = self._records.get(event.job_id)
        if event.exception is not None:
            logger.error(f"Job {event.job_id} failed: {event.exception}")
            if record:
                record.mark("error", str(event.exception))
        elif record:
            record.mark("success")

    def get_job_status(self) -> dict[str, dict]:
        status = {}
        for job in self.scheduler.get_jobs():
            record = self._records.get(job.id, JobRecord())
            status[job.id] = {
                "name": job.name,
                "next_run": job.next_run_time,
                "last_run": record.last_run,
                "last_status": record.last_status,
                "last_error": record.last_error,
                "run_count": record.run_count,
            }
        return status

    def trigger_job(self, job_id: str) -> bool:
        """Run ``job_id`` now, resuming it first if paused. False if unknown."""
        if self.scheduler.get_job(job_id) is None:
            return False
        self.scheduler.resume_job(job_id)
        self.scheduler.modify_job(job_id, next_run_time=datetime.now(self.timezone))
        logger.info(f"Triggered job {job_id}")
        return True

    def pause_job(self, job_id: str) -> bool:
        if self.scheduler.get_job(job_id) is None:
            return False
        self.scheduler.pause_job(job_id)
        logger.info(f"Paused job {job_id}")
        return True

    def resume_job(self, job_id: str) -> bool:
        if self.scheduler.get_job(job_id) is None:
            return False
        self.scheduler.resume_job(job_id)
        logger.info(f"Resumed job {job_id}")
        return True

    @property
    def is_running(self) -> bool:
        return self._running
