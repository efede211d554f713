import asyncio
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from bozo_bets.database.models import BetStatus, Notification, User
from bozo_bets.scheduler import SchedulerOrchestrator
from bozo_bets.scheduler.jobs import (
    refresh_week_props,
    run_bozo_annotation,
    run_daily_results,
    send_weekly_reminders,
)

from .conftest import SEASON


def test_daily_results_job_uses_previous_day(app_state, make_user, make_bet):
    make_bet(make_user(), week=2)

    result = asyncio.run(
        run_daily_results(app_state.session_factory, now=datetime(2025, 9, 16, 1, 0))
    )

    assert result["week"] == 2
    assert result["processed_bets"] == 0


def test_bozo_annotation_job(db, app_state, make_user, make_bet):
    ken = make_user("Ken")
    make_bet(ken, week=2, odds=300, status=BetStatus.BOZO)

    result = asyncio.run(
        run_bozo_annotation(app_state.session_factory, now=datetime(2025, 9, 16, 2, 0))
    )

    assert result["biggest_bozo"]["user_id"] == ken.id
    db.expire_all()
    assert db.get(User, ken.id).management_week == 3


def test_reminder_and_refresh_jobs_skip_offseason(app_state):
    offseason = datetime(2026, 5, 1)

    reminders = asyncio.run(send_weekly_reminders(app_state.session_factory, now=offseason))
    refresh = asyncio.run(refresh_week_props(app_state.session_factory, None, now=offseason))

    assert reminders == {"status": "skipped", "sent": 0}
    assert refresh == {"status": "skipped", "props": 0}


def test_weekly_reminders_job(db, app_state, make_user, make_bet):
    make_user("Ken")
    make_bet(make_user("Griff", phone="+15555550100"))

    result = asyncio.run(
        send_weekly_reminders(app_state.session_factory, now=datetime(2025, 9, 10, 12, 0))
    )

    assert result == {"status": "success", "week": 2, "sent": 2, "payment_reminders": 1}
    assert db.query(Notification).count() == 3


def test_orchestrator_registers_and_controls_jobs(settings, app_state):
    async def run():
        scheduler = SchedulerOrchestrator(settings, app_state.session_factory)
        scheduler.start()
        try:
            status = scheduler.get_job_status()
            paused = scheduler.pause_job("daily_odds")
            paused_next = scheduler.get_job_status()["daily_odds"]["next_run"]
            resumed = scheduler.resume_job("daily_odds")
            missing = scheduler.trigger_job("nope")
            running = scheduler.is_running
        finally:
            scheduler.stop()
        return status, paused, paused_next, resumed, missing, running, scheduler.is_running

    status, paused, paused_next, resumed, missing, running, still_running = asyncio.run(run())

    assert set(status) == {"daily_results", "bozo_annotation", "daily_odds", "weekly_reminders"}
    assert status["bozo_annotation"]["last_status"] == "pending"
    assert paused and resumed
    assert paused_next is None
    assert missing is False
    assert running is True
    assert still_running is False


def test_jobs_status_without_scheduler(client):
    assert client.get("/api/jobs/status").json() == {"scheduler_running": False, "jobs": []}


@pytest.fixture
def scheduled_client(settings):
    settings.scheduler.enabled = True
    with TestClient(create_app(settings)) as client:
        yield client


def test_job_endpoints(scheduled_client):
    state = scheduled_client.app.state.app_state
    db = state.session_factory()
    admin = User(name="Admin", email="admin@example.com", is_admin=True)
    player = User(name="Ken", email="ken@example.com")
    db.add_all([admin, player])
    db.commit()
    admin_headers = {"Authorization": f"Bearer {state.auth.create_session(db, admin)}"}
    player_headers = {"Authorization": f"Bearer {state.auth.create_session(db, player)}"}
    db.close()

    status = scheduled_client.get("/api/jobs/status").json()
    assert status["scheduler_running"] is True
    assert len(status["jobs"]) == 4

    assert scheduled_client.post("/api/jobs/daily_odds/pause").status_code == 401
    assert (
        scheduled_client.post("/api/jobs/daily_odds/pause", headers=player_headers).status_code
        == 403
    )
    assert (
        scheduled_client.post("/api/jobs/daily_odds/pause", headers=admin_headers).status_code
        == 200
    )
    assert (
        scheduled_client.post("/api/jobs/daily_odds/resume", headers=admin_headers).status_code
        == 200
    )
    assert (
        scheduled_client.post("/api/jobs/launch_rockets/trigger", headers=admin_headers).status_code
        == 400
    )


def test_health(client):
    health = client.get("/api/health").json()

    assert health["status"] == "healthy"
    assert health["components"]["database_reachable"] is True
    assert health["components"]["scheduler"] is False
    assert health["components"]["cache_health"] == {"status": "healthy", "backend": "InMemoryCache"}
    assert client.get("/api/health/ready").json()["ready"] is True
    assert client.get("/api/health/live").json()["alive"] is True
