"""Shared fixtures: an app on in-memory SQLite with a frozen clock."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_clock
from api.main import create_app
from bozo_bets.config.settings import (
    AuthSettings,
    OddsAPISettings,
    SchedulerSettings,
    Settings,
    TransportSettings,
)
from bozo_bets.database.models import Team, User, WeeklyBet

# Wednesday of week 2, 2025 (week 2 window: Tue Sep 9 - Mon Sep 15)
FIXED_NOW = datetime(2025, 9, 10, 12, 0)
SEASON = 2025
CRON_SECRET = "cron-test-secret"
STRONG_PASSWORD = "Str0ng!pass"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        log_file=None,
        auth=AuthSettings(
            jwt_secret="test-secret-key-for-the-bozo-bets-suite",
            bcrypt_rounds=4,
            cron_secret=CRON_SECRET,
        ),
        odds_api=OddsAPISettings(api_key=""),
        scheduler=SchedulerSettings(enabled=False),
        transport=TransportSettings(enabled=False),
    )


@pytest.fixture
def client(settings):
    app = create_app(settings)
    app.dependency_overrides[get_clock] = lambda: FIXED_NOW
    with TestClient(app) as client:
        yield client


@pytest.fixture
def app_state(client):
    return client.app.state.app_state


@pytest.fixture
def db(app_state):
    session = app_state.session_factory()
    yield session
    session.close()


@pytest.fixture
def make_team(db):
    def _make(name="Bozos", **fields):
        team = Team(name=name, **fields)
        db.add(team)
        db.commit()
        return team

    return _make


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(name=None, team=None, **fields):
        counter["n"] += 1
        name = name or f"Player {counter['n']}"
        user = User(
            name=name,
            email=fields.pop("email", f"player{counter['n']}@example.com"),
            team_id=team.id if team is not None else None,
            **fields,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_bet(db):
    def _make(user, week=2, season=SEASON, **fields):
        bet = WeeklyBet(
            user_id=user.id,
            team_id=user.team_id,
            week=week,
            season=season,
            prop=fields.pop("prop", "Josh Allen passing yards over 250.5"),
            **fields,
        )
        db.add(bet)
        db.commit()
        return bet

    return _make


@pytest.fixture
def auth_headers(app_state, db):
    """Bearer headers for a freshly opened session of ``user``."""

    def _headers(user):
        token = app_state.auth.create_session(db, user)
        return {"Authorization": f"Bearer {token}"}

    return _headers
