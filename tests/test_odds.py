import asyncio
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from bozo_bets.data.sources.odds_api import OddsAPIClient
from bozo_bets.database.models import ApiUsage, BetStatus, FanduelProp, User, WeeklyBet, utcnow

from .conftest import SEASON

BILLS_JETS = {
    "commence_time": "2025-09-14T17:00:00Z",
    "home_team": "Buffalo Bills",
    "away_team": "New York Jets",
    "bookmakers": [
        {
            "title": "FanDuel",
            "markets": [
                {
                    "key": "h2h",
                    "outcomes": [
                        {"name": "Buffalo Bills", "price": -250},
                        {"name": "New York Jets", "price": 200},
                    ],
                },
                {
                    "key": "spreads",
                    "outcomes": [
                        {"name": "Buffalo Bills", "price": -110, "point": -6.5},
                        {"name": "New York Jets", "price": -110, "point": 6.5},
                    ],
                },
                {"key": "totals", "outcomes": [{"name": "Over", "price": -105, "point": 47.5}]},
                {"key": "player_pass_yds", "outcomes": [{"price": -110}, {"price": -110}]},
            ],
        }
    ],
}


def test_process_odds_data_keeps_week_games():
    monday_night = {**BILLS_JETS, "commence_time": "2025-09-09T00:15:00Z"}

    records = OddsAPIClient.process_odds_data([BILLS_JETS, monday_night], 2, SEASON)

    assert [r["prop"] for r in records] == ["Moneyline", "Point Spread"]
    moneyline, spread = records
    assert moneyline["fanduel_id"] == "FanDuel-h2h-Buffalo Bills-New York Jets"
    assert moneyline["line"] == 0.0
    assert (moneyline["over_odds"], moneyline["under_odds"]) == (-250, 200)
    assert spread["line"] == -6.5
    assert spread["game_time"] == datetime(2025, 9, 14, 17, 0)


def test_fetch_without_api_key(client):
    response = client.post("/api/odds-api/fetch", json={"week": 2, "season": SEASON})

    assert response.status_code == 503
    assert response.json()["detail"] == "Odds API not configured"


@pytest.fixture
def keyed_client(settings):
    settings.odds_api.api_key = "test-key"
    with TestClient(create_app(settings)) as client:
        yield client


def test_fetch_over_monthly_quota(keyed_client):
    db = keyed_client.app.state.app_state.session_factory()
    db.add(ApiUsage(month=utcnow().strftime("%Y-%m"), requests_used=500))
    db.commit()
    db.close()

    response = keyed_client.post("/api/odds-api/fetch", json={"week": 2, "season": SEASON})

    assert response.status_code == 429
    assert response.json()["detail"] == "Monthly limit of 500 requests reached"
    assert response.json()["details"]["requests_remaining"] == 0


def test_usage_reports_month(client):
    body = client.get("/api/odds-api/usage").json()

    assert body["enabled"] is False
    assert body["usage"]["requests_used"] == 0
    assert body["usage"]["monthly_limit"] == 500


@pytest.fixture
def allen_prop(db):
    prop = FanduelProp(
        fanduel_id="fd-allen-py",
        player="Josh Allen",
        team="Buffalo Bills",
        prop="Passing Yards",
        line=250.5,
        odds=-110,
        under_odds=-120,
        week=2,
        season=SEASON,
        game_time=datetime(2025, 9, 14, 17, 0),
    )
    db.add(prop)
    db.commit()
    return prop


def test_stored_props_for_current_week(client, allen_prop):
    body = client.get("/api/fanduel-props").json()

    assert (body["week"], body["season"], body["count"]) == (2, SEASON, 1)
    assert body["props"][0]["fanduel_id"] == "fd-allen-py"


def test_prop_results_settle_linked_bets(client, db, allen_prop, make_user, make_bet):
    user = make_user("Ken")
    bet = make_bet(user, odds=300, fanduel_id="fd-allen-py")

    response = client.post(
        "/api/fanduel-props",
        json={
            "week": 2,
            "season": SEASON,
            "results": [
                {"fanduel_id": "fd-allen-py", "status": "BOZO", "result": "under"},
                {"fanduel_id": "unknown", "status": "HIT"},
            ],
        },
    )

    assert response.status_code == 200
    assert response.json()["stats"]["biggest_bozo_bet_id"] == bet.id

    db.expire_all()
    assert db.get(WeeklyBet, bet.id).status == BetStatus.BOZO
    assert db.get(WeeklyBet, bet.id).result == "under"
    assert db.get(FanduelProp, allen_prop.id).status == BetStatus.BOZO
    assert db.get(User, user.id).total_bozos == 1


def test_prop_results_drop_cached_week(client, app_state, allen_prop):
    cache = app_state.cache
    asyncio.run(cache.set("props:2025:2", [{"fanduel_id": "fd-allen-py", "status": "PENDING"}]))

    client.post(
        "/api/fanduel-props",
        json={
            "week": 2,
            "season": SEASON,
            "results": [{"fanduel_id": "fd-allen-py", "status": "HIT"}],
        },
    )

    assert asyncio.run(cache.get("props:2025:2")) is None


def test_prop_search(client, allen_prop):
    response = client.post("/api/prop-search", json={"prop_text": "Josh Allen pass yds over 250.5"})

    assert response.status_code == 200
    assert response.json()["match"]["found"] is True
    assert response.json()["match"]["prop"]["fanduel_id"] == "fd-allen-py"

    hits = client.post("/api/prop-search", json={"search_query": "allen"}).json()["results"]
    assert [prop["fanduel_id"] for prop in hits] == ["fd-allen-py"]

    assert client.post("/api/prop-search", json={"prop_text": "  "}).status_code == 400


def test_live_odds(client, allen_prop):
    odds = client.get("/api/live-odds", params={"fanduel_id": "fd-allen-py"}).json()

    assert odds == {
        "fanduel_id": "fd-allen-py",
        "odds": -110,
        "over_odds": -110,
        "under_odds": -120,
    }
    assert client.get("/api/live-odds", params={"fanduel_id": "nope"}).status_code == 404
