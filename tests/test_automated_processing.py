from datetime import datetime

from bozo_bets.database.models import BetStatus, Notification, User, WeeklyBet
from bozo_bets.processing import (
    BetResolution,
    get_current_processing_week,
    process_daily_bet_results,
    process_tuesday_bozo_annotation,
    run_automated_processing,
    should_process_daily_bet_results,
    should_process_tuesday_bozo_annotation,
)

from .conftest import CRON_SECRET, SEASON

# Tuesday of week 3's window
TUESDAY_0200 = datetime(2025, 9, 16, 2, 0)
TUESDAY_0100 = datetime(2025, 9, 16, 1, 0)


class StubResolver:
    """Settles bets from a prop -> outcome table; ``"boom"`` raises."""

    def __init__(self, outcomes):
        self.outcomes = outcomes

    def resolve(self, db, bet):
        outcome = self.outcomes.get(bet.prop)
        if outcome == "boom":
            raise RuntimeError("feed exploded")
        if outcome is None:
            return None
        return BetResolution(status=outcome)


def test_schedule_checks():
    assert should_process_daily_bet_results(datetime(2025, 9, 12, 1, 30))
    assert not should_process_daily_bet_results(datetime(2025, 9, 12, 2, 0))
    assert should_process_tuesday_bozo_annotation(TUESDAY_0200)
    assert not should_process_tuesday_bozo_annotation(datetime(2025, 9, 17, 2, 0))


def test_current_processing_week():
    assert get_current_processing_week(datetime(2025, 9, 10)) == (2, 2025)
    # Offseason falls back to the last regular-season week
    assert get_current_processing_week(datetime(2026, 5, 1)) == (18, 2025)
    assert get_current_processing_week(datetime(2025, 7, 1)) == (18, 2024)


def test_daily_processing_settles_and_collects_errors(db, make_user, make_bet):
    hit = make_bet(make_user(), prop="hit me")
    miss = make_bet(make_user(), prop="miss me", odds=250)
    broken = make_bet(make_user(), prop="broken")
    undecided = make_bet(make_user(), prop="later")
    resolver = StubResolver({"hit me": BetStatus.HIT, "miss me": BetStatus.BOZO, "broken": "boom"})

    result = process_daily_bet_results(db, 2, SEASON, resolver=resolver)

    assert (result.processed_bets, result.hits, result.bozos) == (2, 1, 1)
    assert result.errors == [f"Error processing bet {broken.id}: feed exploded"]

    db.expire_all()
    assert db.get(WeeklyBet, hit.id).status == BetStatus.HIT
    assert db.get(WeeklyBet, miss.id).status == BetStatus.BOZO
    assert db.get(WeeklyBet, undecided.id).status == BetStatus.PENDING
    assert db.get(User, miss.user_id).total_bozos == 1


def test_default_resolver_skips_unlinked_bets(db, make_user, make_bet):
    make_bet(make_user())

    result = process_daily_bet_results(db, 2, SEASON)

    assert result.processed_bets == 0
    assert result.errors == []


def test_tuesday_annotation_crowns_and_notifies(db, make_user, make_bet):
    ken = make_user("Ken")
    make_bet(ken, week=2, odds=450, status=BetStatus.BOZO, prop="Ken's long shot")
    make_bet(make_user("Griff"), week=2, odds=120, status=BetStatus.BOZO)

    result = process_tuesday_bozo_annotation(db, 3, SEASON)

    assert result["biggest_bozo"] == {
        "user_id": ken.id,
        "user_name": "Ken",
        "odds": 450,
        "prop": "Ken's long shot",
    }
    db.expire_all()
    assert db.get(User, ken.id).management_week == 3
    assert db.query(Notification).count() == 2


def test_tuesday_annotation_without_misses(db):
    assert process_tuesday_bozo_annotation(db, 3, SEASON) == {
        "success": True,
        "biggest_bozo": None,
    }


def test_run_automated_processing_picks_job(db, make_user, make_bet):
    make_bet(make_user(), prop="monday night", week=2)
    resolver = StubResolver({"monday night": BetStatus.HIT})

    tuesday = run_automated_processing(db, now=TUESDAY_0200)
    daily = run_automated_processing(db, now=TUESDAY_0100, resolver=resolver)
    idle = run_automated_processing(db, now=datetime(2025, 9, 16, 12, 0))

    assert (tuesday["type"], tuesday["result"]["biggest_bozo"]) == ("tuesday", None)
    # 01:00 Tuesday still settles the week of Monday night's game
    assert daily["type"] == "daily"
    assert daily["result"]["week"] == 2
    assert daily["result"]["hits"] == 1
    assert idle == {"processed": False, "type": "none", "result": None}


def test_cron_requires_secret(client):
    assert client.post("/api/cron/automated-processing").status_code == 401
    assert (
        client.post(
            "/api/cron/automated-processing", headers={"Authorization": "Bearer wrong"}
        ).status_code
        == 401
    )

    response = client.post(
        "/api/cron/automated-processing",
        headers={"Authorization": f"Bearer {CRON_SECRET}"},
    )
    assert response.status_code == 200
    assert response.json()["type"] == "none"


def test_cron_notifications(client, make_user, make_bet):
    make_bet(make_user(phone="+15555550100"))
    make_bet(make_user())
    headers = {"Authorization": f"Bearer {CRON_SECRET}"}

    reminders = client.post(
        "/api/cron/notifications", json={"type": "payment_reminders"}, headers=headers
    )
    invalid = client.post("/api/cron/notifications", json={"type": "fireworks"}, headers=headers)

    assert reminders.json()["sent"] == 1
    assert reminders.json()["week"] == 2
    assert invalid.status_code == 400
