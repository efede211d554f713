from datetime import datetime

from bozo_bets.database.models import BetStatus, BozoStat, FanduelProp, User
from bozo_bets.processing import BetResolution, update_prop_results
from bozo_bets.tracking import calculate_biggest_bozo, credit_bet_outcome, update_bozo_stats

from .conftest import SEASON


def test_invalid_type(client):
    response = client.get("/api/bozo-stats", params={"type": "worst"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid type parameter"


def test_weekly_requires_week(client):
    response = client.get("/api/bozo-stats", params={"type": "weekly"})

    assert response.status_code == 400


def test_leaderboard_orders_by_bozos(client, make_team, make_user):
    team = make_team("Bozos", color="#123456")
    make_user("Ken", team=team, total_bozos=1, total_hits=3)
    make_user("Griff", total_bozos=4, total_hits=1)

    leaderboard = client.get("/api/bozo-stats").json()["leaderboard"]

    assert [row["user_name"] for row in leaderboard] == ["Griff", "Ken"]
    assert leaderboard[0]["bozo_rate"] == 80.0
    assert leaderboard[0]["team_name"] is None
    assert leaderboard[1]["team_color"] == "#123456"


def test_recompute_week_crowns_worst_miss(client, db, make_user, make_bet):
    ken = make_user("Ken")
    griff = make_user("Griff")
    junior = make_user("Junior")
    make_bet(ken, odds=250, status=BetStatus.BOZO)
    longest = make_bet(griff, odds=600, status=BetStatus.BOZO)
    make_bet(junior, odds=150, status=BetStatus.HIT)

    response = client.post("/api/bozo-stats", json={"week": 2, "season": SEASON})

    assert response.status_code == 200
    assert response.json()["bozos"] == 2
    assert response.json()["hits"] == 1
    assert response.json()["biggest_bozo_bet_id"] == longest.id

    db.expire_all()
    assert db.get(User, griff.id).total_bozos == 1
    assert db.get(User, junior.id).total_hits == 1

    weekly = client.get(
        "/api/bozo-stats", params={"type": "weekly", "week": 2, "season": SEASON}
    ).json()
    assert weekly["biggest_bozo"]["user_name"] == "Griff"
    assert weekly["total_bozos"] == 2
    assert weekly["total_hits"] == 1

    by_week = client.get(
        "/api/bozo-stats", params={"type": "biggest-bozos", "season": SEASON}
    ).json()
    assert [row["week"] for row in by_week["biggest_bozos"]] == [2]


def test_worst_favorite_beats_underdog(client, make_user, make_bet):
    chalk = make_bet(make_user(), odds=-300, status=BetStatus.BOZO)
    make_bet(make_user(), odds=400, status=BetStatus.BOZO)

    response = client.post("/api/bozo-stats", json={"week": 2, "season": SEASON})

    assert response.json()["biggest_bozo_bet_id"] == chalk.id


def test_calculate_biggest_bozo_grants_next_week(db, make_user, make_bet):
    ken = make_user("Ken")
    griff = make_user("Griff", is_biggest_bozo=True, management_week=1, management_season=SEASON)
    make_bet(ken, week=1, odds=500, status=BetStatus.BOZO)
    make_bet(griff, week=1, odds=200, status=BetStatus.BOZO)

    user = calculate_biggest_bozo(db, 2, SEASON)

    assert user.id == ken.id
    assert user.management_week == 2
    db.expire_all()
    assert db.get(User, griff.id).is_biggest_bozo is False
    stat = db.query(BozoStat).filter_by(user_id=ken.id, week=2).one()
    assert stat.is_biggest_bozo is True
    assert stat.odds == 500


def test_calculate_biggest_bozo_week_one(db):
    assert calculate_biggest_bozo(db, 1, SEASON) is None


def test_recompute_counts_each_bet_once(client, db, make_user, make_bet):
    ken = make_user("Ken")
    griff = make_user("Griff")
    admin = make_user("Admin", is_admin=True)
    miss = make_bet(ken, odds=300)
    make_bet(griff, odds=120, status=BetStatus.HIT)

    marked = client.post(
        "/api/management",
        json={
            "action": "mark_bet_status",
            "bet_id": miss.id,
            "status": "BOZO",
            "manager_id": admin.id,
            "week": 2,
            "season": SEASON,
        },
    )
    assert marked.status_code == 200

    db.expire_all()
    update_bozo_stats(db, 2, SEASON)
    update_bozo_stats(db, 2, SEASON)

    db.expire_all()
    assert db.get(User, ken.id).total_bozos == 1
    assert db.get(User, griff.id).total_hits == 1


def test_prop_result_batches_count_each_bet_once(db, make_user, make_bet):
    ken = make_user("Ken")
    griff = make_user("Griff")
    for fanduel_id in ("fd-a", "fd-b"):
        db.add(
            FanduelProp(
                fanduel_id=fanduel_id,
                player="Josh Allen",
                team="Buffalo Bills",
                prop="Passing Yards",
                line=250.5,
                odds=-110,
                week=2,
                season=SEASON,
                game_time=datetime(2025, 9, 14, 17, 0),
            )
        )
    db.commit()
    make_bet(ken, fanduel_id="fd-a", odds=-110)
    make_bet(griff, fanduel_id="fd-b", odds=-110)

    update_prop_results(db, 2, SEASON, {"fd-a": BetResolution(BetStatus.BOZO, "under")})
    update_prop_results(db, 2, SEASON, {"fd-b": BetResolution(BetStatus.HIT, "over")})

    db.expire_all()
    assert db.get(User, ken.id).total_bozos == 1
    assert db.get(User, griff.id).total_hits == 1


def test_remarking_moves_the_count(db, make_user, make_bet):
    ken = make_user("Ken")
    bet = make_bet(ken, status=BetStatus.HIT)
    update_bozo_stats(db, 2, SEASON)

    bet.status = BetStatus.BOZO
    db.commit()
    assert credit_bet_outcome(bet) is True
    assert (ken.total_hits, ken.total_bozos) == (0, 1)

    bet.status = BetStatus.CANCELLED
    update_bozo_stats(db, 2, SEASON)

    db.expire_all()
    user = db.get(User, ken.id)
    assert (user.total_hits, user.total_bozos) == (0, 0)
