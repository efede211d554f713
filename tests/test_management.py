from bozo_bets.database.models import BetManagement, BozoStat, ManagementAction, User

from .conftest import SEASON


def make_manager(make_user, team, **fields):
    return make_user(
        "Manager",
        team=team,
        is_biggest_bozo=True,
        management_week=2,
        management_season=SEASON,
        **fields,
    )


def mark(client, bet_id, manager_id, status="HIT", week=2):
    return client.post(
        "/api/management",
        json={
            "action": "mark_bet_status",
            "bet_id": bet_id,
            "status": status,
            "manager_id": manager_id,
            "week": week,
            "season": SEASON,
        },
    )


def test_manager_marks_teammate_bet(client, db, make_team, make_user, make_bet):
    team = make_team()
    manager = make_manager(make_user, team)
    player = make_user("Ken", team=team)
    bet = make_bet(player)

    response = mark(client, bet.id, manager.id, status="HIT")

    assert response.status_code == 200
    assert response.json()["bet"]["status"] == "HIT"
    assert response.json()["message"] == "Bet marked as HIT"

    db.expire_all()
    assert db.get(User, player.id).total_hits == 1
    record = db.query(BetManagement).one()
    assert record.action == ManagementAction.MARK_HIT
    assert record.target_user_id == player.id


def test_mark_requires_privileges_for_the_week(client, make_team, make_user, make_bet):
    team = make_team()
    manager = make_manager(make_user, team)
    bet = make_bet(make_user(team=team))

    response = mark(client, bet.id, manager.id, week=3)

    assert response.status_code == 403
    assert response.json()["detail"] == "You do not have management privileges for this week"


def test_mark_only_own_team(client, make_team, make_user, make_bet):
    manager = make_manager(make_user, make_team("Mine"))
    bet = make_bet(make_user(team=make_team("Theirs")))

    response = mark(client, bet.id, manager.id)

    assert response.status_code == 403
    assert response.json()["detail"] == "You can only manage bets from your own team"


def test_admin_marks_any_bet(client, make_team, make_user, make_bet):
    admin = make_user("Admin", is_admin=True)
    bet = make_bet(make_user(team=make_team()))

    response = mark(client, bet.id, admin.id, status="PUSH", week=7)

    assert response.status_code == 200


def test_mark_rejects_pending_and_missing_fields(client, make_user, make_bet):
    admin = make_user("Admin", is_admin=True)
    bet = make_bet(make_user())

    pending = mark(client, bet.id, admin.id, status="PENDING")
    missing = client.post("/api/management", json={"action": "mark_bet_status"})

    assert pending.status_code == 400
    assert pending.json()["detail"] == "Cannot mark a bet as PENDING"
    assert missing.status_code == 400
    assert missing.json()["detail"].startswith("Missing required fields: bet_id")


def test_invalid_action(client):
    response = client.post("/api/management", json={"action": "launch"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid action"


def test_admin_access(client, make_user):
    user = make_user(total_bozos=3)

    def admin(passcode="1111", **extra):
        return client.post(
            "/api/management",
            json={"action": "admin_access", "passcode": passcode, **extra},
        )

    assert admin(passcode="0000", sub_action="verify").status_code == 401
    assert admin(sub_action="verify").json()["message"] == "Admin access granted"
    assert admin(sub_action="format_disk").status_code == 400

    updated = admin(sub_action="update_stats", user_id=user.id, total_bozos=-2, total_hits=5)
    assert updated.status_code == 200
    assert updated.json()["user"]["total_bozos"] == 0
    assert updated.json()["user"]["total_hits"] == 5


def test_assign_biggest_bozo_replaces_previous(client, db, make_team, make_user):
    team = make_team()
    previous = make_manager(make_user, team)
    player = make_user("Ken", team=team)

    response = client.post(
        "/api/management",
        json={
            "action": "assign_biggest_bozo",
            "user_id": player.id,
            "week": 3,
            "season": SEASON,
            "team_id": team.id,
        },
    )

    assert response.status_code == 200
    assert response.json()["user"]["management_week"] == 3
    db.expire_all()
    assert db.get(User, previous.id).is_biggest_bozo is False


def test_management_view(client, make_team, make_user, make_bet):
    team = make_team()
    manager = make_manager(make_user, team)
    make_bet(make_user("Ken", team=team))

    body = client.get(
        "/api/management", params={"user_id": manager.id, "week": 2, "season": SEASON}
    ).json()

    assert body["has_privileges"] is True
    members = {member["name"]: member for member in body["user"]["team"]["users"]}
    assert len(members["Ken"]["weekly_bets"]) == 1
    assert members["Manager"]["weekly_bets"] == []


def test_update_stats_never_goes_negative(client, make_team, make_user):
    team = make_team()
    manager = make_manager(make_user, team)
    target = make_user("Ken", team=team, total_bozos=1)

    response = client.post(
        "/api/management/update-stats",
        json={
            "user_id": target.id,
            "bozo_change": -5,
            "hit_change": 2,
            "manager_id": manager.id,
            "week": 2,
            "season": SEASON,
        },
    )

    assert response.status_code == 200
    assert response.json()["user"]["total_bozos"] == 0
    assert response.json()["user"]["total_hits"] == 2

    history = client.get(
        "/api/management/stats-history", params={"week": 2, "season": SEASON}
    ).json()["history"]
    assert len(history) == 1
    assert history[0]["user_name"] == "Ken"
    assert history[0]["reason"] == "Stats update for Ken: -5 bozos, +2 hits."


def test_update_stats_outside_team(client, make_team, make_user):
    manager = make_manager(make_user, make_team("Mine"))
    target = make_user(team=make_team("Theirs"))

    response = client.post(
        "/api/management/update-stats",
        json={
            "user_id": target.id,
            "bozo_change": 1,
            "manager_id": manager.id,
            "week": 2,
            "season": SEASON,
        },
    )

    assert response.status_code == 403


def test_bulk_update_skips_other_teams(client, make_team, make_user):
    team = make_team("Mine")
    manager = make_manager(make_user, team)
    teammate = make_user("Ken", team=team)
    outsider = make_user("Griff", team=make_team("Theirs"))

    def bulk(updates):
        return client.post(
            "/api/management/bulk-update-stats",
            json={"updates": updates, "manager_id": manager.id, "week": 2, "season": SEASON},
        )

    response = bulk(
        [
            {"user_id": teammate.id, "bozo_change": 2},
            {"user_id": outsider.id, "bozo_change": 2},
        ]
    )
    assert response.status_code == 200
    assert response.json()["updated_count"] == 1
    assert response.json()["updated_users"][0]["total_bozos"] == 2

    rejected = bulk([{"user_id": outsider.id, "hit_change": 1}])
    assert rejected.status_code == 400
    assert rejected.json()["detail"] == "No valid users found for bulk update"


def test_rotate_privileges(client, db, make_team, make_user):
    team = make_team()
    player = make_user("Ken", team=team)
    db.add(BozoStat(user_id=player.id, week=1, season=SEASON, is_biggest_bozo=True, odds=400))
    db.commit()
    params = {"week": 2, "season": SEASON, "team_id": team.id}

    before = client.get("/api/management/rotate-privileges", params=params).json()
    assert before["can_rotate"] is True
    assert before["previous_biggest_bozo"]["name"] == "Ken"

    response = client.post("/api/management/rotate-privileges", json=params)
    assert response.status_code == 200
    assert response.json()["new_biggest_bozo"]["id"] == player.id

    after = client.get("/api/management/rotate-privileges", params=params).json()
    assert after["current_biggest_bozo"]["management_week"] == 2
    assert after["can_rotate"] is False


def test_rotate_without_previous_bozo(client, make_team):
    team = make_team()

    response = client.post(
        "/api/management/rotate-privileges",
        json={"week": 2, "season": SEASON, "team_id": team.id},
    )

    assert response.status_code == 404


def test_automated_processing_is_admin_only(client, make_user, auth_headers):
    admin = make_user("Admin", is_admin=True)
    player = make_user()

    assert client.get("/api/management/automated-processing").status_code == 401
    assert (
        client.get(
            "/api/management/automated-processing", headers=auth_headers(player)
        ).status_code
        == 403
    )

    status = client.get("/api/management/automated-processing", headers=auth_headers(admin))
    assert status.status_code == 200
    assert status.json()["current_week"] == 2
    assert status.json()["current_season"] == SEASON
    assert status.json()["should_process_daily"] is False

    daily = client.post(
        "/api/management/automated-processing",
        json={"action": "process_daily"},
        headers=auth_headers(admin),
    )
    assert daily.status_code == 200
    assert daily.json()["type"] == "daily"
    assert daily.json()["result"]["week"] == 2
    assert daily.json()["result"]["processed_bets"] == 0
