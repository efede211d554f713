from sqlalchemy import select

from bozo_bets.database.models import (
    BozoStat,
    Notification,
    NotificationType,
    PasswordReset,
    Payment,
    TeamInvitation,
    User,
    UserSession,
    WeeklyBet,
)
from bozo_bets.tracking import local_email_for

from .conftest import SEASON


def test_local_email_for():
    assert local_email_for("Ken Griffey") == "ken.griffey@nflbozobets.local"


def test_add_member_generates_email(client):
    response = client.post("/api/users", json={"name": "  Ken Griffey "})

    assert response.status_code == 201
    assert response.json()["name"] == "Ken Griffey"
    assert response.json()["email"] == "ken.griffey@nflbozobets.local"

    duplicate = client.post("/api/users", json={"name": "Ken Griffey"})
    assert duplicate.status_code == 409


def test_add_member_validates_input(client):
    assert client.post("/api/users", json={"name": "   "}).status_code == 422

    response = client.post("/api/users", json={"name": "Ken", "team_id": 42})
    assert response.status_code == 404
    assert response.json()["detail"] == "Team not found"


def test_users_list_includes_team(client, make_team, make_user):
    team = make_team("Sunday Bozos", color="#ff0000")
    make_user("Ken", team=team)

    users = client.get("/api/users").json()

    assert users[0]["team"] == {"id": team.id, "name": "Sunday Bozos", "color": "#ff0000"}


def test_change_team_and_delete_user(client, make_team, make_user):
    team = make_team()
    user = make_user()

    moved = client.put(f"/api/users/{user.id}", json={"team_id": team.id})
    assert moved.status_code == 200
    assert moved.json()["team_id"] == team.id

    assert client.put("/api/users/999", json={"team_id": team.id}).status_code == 404
    assert client.delete(f"/api/users/{user.id}").status_code == 200
    assert client.delete(f"/api/users/{user.id}").status_code == 404


def count_rows(db, model, **filters):
    return db.query(model).filter_by(**filters).count()


def test_delete_user_removes_dependent_rows(client, db, app_state, make_user, make_bet):
    ken = make_user("Ken")
    griff = make_user("Griff")
    bet = make_bet(ken)
    make_bet(griff)
    db.add_all(
        [
            Payment(user_id=ken.id, weekly_bet_id=bet.id, amount=10.0, method="Cash"),
            BozoStat(user_id=ken.id, week=2, season=SEASON),
            Notification(user_id=ken.id, type=NotificationType.WEEKLY_REMINDER, message="bets due"),
        ]
    )
    db.commit()
    app_state.auth.create_session(db, ken)
    app_state.auth.create_password_reset(db, ken)
    ken_id = ken.id

    assert client.delete(f"/api/users/{ken_id}").status_code == 200

    db.expire_all()
    for model in (WeeklyBet, Payment, UserSession, PasswordReset, Notification, BozoStat):
        assert count_rows(db, model, user_id=ken_id) == 0, model.__name__
    assert count_rows(db, WeeklyBet, user_id=griff.id) == 1


def test_delete_bet_removes_its_payments(client, db, make_user, make_bet):
    ken = make_user("Ken")
    bet = make_bet(ken)
    other = make_bet(ken, week=3)
    db.add_all(
        [
            Payment(user_id=ken.id, weekly_bet_id=bet.id, amount=10.0, method="Cash"),
            Payment(user_id=ken.id, weekly_bet_id=other.id, amount=10.0, method="Venmo"),
        ]
    )
    db.commit()
    bet_id = bet.id

    assert client.delete(f"/api/weekly-bets/{bet_id}").status_code == 200

    db.expire_all()
    assert count_rows(db, Payment, weekly_bet_id=bet_id) == 0
    assert count_rows(db, Payment, user_id=ken.id) == 1


def test_team_crud(client):
    created = client.post("/api/teams", json={"name": "Bozos"})
    assert created.status_code == 201
    team = created.json()
    assert team["color"] == "#3b82f6"
    assert (team["lowest_odds"], team["highest_odds"]) == (-120, 130)

    assert client.post("/api/teams", json={"name": "Bozos"}).status_code == 409
    assert client.post("/api/teams", json={"name": "Bad", "color": "red"}).status_code == 422

    updated = client.put(f"/api/teams/{team['id']}", json={"highest_odds": 250})
    assert updated.status_code == 200
    assert updated.json()["highest_odds"] == 250

    assert client.put("/api/teams/999", json={"name": "Nope"}).status_code == 404
    assert client.delete(f"/api/teams/{team['id']}").status_code == 200
    assert client.delete(f"/api/teams/{team['id']}").status_code == 404


def test_rename_to_existing_team_conflicts(client, make_team):
    make_team("Bozos")
    other = make_team("Sharps")

    response = client.put(f"/api/teams/{other.id}", json={"name": "Bozos"})

    assert response.status_code == 409


def test_delete_team_keeps_members(client, db, make_team, make_user):
    team = make_team()
    user = make_user(team=team)

    client.delete(f"/api/teams/{team.id}")

    db.expire_all()
    assert db.get(User, user.id).team_id is None


def test_add_and_remove_members(client, make_team, make_user):
    team = make_team()
    user = make_user()

    added = client.post(f"/api/teams/{team.id}/members", json={"user_id": user.id})
    assert added.json()["team_id"] == team.id

    removed = client.request(
        "DELETE", f"/api/teams/{team.id}/members", json={"user_id": user.id}
    )
    assert removed.status_code == 200
    assert removed.json()["team_id"] is None

    again = client.request("DELETE", f"/api/teams/{team.id}/members", json={"user_id": user.id})
    assert again.status_code == 400
    assert again.json()["detail"] == "User is not a member of this team"


def test_available_teams_exclude_own(client, make_team, make_user, auth_headers):
    mine = make_team("Mine")
    make_team("Theirs")
    user = make_user(team=mine)

    response = client.get("/api/teams/available", headers=auth_headers(user))

    assert response.status_code == 200
    assert [team["name"] for team in response.json()] == ["Theirs"]
    assert client.get("/api/teams/available").status_code == 401


def test_invite_and_join(client, db, make_team, make_user, auth_headers):
    team = make_team()
    inviter = make_user("Ken", team=team)
    invitee = make_user("Griff", email="griff@example.com")

    response = client.post(
        f"/api/teams/{team.id}/invite",
        json={"email": "Griff@Example.com"},
        headers=auth_headers(inviter),
    )
    assert response.status_code == 200
    assert response.json()["email_sent"] is True

    invitation = db.scalar(select(TeamInvitation).where(TeamInvitation.team_id == team.id))
    assert invitation.email == "griff@example.com"

    joined = client.post(
        "/api/teams/join", json={"token": invitation.token}, headers=auth_headers(invitee)
    )
    assert joined.status_code == 200
    assert joined.json()["team"]["id"] == team.id

    reused = client.post(
        "/api/teams/join", json={"token": invitation.token}, headers=auth_headers(invitee)
    )
    assert reused.status_code == 400
    assert reused.json()["detail"] == "Invalid or expired invitation"


def test_invite_rules(client, make_team, make_user, auth_headers):
    team = make_team()
    member = make_user(team=team, email="member@example.com")
    outsider = make_user()

    not_member = client.post(
        f"/api/teams/{team.id}/invite",
        json={"email": "new@example.com"},
        headers=auth_headers(outsider),
    )
    assert not_member.status_code == 403
    assert not_member.json()["detail"] == "You must be a member of this team to invite others"

    already = client.post(
        f"/api/teams/{team.id}/invite",
        json={"email": "member@example.com"},
        headers=auth_headers(member),
    )
    assert already.status_code == 409

    missing = client.post(
        "/api/teams/999/invite", json={"email": "new@example.com"}, headers=auth_headers(member)
    )
    assert missing.status_code == 404


def test_join_with_invitation_for_someone_else(client, db, make_team, make_user, auth_headers):
    team = make_team()
    inviter = make_user(team=team)
    stranger = make_user(email="stranger@example.com")

    client.post(
        f"/api/teams/{team.id}/invite",
        json={"email": "friend@example.com"},
        headers=auth_headers(inviter),
    )
    token = db.scalar(
        select(TeamInvitation.token).where(TeamInvitation.team_id == team.id)
    )

    response = client.post("/api/teams/join", json={"token": token}, headers=auth_headers(stranger))

    assert response.status_code == 403
    assert response.json()["detail"] == "This invitation was sent to a different email address"
