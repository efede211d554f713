"""Team endpoints, including invitations."""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.dependencies import get_app_state, get_current_user, get_db
from api.state import AppState
from bozo_bets.database.models import User
from bozo_bets.database.schemas import (
    JoinTeam,
    TeamCreate,
    TeamInvite,
    TeamMemberRequest,
    TeamResponse,
    TeamSummary,
    TeamUpdate,
    UserResponse,
)
from bozo_bets.notifications import send_email, team_invitation_email
from bozo_bets.tracking import (
    add_member,
    create_team,
    delete_team,
    invite_to_team,
    join_team,
    list_teams,
    remove_member,
    update_team,
)

router = APIRouter()


@router.get("/teams", response_model=list[TeamResponse])
async def get_teams(db: Session = Depends(get_db)) -> list[TeamResponse]:
    return [TeamResponse.model_validate(team) for team in list_teams(db)]


@router.get("/teams/available", response_model=list[TeamResponse])
async def get_available_teams(
    user: User = Depends(get_current_user), db: Session = Depends(get_db)
) -> list[TeamResponse]:
    """Teams the caller could join."""
    return [TeamResponse.model_validate(team) for team in list_teams(db, exclude_user=user)]


@router.post("/teams/join")
async def accept_invitation(
    body: JoinTeam,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    team = join_team(db, body.token, user)
    return {
        "success": True,
        "message": f"Successfully joined {team.name}",
        "team": TeamSummary.model_validate(team),
    }


@router.post("/teams", response_model=TeamResponse, status_code=201)
async def add_team(body: TeamCreate, db: Session = Depends(get_db)) -> TeamResponse:
    team = create_team(
        db,
        body.name,
        description=body.description,
        color=body.color,
        lowest_odds=body.lowest_odds,
        highest_odds=body.highest_odds,
    )
    return TeamResponse.model_validate(team)


@router.put("/teams/{team_id}", response_model=TeamResponse)
async def edit_team(
    team_id: int, body: TeamUpdate, db: Session = Depends(get_db)
) -> TeamResponse:
    team = update_team(db, team_id, **body.model_dump(exclude_unset=True))
    return TeamResponse.model_validate(team)


@router.delete("/teams/{team_id}")
async def remove_team(team_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Delete a team. Members stay in the league without a team."""
    delete_team(db, team_id)
    return {"success": True, "message": "Team deleted successfully"}


@router.post("/teams/{team_id}/invite")
async def invite(
    team_id: int,
    body: TeamInvite,
    user: User = Depends(get_current_user),
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Invite an email address to the caller's team."""
    invitation = invite_to_team(db, state.auth, team_id, user, body.email)

    email_sent = send_email(
        team_invitation_email(
            invitation.email,
            invitation.team.name,
            user.name,
            invitation.token,
            state.settings.email.app_url,
        )
    )

    return {
        "success": True,
        "message": f"Invitation sent to {invitation.email}",
        "email_sent": email_sent,
        "expires_at": invitation.expires_at.isoformat(),
    }


@router.post("/teams/{team_id}/members", response_model=UserResponse)
async def add_team_member(
    team_id: int, body: TeamMemberRequest, db: Session = Depends(get_db)
) -> UserResponse:
    return UserResponse.model_validate(add_member(db, team_id, body.user_id))


@router.delete("/teams/{team_id}/members", response_model=UserResponse)
async def remove_team_member(
    team_id: int, body: TeamMemberRequest, db: Session = Depends(get_db)
) -> UserResponse:
    return UserResponse.model_validate(remove_member(db, team_id, body.user_id))
