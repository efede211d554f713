"""
Users, teams and team membership.

A user belongs to at most one team. Members can be added by name only
(no password, generated local email) or register themselves.
"""
from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from bozo_bets.auth import AuthManager, validate_password
from bozo_bets.database.models import Team, TeamInvitation, User, WeeklyBet, utcnow
from bozo_bets.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

log = logger.bind(component="members")

LOCAL_EMAIL_DOMAIN = "nflbozobets.local"


def local_email_for(name: str) -> str:
    """Generated address for members added without an email."""
    return f"{name.strip().lower().replace(' ', '.')}@{LOCAL_EMAIL_DOMAIN}"


def _get_team(db: Session, team_id: int) -> Team:
    team = db.get(Team, team_id)
    if team is None:
        raise NotFoundError("Team not found")
    return team


def _get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def _email_taken(db: Session, email: str) -> bool:
    return db.scalar(select(User.id).where(User.email == email)) is not None


# =============================================================================
# Users
# =============================================================================


def list_users(db: Session) -> list[User]:
    return list(
        db.scalars(
            select(User).options(selectinload(User.team)).order_by(User.created_at.desc(), User.id.desc())
        ).all()
    )


def create_member(db: Session, name: str, team_id: Optional[int] = None) -> User:
    """
    Add a member by name only.

    Raises:
        NotFoundError: ``team_id`` does not exist
        ConflictError: The generated email is already in use
    """
    name = name.strip()
    if team_id is not None:
        _get_team(db, team_id)

    email = local_email_for(name)
    if _email_taken(db, email):
        raise ConflictError("User with this email already exists")

    user = User(name=name, email=email, team_id=team_id)
    db.add(user)
    db.commit()
    log.info(f"Added member {name} ({email})")
    return user


def register_user(
    db: Session,
    auth: AuthManager,
    name: str,
    email: str,
    password: str,
    team_id: Optional[int] = None,
) -> tuple[User, str]:
    """
    Create an account with a password and open a session for it.

    Raises:
        ValidationError: Weak password
        ConflictError: Email already registered
        NotFoundError: ``team_id`` does not exist
    """
    check = validate_password(password)
    if not check.is_valid:
        raise ValidationError("Password validation failed", details=check.errors)

    email = email.strip().lower()
    if _email_taken(db, email):
        raise ConflictError("User with this email already exists")

    if team_id is not None:
        _get_team(db, team_id)

    user = User(
        name=name.strip(),
        email=email,
        password=auth.hash_password(password),
        team_id=team_id,
    )
    db.add(user)
    db.commit()

    token = auth.create_session(db, user)
    log.info(f"Registered user {user.id} ({email})")
    return user, token


def update_user_team(db: Session, user_id: int, team_id: Optional[int]) -> User:
    """Move a user to a team, or out of any team when ``team_id`` is None."""
    if team_id is not None:
        _get_team(db, team_id)
    user = _get_user(db, user_id)
    user.team_id = team_id
    db.commit()
    return user


def delete_user(db: Session, user_id: int) -> None:
    """Delete a user with their bets, payments, sessions and stats."""
    user = _get_user(db, user_id)
    db.execute(
        update(Team)
        .where(Team.biggest_bozo_id == user.id)
        .values(biggest_bozo_id=None)
        .execution_options(synchronize_session="fetch")
    )
    db.delete(user)
    db.commit()
    log.info(f"Deleted user {user_id}")


# =============================================================================
# Teams
# =============================================================================


def _name_taken(db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
    query = select(Team.id).where(Team.name == name)
    if exclude_id is not None:
        query = query.where(Team.id != exclude_id)
    return db.scalar(query) is not None


def list_teams(db: Session, exclude_user: Optional[User] = None) -> list[Team]:
    """All teams, newest first, optionally without the user's own team."""
    query = select(Team).options(selectinload(Team.users))
    if exclude_user is not None and exclude_user.team_id is not None:
        query = query.where(Team.id != exclude_user.team_id)
    return list(db.scalars(query.order_by(Team.created_at.desc(), Team.id.desc())).all())


def create_team(
    db: Session,
    name: str,
    description: Optional[str] = None,
    color: str = "#3b82f6",
    lowest_odds: int = -120,
    highest_odds: int = 130,
) -> Team:
    if lowest_odds > highest_odds:
        raise ValidationError("Lowest odds must not exceed highest odds")
    if _name_taken(db, name):
        raise ConflictError("Team with this name already exists")

    team = Team(
        name=name,
        description=description,
        color=color,
        lowest_odds=lowest_odds,
        highest_odds=highest_odds,
    )
    db.add(team)
    db.commit()
    log.info(f"Created team {team.name}")
    return team


def update_team(db: Session, team_id: int, **changes) -> Team:
    """Apply the given non-None field changes to a team."""
    team = _get_team(db, team_id)
    changes = {k: v for k, v in changes.items() if v is not None}

    if "name" in changes:
        changes["name"] = changes["name"].strip()
        if _name_taken(db, changes["name"], exclude_id=team.id):
            raise ConflictError("Team with this name already exists")

    lowest = changes.get("lowest_odds", team.lowest_odds)
    highest = changes.get("highest_odds", team.highest_odds)
    if lowest > highest:
        raise ValidationError("Lowest odds must not exceed highest odds")

    for key, value in changes.items():
        setattr(team, key, value)
    db.commit()
    return team


def delete_team(db: Session, team_id: int) -> None:
    """Delete a team; its members and bets are kept without a team."""
    team = _get_team(db, team_id)
    db.execute(
        update(User)
        .where(User.team_id == team.id)
        .values(team_id=None)
        .execution_options(synchronize_session="fetch")
    )
    db.execute(
        update(WeeklyBet)
        .where(WeeklyBet.team_id == team.id)
        .values(team_id=None)
        .execution_options(synchronize_session="fetch")
    )
    team.biggest_bozo_id = None
    db.delete(team)
    db.commit()
    log.info(f"Deleted team {team_id}")


def add_member(db: Session, team_id: int, user_id: int) -> User:
    team = _get_team(db, team_id)
    user = _get_user(db, user_id)
    user.team_id = team.id
    db.commit()
    return user


def remove_member(db: Session, team_id: int, user_id: int) -> User:
    team = _get_team(db, team_id)
    user = _get_user(db, user_id)
    if user.team_id != team.id:
        raise ValidationError("User is not a member of this team")

    user.team_id = None
    if team.biggest_bozo_id == user.id:
        team.biggest_bozo_id = None
    db.commit()
    return user


# =============================================================================
# Invitations
# =============================================================================


def invite_to_team(
    db: Session, auth: AuthManager, team_id: int, inviter: User, email: str
) -> TeamInvitation:
    """
    Invite an email address to the inviter's team.

    Raises:
        NotFoundError: Unknown team
        PermissionDeniedError: Inviter is not on the team
        ConflictError: The address already belongs to a member
    """
    team = _get_team(db, team_id)
    if inviter.team_id != team.id:
        raise PermissionDeniedError("You must be a member of this team to invite others")

    email = email.strip().lower()
    existing = db.scalar(select(User).where(User.email == email))
    if existing is not None and existing.team_id == team.id:
        raise ConflictError("User is already a member of this team")

    invitation = auth.create_team_invitation(db, team, inviter, email)
    log.info(f"User {inviter.id} invited {email} to team {team.id}")
    return invitation


def join_team(
    db: Session, token: str, user: User, now: Optional[datetime] = None
) -> Team:
    """
    Accept an invitation.

    Raises:
        ValidationError: Unknown, used or expired token
        PermissionDeniedError: Invitation addressed to another email
        ConflictError: The user already has a team
    """
    invitation = db.scalar(select(TeamInvitation).where(TeamInvitation.token == token))
    if (
        invitation is None
        or invitation.used
        or invitation.expires_at < (now or utcnow())
    ):
        raise ValidationError("Invalid or expired invitation")

    if user.email.lower() != invitation.email.lower():
        raise PermissionDeniedError("This invitation was sent to a different email address")

    if user.team_id is not None:
        raise ConflictError("You are already a member of a team")

    user.team_id = invitation.team_id
    invitation.used = True
    db.commit()

    log.info(f"User {user.id} joined team {invitation.team_id}")
    return invitation.team
