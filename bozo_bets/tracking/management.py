"""
Weekly management privileges.

The Biggest Bozo of the previous week manages their team's bets for the
current week; admins can manage every team at any time. Every manual
change is written to the BetManagement audit trail.
"""
from typing import Any, Optional

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from bozo_bets.database.models import (
    BetManagement,
    BetStatus,
    BozoStat,
    ManagementAction,
    Team,
    User,
    WeeklyBet,
)
from bozo_bets.errors import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from bozo_bets.tracking.bozo_stats import credit_bet_outcome

log = logger.bind(component="management")

MANAGEABLE_STATUSES = (BetStatus.HIT, BetStatus.BOZO, BetStatus.PUSH, BetStatus.CANCELLED)


def has_management_privileges(user: User, week: int, season: int) -> bool:
    return user.is_admin or (
        user.is_biggest_bozo
        and user.management_week == week
        and user.management_season == season
    )


def _get_manager(db: Session, manager_id: int, week: int, season: int) -> User:
    manager = db.get(User, manager_id)
    if manager is None:
        raise NotFoundError("Manager not found")
    if not has_management_privileges(manager, week, season):
        raise PermissionDeniedError("You do not have management privileges for this week")
    return manager


def _signed(value: int) -> str:
    return f"+{value}" if value > 0 else str(value)


def mark_bet_status(
    db: Session,
    bet_id: int,
    status: BetStatus,
    manager_id: int,
    week: int,
    season: int,
    reason: Optional[str] = None,
) -> WeeklyBet:
    """
    Settle a bet by hand.

    Raises:
        NotFoundError: Unknown manager or bet
        PermissionDeniedError: No privileges this week, or another team's bet
        ValidationError: Status is not a settled outcome
    """
    status = BetStatus(status)
    if status not in MANAGEABLE_STATUSES:
        raise ValidationError(f"Cannot mark a bet as {status.value}")

    manager = _get_manager(db, manager_id, week, season)

    bet = db.get(WeeklyBet, bet_id)
    if bet is None:
        raise NotFoundError("Bet not found")

    if not manager.is_admin and bet.user.team_id != manager.team_id:
        raise PermissionDeniedError("You can only manage bets from your own team")

    bet.status = status
    db.add(
        BetManagement(
            weekly_bet_id=bet.id,
            manager_id=manager.id,
            target_user_id=bet.user_id,
            week=week,
            season=season,
            action=ManagementAction(f"MARK_{status.value}"),
            reason=reason,
        )
    )

    credit_bet_outcome(bet)

    db.commit()
    log.info(f"Manager {manager.id} marked bet {bet.id} as {status.value}")
    return bet


def update_user_stats(
    db: Session,
    user_id: int,
    bozo_change: int,
    hit_change: int,
    manager_id: int,
    week: int,
    season: int,
    reason: Optional[str] = None,
) -> dict[str, Any]:
    """Apply a delta to a user's totals, never going below zero."""
    manager = _get_manager(db, manager_id, week, season)

    target = db.get(User, user_id)
    if target is None:
        raise NotFoundError("User not found")

    if not manager.is_admin and (
        manager.team_id is None or target.team_id != manager.team_id
    ):
        raise PermissionDeniedError("You can only manage stats for users in your teams")

    target.total_bozos = max(0, target.total_bozos + bozo_change)
    target.total_hits = max(0, target.total_hits + hit_change)

    note = f"Stats update for {target.name}: {_signed(bozo_change)} bozos, {_signed(hit_change)} hits."
    db.add(
        BetManagement(
            manager_id=manager.id,
            target_user_id=target.id,
            week=week,
            season=season,
            action=ManagementAction.OVERRIDE_STATUS,
            reason=f"{note} {reason}" if reason else note,
            bozo_change=bozo_change,
            hit_change=hit_change,
        )
    )
    db.commit()

    log.info(f"Manager {manager.id} updated stats for user {target.id}")
    return {
        "user": {
            "id": target.id,
            "name": target.name,
            "total_bozos": target.total_bozos,
            "total_hits": target.total_hits,
        },
        "changes": {"bozo_change": bozo_change, "hit_change": hit_change},
        "message": f"Stats updated successfully for {target.name}",
    }


def bulk_update_stats(
    db: Session,
    updates: list[dict[str, int]],
    manager_id: int,
    week: int,
    season: int,
) -> dict[str, Any]:
    """
    Apply several stat deltas with one audit record.

    Non-admins silently skip users outside their own team.

    Raises:
        ValidationError: No update targets an allowed user
    """
    manager = _get_manager(db, manager_id, week, season)

    user_ids = {u["user_id"] for u in updates}
    users = {
        user.id: user
        for user in db.scalars(select(User).where(User.id.in_(user_ids))).all()
        if manager.is_admin or (manager.team_id is not None and user.team_id == manager.team_id)
    }
    allowed = [u for u in updates if u["user_id"] in users]
    if not allowed:
        raise ValidationError("No valid users found for bulk update")

    changes = []
    for item in allowed:
        user = users[item["user_id"]]
        bozo_change = item.get("bozo_change", 0)
        hit_change = item.get("hit_change", 0)
        user.total_bozos = max(0, user.total_bozos + bozo_change)
        user.total_hits = max(0, user.total_hits + hit_change)
        changes.append(
            f"{user.name}: {_signed(bozo_change)} bozos, {_signed(hit_change)} hits"
        )

    db.add(
        BetManagement(
            manager_id=manager.id,
            week=week,
            season=season,
            action=ManagementAction.OVERRIDE_STATUS,
            reason=f"Bulk stats update: {len(allowed)} users updated. Changes: {'; '.join(changes)}",
            bozo_change=sum(u.get("bozo_change", 0) for u in allowed),
            hit_change=sum(u.get("hit_change", 0) for u in allowed),
        )
    )
    db.commit()

    updated = list({u["user_id"]: users[u["user_id"]] for u in allowed}.values())
    return {
        "updated_count": len(updated),
        "updated_users": [
            {
                "id": user.id,
                "name": user.name,
                "total_bozos": user.total_bozos,
                "total_hits": user.total_hits,
            }
            for user in updated
        ],
        "message": f"Bulk update completed! {len(updated)} users updated successfully",
    }


def get_stats_history(
    db: Session, week: int, season: int, limit: int = 50
) -> list[dict[str, Any]]:
    """Stats overrides for a week, newest first."""
    records = db.scalars(
        select(BetManagement)
        .where(
            BetManagement.week == week,
            BetManagement.season == season,
            BetManagement.action == ManagementAction.OVERRIDE_STATUS,
            BetManagement.weekly_bet_id.is_(None),
        )
        .order_by(BetManagement.created_at.desc(), BetManagement.id.desc())
        .limit(limit)
    ).all()

    return [
        {
            "id": record.id,
            "user_id": record.target_user_id,
            "user_name": record.target_user.name if record.target_user else None,
            "team_name": (
                record.target_user.team.name
                if record.target_user and record.target_user.team
                else None
            ),
            "bozo_change": record.bozo_change,
            "hit_change": record.hit_change,
            "reason": record.reason,
            "timestamp": record.created_at,
            "manager": {
                "name": record.manager.name,
                "is_admin": record.manager.is_admin,
                "is_biggest_bozo": record.manager.is_biggest_bozo,
            },
        }
        for record in records
    ]


def admin_access(
    db: Session,
    passcode: str,
    expected_passcode: str,
    sub_action: str,
    user_id: Optional[int] = None,
    total_bozos: Optional[int] = None,
    total_hits: Optional[int] = None,
) -> dict[str, Any]:
    """
    Passcode-gated admin panel actions: ``verify`` or ``update_stats``.

    Raises:
        AuthenticationError: Wrong passcode
        ValidationError: Unknown sub-action or missing stats fields
        NotFoundError: Unknown user
    """
    if passcode != expected_passcode:
        raise AuthenticationError("Invalid admin passcode")

    if sub_action == "verify":
        return {"message": "Admin access granted"}

    if sub_action != "update_stats":
        raise ValidationError("Invalid sub-action")

    if user_id is None or total_bozos is None or total_hits is None:
        raise ValidationError("Missing required fields for stats update")

    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    user.total_bozos = max(0, total_bozos)
    user.total_hits = max(0, total_hits)
    db.commit()

    log.info(f"Admin set stats for user {user.id}")
    return {
        "user": {
            "id": user.id,
            "name": user.name,
            "total_bozos": user.total_bozos,
            "total_hits": user.total_hits,
        },
        "message": "User stats updated successfully",
    }


def assign_biggest_bozo(
    db: Session, user_id: int, week: int, season: int, team_id: int
) -> User:
    """Move the team's management privileges to ``user_id``."""
    team = db.get(Team, team_id)
    if team is None:
        raise NotFoundError("Team not found")
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    db.execute(
        update(User)
        .where(User.team_id == team_id, User.is_biggest_bozo.is_(True))
        .values(is_biggest_bozo=False, management_week=None, management_season=None)
        .execution_options(synchronize_session="fetch")
    )
    user.is_biggest_bozo = True
    user.management_week = week
    user.management_season = season
    team.biggest_bozo_id = user.id
    db.commit()

    log.info(f"{user.name} assigned Biggest Bozo of team {team.id} for week {week}")
    return user


def _previous_biggest_bozo(
    db: Session, week: int, season: int, team_id: int
) -> Optional[BozoStat]:
    return db.scalar(
        select(BozoStat)
        .join(User, BozoStat.user_id == User.id)
        .where(
            BozoStat.week == week - 1,
            BozoStat.season == season,
            BozoStat.is_biggest_bozo.is_(True),
            User.team_id == team_id,
        )
        .order_by(BozoStat.created_at.desc(), BozoStat.id.desc())
    )


def rotate_privileges(db: Session, week: int, season: int, team_id: int) -> User:
    """
    Give ``week``'s privileges to the team's Biggest Bozo of the week before.

    Raises:
        NotFoundError: Nobody on the team was last week's Biggest Bozo
    """
    stat = _previous_biggest_bozo(db, week, season, team_id)
    if stat is None:
        raise NotFoundError("No biggest bozo found for the previous week")
    return assign_biggest_bozo(db, stat.user_id, week, season, team_id)


def get_rotation_status(
    db: Session, week: int, season: int, team_id: int
) -> dict[str, Any]:
    current = db.scalar(
        select(User).where(User.team_id == team_id, User.is_biggest_bozo.is_(True))
    )
    previous = _previous_biggest_bozo(db, week, season, team_id)

    return {
        "current_biggest_bozo": (
            {
                "id": current.id,
                "name": current.name,
                "is_biggest_bozo": current.is_biggest_bozo,
                "management_week": current.management_week,
                "management_season": current.management_season,
            }
            if current
            else None
        ),
        "previous_biggest_bozo": (
            {
                "id": previous.user_id,
                "name": previous.user.name,
                "week": previous.week,
                "season": previous.season,
            }
            if previous
            else None
        ),
        "can_rotate": previous is not None
        and (current is None or current.management_week != week),
    }


def get_management_view(db: Session, user_id: int, week: int, season: int) -> dict[str, Any]:
    """The user's team with every member's bets for the week."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    team_payload = None
    if user.team is not None:
        members = db.scalars(
            select(User)
            .where(User.team_id == user.team_id)
            .options(selectinload(User.weekly_bets))
            .order_by(User.name)
        ).all()
        team_payload = {
            "id": user.team.id,
            "name": user.team.name,
            "users": [
                {
                    "id": member.id,
                    "name": member.name,
                    "weekly_bets": [
                        {
                            "id": bet.id,
                            "prop": bet.prop,
                            "odds": bet.odds,
                            "status": bet.status.value,
                            "bet_type": bet.bet_type.value,
                        }
                        for bet in member.weekly_bets
                        if bet.week == week and bet.season == season
                    ],
                }
                for member in members
            ],
        }

    return {
        "user": {
            "id": user.id,
            "name": user.name,
            "is_admin": user.is_admin,
            "is_biggest_bozo": user.is_biggest_bozo,
            "management_week": user.management_week,
            "management_season": user.management_season,
            "team_id": user.team_id,
            "team": team_payload,
        },
        "has_privileges": has_management_privileges(user, week, season),
        "management_week": week,
        "management_season": season,
    }
