"""
Bet tracking for the league.

Provides:
- Weekly picks and buy-in payments
- Users, teams and invitations
- Bozo statistics and the weekly Biggest Bozo
- Management privileges with an audit trail
"""

from .bets import (
    BetSubmission,
    create_payment,
    delete_bet,
    delete_payment,
    list_bets,
    list_payments,
    mark_payment,
    submit_bet,
    update_bet,
    update_payment,
)
from .bozo_stats import (
    BozoStatsSummary,
    calculate_biggest_bozo,
    credit_bet_outcome,
    get_biggest_bozos_by_week,
    get_bozo_leaderboard,
    get_weekly_bozo_stats,
    update_bozo_stats,
)
from .management import (
    admin_access,
    assign_biggest_bozo,
    bulk_update_stats,
    get_management_view,
    get_rotation_status,
    get_stats_history,
    has_management_privileges,
    mark_bet_status,
    rotate_privileges,
    update_user_stats,
)
from .members import (
    add_member,
    create_member,
    create_team,
    delete_team,
    delete_user,
    invite_to_team,
    join_team,
    list_teams,
    list_users,
    local_email_for,
    register_user,
    remove_member,
    update_team,
    update_user_team,
)

__all__ = [
    "BetSubmission",
    "BozoStatsSummary",
    "add_member",
    "admin_access",
    "assign_biggest_bozo",
    "bulk_update_stats",
    "calculate_biggest_bozo",
    "credit_bet_outcome",
    "create_member",
    "create_payment",
    "create_team",
    "delete_bet",
    "delete_payment",
    "delete_team",
    "delete_user",
    "get_biggest_bozos_by_week",
    "get_bozo_leaderboard",
    "get_management_view",
    "get_rotation_status",
    "get_stats_history",
    "get_weekly_bozo_stats",
    "has_management_privileges",
    "invite_to_team",
    "join_team",
    "list_bets",
    "list_payments",
    "list_teams",
    "list_users",
    "local_email_for",
    "mark_bet_status",
    "mark_payment",
    "register_user",
    "remove_member",
    "rotate_privileges",
    "submit_bet",
    "update_bet",
    "update_bozo_stats",
    "update_payment",
    "update_team",
    "update_user_stats",
]
