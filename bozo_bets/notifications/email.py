"""
Outgoing email.

Delivery is a logging transport: messages are rendered and written to the
log instead of being handed to a mail provider.
"""
from dataclasses import dataclass
from typing import Optional

from loguru import logger

log = logger.bind(component="email")

_FOOTER = "<p>NFL Bozo Bets - Where every bet is a story!</p>"


@dataclass
class EmailMessage:
    to: str
    subject: str
    html: str
    text: Optional[str] = None


def send_email(message: EmailMessage) -> bool:
    """Deliver a message. Returns False instead of raising on failure."""
    if not message.to or "@" not in message.to:
        log.error(f"Refusing to send '{message.subject}' to invalid address {message.to!r}")
        return False

    log.info(f"Email to {message.to}: {message.subject}")
    log.debug(message.text or message.html)
    return True


def welcome_email(name: str, email: str, app_url: str) -> EmailMessage:
    return EmailMessage(
        to=email,
        subject="Welcome to NFL Bozo Bets!",
        html=(
            f"<h1>Welcome to NFL Bozo Bets!</h1>"
            f"<h2>Hey {name}!</h2>"
            "<p>Submit your weekly bozo bet and favorite pick, compete for the "
            "title of Biggest Bozo each week and track your stats on the "
            "leaderboard.</p>"
            f'<p><a href="{app_url}">Start Betting Now!</a></p>'
            f"{_FOOTER}"
        ),
        text=(
            f"Welcome to NFL Bozo Bets!\n\nHey {name}!\n\n"
            f"Submit your first bet of the season at {app_url}\n"
        ),
    )


def password_reset_email(name: str, email: str, token: str, app_url: str) -> EmailMessage:
    link = f"{app_url}/reset-password?token={token}"
    return EmailMessage(
        to=email,
        subject="Reset Your NFL Bozo Bets Password",
        html=(
            "<h1>Password Reset Request</h1>"
            f"<h2>Hey {name}!</h2>"
            "<p>We received a request to reset your password. "
            "This link will expire in 1 hour.</p>"
            f'<p><a href="{link}">Reset My Password</a></p>'
            "<p>If you didn't request this password reset, please ignore this "
            "email. Your account remains secure.</p>"
            f"{_FOOTER}"
        ),
        text=(
            f"Password Reset Request\n\nHey {name}!\n\n"
            f"Reset your password within 1 hour: {link}\n"
        ),
    )


def team_invitation_email(
    email: str, team_name: str, inviter_name: str, token: str, app_url: str
) -> EmailMessage:
    link = f"{app_url}/join-team?token={token}"
    return EmailMessage(
        to=email,
        subject=f"You're invited to join {team_name} on NFL Bozo Bets!",
        html=(
            "<h1>Team Invitation</h1>"
            f"<p>{inviter_name} has invited you to join <strong>{team_name}</strong>.</p>"
            "<p>This invitation expires in 7 days.</p>"
            f'<p><a href="{link}">Join Team</a></p>'
            f"{_FOOTER}"
        ),
        text=(
            f"{inviter_name} has invited you to join {team_name} on NFL Bozo Bets.\n\n"
            f"Accept within 7 days: {link}\n"
        ),
    )


def quota_warning_email(
    admin_address: str,
    requests_used: int,
    monthly_limit: int,
    warning_threshold: int,
    month: str,
) -> EmailMessage:
    return EmailMessage(
        to=admin_address,
        subject="Odds API Request Limit Warning",
        html=(
            "<h2>Odds API Request Limit Warning</h2>"
            f"<p>You have used {requests_used} out of {monthly_limit} monthly requests.</p>"
            f"<p>Warning threshold: {warning_threshold} requests</p>"
            "<p>Please monitor your usage to avoid hitting the monthly limit.</p>"
            f"<p>Current month: {month}</p>"
        ),
    )
