"""
Outbound messages: email templates plus SMS/push notifications.
"""

from .email import (
    EmailMessage,
    password_reset_email,
    quota_warning_email,
    send_email,
    team_invitation_email,
    welcome_email,
)
from .service import LoggingChannel, NotificationChannel, NotificationService

__all__ = [
    "EmailMessage",
    "LoggingChannel",
    "NotificationChannel",
    "NotificationService",
    "password_reset_email",
    "quota_warning_email",
    "send_email",
    "team_invitation_email",
    "welcome_email",
]
