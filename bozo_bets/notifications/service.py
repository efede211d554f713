"""
SMS and push notifications for bettors.

Channels are logging mocks. Every attempt is recorded in the
``notifications`` table, with ``sent=False`` when a channel refused it.
"""
from typing import Optional, Protocol

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from bozo_bets.database.models import (
    BetStatus,
    Notification,
    NotificationType,
    Payment,
    PaymentStatus,
    User,
    WeeklyBet,
    utcnow,
)


class NotificationChannel(Protocol):
    def send_sms(self, phone: str, message: str) -> bool: ...

    def send_push(self, user_id: int, message: str) -> bool: ...


class LoggingChannel:
    """Channel that writes messages to the log instead of a provider."""

    def __init__(self):
        self.logger = logger.bind(component="notifications")

    def send_sms(self, phone: str, message: str) -> bool:
        self.logger.info(f"SMS to {phone}: {message}")
        return True

    def send_push(self, user_id: int, message: str) -> bool:
        self.logger.info(f"Push to user {user_id}: {message}")
        return True


def payment_reminder_message(name: str, week: int) -> str:
    return (
        f"Hey {name}! This is a reminder that your Week {week} NFL Bozo Bet payment "
        "is due. Please submit your payment before Sunday 12:45 PM ET."
    )


def prop_result_message(name: str, prop: str, status: BetStatus) -> str:
    if status == BetStatus.HIT:
        return f'{name}, your prop bet "{prop}" HIT! Congratulations!'
    return f'{name}, your prop bet "{prop}" was a BOZO! Better luck next week!'


def weekly_reminder_message(week: int) -> str:
    return (
        f"Week {week} NFL Bozo Bets are open! Submit your prop bet and payment "
        "by Friday at noon. Good luck!"
    )


class NotificationService:
    """
    Sends notifications and keeps the delivery log.

    Example:
        >>> service = NotificationService()
        >>> service.send_weekly_reminders(db, week=5, season=2025)
        4
    """

    def __init__(self, channel: Optional[NotificationChannel] = None):
        self.channel = channel or LoggingChannel()
        self.logger = logger.bind(component="notifications")

    def notify(
        self,
        db: Session,
        user: User,
        kind: NotificationType,
        message: str,
        require_phone: bool = False,
    ) -> Optional[Notification]:
        """
        Deliver one message over SMS (when the user has a phone) and push.

        Returns None when ``require_phone`` is set and the user has no
        phone number; nothing is logged in that case.
        """
        if require_phone and not user.phone:
            return None

        delivered = True
        if user.phone:
            delivered = self.channel.send_sms(user.phone, message) and delivered
        delivered = self.channel.send_push(user.id, message) and delivered

        notification = Notification(
            user_id=user.id,
            type=kind,
            message=message,
            sent=delivered,
            sent_at=utcnow() if delivered else None,
        )
        db.add(notification)
        db.commit()

        if not delivered:
            self.logger.warning(f"{kind.value} notification to user {user.id} failed")
        return notification

    def send_payment_reminders(self, db: Session, week: int, season: int) -> int:
        """Remind owners of the week's bets that have no PAID payment."""
        paid = select(Payment.weekly_bet_id).where(Payment.status == PaymentStatus.PAID)
        bets = db.scalars(
            select(WeeklyBet).where(
                WeeklyBet.week == week,
                WeeklyBet.season == season,
                WeeklyBet.id.not_in(paid),
            )
        ).all()

        sent = 0
        for bet in bets:
            result = self.notify(
                db,
                bet.user,
                NotificationType.PAYMENT_REMINDER,
                payment_reminder_message(bet.user.name, week),
                require_phone=True,
            )
            sent += bool(result and result.sent)

        self.logger.info(f"Sent {sent} payment reminders for week {week}, {season}")
        return sent

    def send_prop_result_notifications(self, db: Session, week: int, season: int) -> int:
        bets = db.scalars(
            select(WeeklyBet).where(
                WeeklyBet.week == week,
                WeeklyBet.season == season,
                WeeklyBet.status.in_([BetStatus.HIT, BetStatus.BOZO]),
            )
        ).all()

        sent = 0
        for bet in bets:
            result = self.notify(
                db,
                bet.user,
                NotificationType.PROP_RESULT,
                prop_result_message(bet.user.name, bet.prop, bet.status),
            )
            sent += bool(result and result.sent)
        return sent

    def send_weekly_reminders(self, db: Session, week: int, season: int) -> int:
        sent = 0
        for user in db.scalars(select(User).order_by(User.id)).all():
            result = self.notify(
                db, user, NotificationType.WEEKLY_REMINDER, weekly_reminder_message(week)
            )
            sent += bool(result and result.sent)

        self.logger.info(f"Sent {sent} weekly reminders for week {week}, {season}")
        return sent
