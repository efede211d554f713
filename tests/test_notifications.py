from bozo_bets.data.sources import OddsAPIClient
from bozo_bets.database.models import ApiUsage, BetStatus, Notification, NotificationType
from bozo_bets.notifications import NotificationService, send_email, welcome_email
from bozo_bets.notifications.service import prop_result_message

from .conftest import SEASON


class RecordingChannel:
    def __init__(self, push_ok=True):
        self.push_ok = push_ok
        self.sms = []
        self.pushes = []

    def send_sms(self, phone, message):
        self.sms.append((phone, message))
        return True

    def send_push(self, user_id, message):
        self.pushes.append((user_id, message))
        return self.push_ok


def test_notify_logs_failed_delivery(db, make_user):
    user = make_user("Ken", phone="+15555550100")
    service = NotificationService(channel=RecordingChannel(push_ok=False))

    notification = service.notify(db, user, NotificationType.WEEKLY_REMINDER, "hello")

    assert notification.sent is False
    assert notification.sent_at is None
    assert service.channel.sms == [("+15555550100", "hello")]


def test_payment_reminders_skip_paid_and_phoneless(db, client, make_user, make_bet):
    paid = make_bet(make_user(phone="+15555550101"))
    make_bet(make_user(phone="+15555550102"))
    make_bet(make_user())
    client.post("/api/payments/mark", json={"weekly_bet_id": paid.id, "status": "PAID"})
    channel = RecordingChannel()

    sent = NotificationService(channel=channel).send_payment_reminders(db, 2, SEASON)

    assert sent == 1
    assert [phone for phone, _ in channel.sms] == ["+15555550102"]
    assert db.query(Notification).one().type == NotificationType.PAYMENT_REMINDER


def test_prop_result_notifications(db, make_user, make_bet):
    make_bet(make_user("Ken"), status=BetStatus.HIT, prop="Allen over 250.5")
    make_bet(make_user("Griff"), status=BetStatus.PENDING)
    channel = RecordingChannel()

    sent = NotificationService(channel=channel).send_prop_result_notifications(db, 2, SEASON)

    assert sent == 1
    assert channel.pushes[0][1] == 'Ken, your prop bet "Allen over 250.5" HIT! Congratulations!'


def test_prop_result_message_for_miss():
    assert prop_result_message("Ken", "Allen over 250.5", BetStatus.BOZO) == (
        'Ken, your prop bet "Allen over 250.5" was a BOZO! Better luck next week!'
    )


def test_send_email_requires_address():
    assert send_email(welcome_email("Ken", "ken@example.com", "http://localhost:3000"))
    assert not send_email(welcome_email("Ken", "ken.griffey", "http://localhost:3000"))


def test_quota_warning_sent_once_per_month(db, monkeypatch):
    sent = []
    monkeypatch.setattr(
        "bozo_bets.data.sources.odds_api.send_email", lambda message: sent.append(message) or True
    )
    client = OddsAPIClient(api_key="key", warning_threshold=2, admin_email="admin@example.com")
    db.add(ApiUsage(month=client._month(), requests_used=3))
    db.commit()

    assert client.can_make_request(db).allowed
    assert client.can_make_request(db).allowed

    assert len(sent) == 1
    assert sent[0].to == "admin@example.com"
