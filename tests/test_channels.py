"""Channel clients: push credential resolution, SMTP mailer, broadcast hub."""

import smtplib

import pytest

from pondwatch.core.config import Settings
from pondwatch.core.errors import DeliveryError
from pondwatch.services.mailer import SmtpMailer, build_mailer
from pondwatch.services.push import resolve_push_client
from pondwatch.services.realtime import BroadcastHub


class TestPushResolution:
    def test_disabled_without_credentials(self):
        assert resolve_push_client(Settings()) is None

    def test_invalid_inline_json_disables_push(self):
        assert resolve_push_client(Settings(firebase_service_account="{not json")) is None

    def test_missing_credentials_file_disables_push(self, tmp_path):
        missing = tmp_path / "service-account.json"
        assert resolve_push_client(Settings(firebase_credentials_path=str(missing))) is None


class RecordingSMTP:
    instances: list["RecordingSMTP"] = []

    def __init__(self, host, port, timeout=None):
        self.host, self.port, self.timeout = host, port, timeout
        self.calls: list[str] = []
        self.sent = []
        RecordingSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(f"login:{user}")

    def send_message(self, msg):
        self.sent.append(msg)


class TestSmtpMailer:
    def test_sends_with_tls_and_login(self, monkeypatch):
        RecordingSMTP.instances = []
        monkeypatch.setattr(smtplib, "SMTP", RecordingSMTP)
        mailer = SmtpMailer("smtp.pond.test", 587, sender="ops@pond.test", username="ops", password="pw")

        mailer.send(["a@pond.test", "b@pond.test"], "Pond Condition Alert", "TDS: 600 (Range: 0-500)")

        smtp = RecordingSMTP.instances[0]
        assert (smtp.host, smtp.port) == ("smtp.pond.test", 587)
        assert smtp.calls == ["starttls", "login:ops"]
        msg = smtp.sent[0]
        assert msg["To"] == "a@pond.test, b@pond.test"
        assert msg["Subject"] == "Pond Condition Alert"
        assert "TDS: 600" in msg.get_content()

    def test_smtp_errors_become_delivery_errors(self, monkeypatch):
        def refuse(*args, **kwargs):
            raise ConnectionRefusedError("refused")

        monkeypatch.setattr(smtplib, "SMTP", refuse)
        mailer = SmtpMailer("smtp.pond.test", sender="ops@pond.test")

        with pytest.raises(DeliveryError) as excinfo:
            mailer.send(["a@pond.test"], "s", "b")
        assert excinfo.value.channel == "email"

    def test_build_mailer_needs_a_sender(self):
        assert build_mailer(Settings(email_user=None, email_sender=None)) is None
        mailer = build_mailer(Settings(email_user="ops@pond.test"))
        assert mailer.sender == "ops@pond.test"


class FakeSocket:
    def __init__(self, broken: bool = False) -> None:
        self.broken = broken
        self.accepted = False
        self.received = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.broken:
            raise RuntimeError("socket closed")
        self.received.append(message)


@pytest.mark.asyncio
async def test_hub_broadcasts_and_drops_broken_clients():
    hub = BroadcastHub()
    healthy, broken = FakeSocket(), FakeSocket(broken=True)
    await hub.connect(healthy)
    await hub.connect(broken)

    delivered = await hub.emit("pond-alert", {"alerts": []})

    assert delivered == 1
    assert healthy.received == [{"event": "pond-alert", "data": {"alerts": []}}]
    assert hub.client_count == 1


@pytest.mark.asyncio
async def test_hub_with_no_clients():
    assert await BroadcastHub().emit("feeding-reminder", {}) == 0
