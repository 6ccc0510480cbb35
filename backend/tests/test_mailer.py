"""Tests for the password reset email."""
import pytest

from portal import mailer as mailer_module
from portal.config import Settings
from portal.mailer import DisabledMailer, SMTPMailer, build_mailer, build_reset_message


class FakeSMTP:
    instances: list["FakeSMTP"] = []

    def __init__(self, host, port, timeout=None) -> None:
        self.host = host
        self.port = port
        self.started_tls = False
        self.credentials = None
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        return None

    def starttls(self) -> None:
        self.started_tls = True

    def login(self, user, password) -> None:
        self.credentials = (user, password)

    def send_message(self, message) -> None:
        self.messages.append(message)


def test_reset_message_contains_link() -> None:
    message = build_reset_message(
        "noreply@eil.com", "j.doe@eil.com", "http://localhost:5000/reset-password?token=abc"
    )

    assert message["To"] == "j.doe@eil.com"
    assert message["Subject"] == "EIL Password Reset Request"
    text = message.get_body(preferencelist=("plain",)).get_content()
    html = message.get_body(preferencelist=("html",)).get_content()
    assert "http://localhost:5000/reset-password?token=abc" in text
    assert 'href="http://localhost:5000/reset-password?token=abc"' in html
    assert "expire in 1 hour" in text


def test_build_mailer_without_smtp_host() -> None:
    assert isinstance(build_mailer(Settings()), DisabledMailer)


@pytest.mark.asyncio
async def test_smtp_mailer_sends_through_relay(monkeypatch) -> None:
    FakeSMTP.instances.clear()
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", FakeSMTP)
    settings = Settings(
        smtp_host="smtp.eil.com",
        smtp_port=2525,
        smtp_user="mailer",
        smtp_password="pw",
        frontend_url="https://portal.eil.com",
    )

    await SMTPMailer(settings).send_password_reset("j.doe@eil.com", "tok")

    relay, = FakeSMTP.instances
    assert (relay.host, relay.port) == ("smtp.eil.com", 2525)
    assert relay.started_tls
    assert relay.credentials == ("mailer", "pw")
    sent, = relay.messages
    assert "https://portal.eil.com/reset-password?token=tok" in sent.get_body(
        preferencelist=("plain",)
    ).get_content()
