import smtplib

import pytest

from scripts.accounts.config import MailConfig
from scripts.accounts.errors import InternalError, InvalidArgumentError
from scripts.accounts.mailer import Mailer
from scripts.accounts.procedures.otp_email import OtpEmail, render_otp_email


class FakeSMTP:
    instances = []
    fail_login = False

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.calls = []
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, username, password):
        if FakeSMTP.fail_login:
            raise smtplib.SMTPAuthenticationError(535, b"bad credentials")
        self.calls.append(("login", username, password))

    def send_message(self, msg):
        self.sent.append(msg)


@pytest.fixture
def mailer(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_login = False
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    return Mailer(MailConfig(
        server="smtp.example.com",
        username="noreply@example.com",
        password="relay-pass",
        sender="LifeGuardian <noreply@example.com>",
    ))


def test_render_embeds_code_and_expiry():
    body = render_otp_email(482913, 5)
    assert "482913" in body
    assert "expire in 5 minutes" in body


def test_render_escapes_markup():
    assert "<script>" not in render_otp_email("<script>", 5)


def test_sends_through_relay(mailer):
    OtpEmail(mailer, "a@x.com", "123456").run()

    smtp = FakeSMTP.instances[0]
    assert (smtp.host, smtp.port) == ("smtp.example.com", 587)
    assert smtp.calls == ["starttls", ("login", "noreply@example.com", "relay-pass")]
    msg = smtp.sent[0]
    assert msg["To"] == "a@x.com"
    assert msg["Subject"] == "Your LifeGuardian verification code"
    assert "123456" in msg.get_payload()[0].get_payload(decode=True).decode()


def test_relay_failure_is_internal(mailer):
    FakeSMTP.fail_login = True
    with pytest.raises(InternalError):
        OtpEmail(mailer, "a@x.com", "123456").run()


def test_missing_email(mailer):
    with pytest.raises(InvalidArgumentError):
        OtpEmail(mailer, "", "123456").run()
    assert FakeSMTP.instances == []
