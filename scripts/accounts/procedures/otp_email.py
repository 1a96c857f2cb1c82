"""One-time-passcode email. Stateless: the code is neither stored nor checked."""

from __future__ import annotations

import html
import logging
import smtplib
from typing import Union

from scripts.accounts.errors import InternalError, InvalidArgumentError
from scripts.accounts.mailer import Mailer
from scripts.accounts.procedures.base import BaseProcedure

logger = logging.getLogger("accounts.otp_email")

OTP_TEMPLATE = """\
<html>
  <body style="font-family: Arial, sans-serif; color: #222;">
    <h2>LifeGuardian verification</h2>
    <p>Your one-time verification code is:</p>
    <p style="font-size: 28px; font-weight: bold; letter-spacing: 6px;">{code}</p>
    <p>This code will expire in {expiry_minutes} minutes.</p>
    <p>If you did not request this code, you can ignore this email.</p>
    <p>Thanks,<br>The LifeGuardian Team</p>
  </body>
</html>
"""


def render_otp_email(code: Union[str, int], expiry_minutes: int) -> str:
    return OTP_TEMPLATE.format(code=html.escape(str(code)), expiry_minutes=expiry_minutes)


class OtpEmail(BaseProcedure):
    PROCEDURE_NAME = "otp_email"

    def __init__(self, mailer: Mailer, email: str, otp: Union[str, int]) -> None:
        self.mailer = mailer
        self.email = email.strip() if isinstance(email, str) else ""
        self.otp = otp

    def run(self) -> None:
        if not self.email or self.otp is None or str(self.otp) == "":
            raise InvalidArgumentError("Both email and otp are required.")

        body = render_otp_email(self.otp, self.mailer.config.otp_expiry_minutes)
        try:
            self.mailer.send_html(self.email, self.mailer.config.otp_subject, body)
        except (smtplib.SMTPException, OSError) as exc:
            raise InternalError("Failed to send OTP email", str(exc))
