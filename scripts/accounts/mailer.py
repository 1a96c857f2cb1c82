"""SMTP relay client for transactional mail."""

from __future__ import annotations

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from scripts.accounts.config import MailConfig

logger = logging.getLogger("accounts.mailer")


class Mailer:
    def __init__(self, config: MailConfig, timeout: float = 30.0) -> None:
        self.config = config
        self.timeout = timeout

    def send_html(self, to: str, subject: str, html: str) -> None:
        """Send a single HTML message. SMTP and socket errors propagate."""
        msg = MIMEMultipart("alternative")
        msg["From"] = self.config.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(html, "html"))

        with smtplib.SMTP(self.config.server, self.config.port, timeout=self.timeout) as server:
            if self.config.starttls:
                server.starttls()
            server.login(self.config.username, self.config.password)
            server.send_message(msg)
        logger.info("Mail sent to %s", to)
