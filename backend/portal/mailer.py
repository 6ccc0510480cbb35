"""Outgoing password reset email."""
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from starlette.concurrency import run_in_threadpool

from .config import Settings
from .reset_tokens import build_reset_url

logger = logging.getLogger(__name__)

RESET_SUBJECT = "EIL Password Reset Request"

_RESET_TEXT = """You have requested to reset your password for your EIL account.

Open the link below to reset your password:
{url}

This link will expire in 1 hour.
If you did not request this password reset, please ignore this email.

Best regards,
EIL IT Support
"""

_RESET_HTML = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #003366;">Password Reset Request</h2>
  <p>You have requested to reset your password for your EIL account.</p>
  <p>Click the link below to reset your password:</p>
  <a href="{url}" style="background-color: #003366; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px; display: inline-block;">Reset Password</a>
  <p>This link will expire in 1 hour.</p>
  <p>If you did not request this password reset, please ignore this email.</p>
  <p>Best regards,<br>EIL IT Support</p>
</div>
"""


class Mailer(Protocol):
    async def send_password_reset(self, email: str, token: str) -> None:
        ...


def build_reset_message(sender: str, recipient: str, reset_url: str) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = RESET_SUBJECT
    message["From"] = sender
    message["To"] = recipient
    message.set_content(_RESET_TEXT.format(url=reset_url))
    message.add_alternative(_RESET_HTML.format(url=reset_url), subtype="html")
    return message


class SMTPMailer:
    """Deliver reset links through an SMTP relay."""

    def __init__(self, settings: Settings) -> None:
        if not settings.smtp_host:
            raise ValueError("SMTP_HOST must be configured to send email")
        self._settings = settings

    async def send_password_reset(self, email: str, token: str) -> None:
        url = build_reset_url(self._settings.frontend_url, token)
        message = build_reset_message(self._settings.smtp_from, email, url)
        await run_in_threadpool(self._deliver, message)
        logger.info("Password reset email sent to %s", email)

    def _deliver(self, message: EmailMessage) -> None:
        settings = self._settings
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as client:
            if settings.smtp_starttls:
                client.starttls()
            if settings.smtp_user:
                client.login(settings.smtp_user, settings.smtp_password or "")
            client.send_message(message)


class DisabledMailer:
    """Stand-in used when no SMTP relay is configured."""

    async def send_password_reset(self, email: str, token: str) -> None:
        logger.warning("SMTP_HOST is not configured; password reset email to %s not sent", email)


def build_mailer(settings: Settings) -> Mailer:
    if settings.smtp_host:
        return SMTPMailer(settings)
    return DisabledMailer()


__all__ = ["DisabledMailer", "Mailer", "SMTPMailer", "build_mailer", "build_reset_message"]
