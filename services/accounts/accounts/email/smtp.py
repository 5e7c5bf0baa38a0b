"""
SMTP delivery via aiosmtplib (primary provider).

Sends multipart/alternative messages (plain text + HTML).  Relays without
authentication are supported; STARTTLS is on unless SMTP_START_TLS=false.
"""
from __future__ import annotations

import logging
from email.message import EmailMessage
from email.utils import formataddr

import aiosmtplib

from accounts.config import Settings
from accounts.email.message import OutgoingEmail

logger = logging.getLogger(__name__)

_TIMEOUT_SECONDS = 15


def is_configured(settings: Settings) -> bool:
    return bool(settings.smtp_host and settings.smtp_from_email)


def build_message(email: OutgoingEmail, settings: Settings) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = formataddr((settings.smtp_from_name, settings.smtp_from_email))
    msg["To"] = formataddr((email.to_name, email.to_email))
    msg["Subject"] = email.subject
    msg.set_content(email.text)
    msg.add_alternative(email.html, subtype="html")
    return msg


async def deliver(email: OutgoingEmail, settings: Settings) -> bool:
    if not is_configured(settings):
        return False
    try:
        await aiosmtplib.send(
            build_message(email, settings),
            hostname=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username or None,
            password=settings.smtp_password or None,
            start_tls=settings.smtp_start_tls,
            timeout=_TIMEOUT_SECONDS,
        )
    except (aiosmtplib.SMTPException, OSError) as exc:
        logger.error("SMTP delivery to %s via %s failed: %s", email.to_email, settings.smtp_host, exc)
        return False
    return True
