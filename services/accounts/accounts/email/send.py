"""
Email delivery orchestrator: SMTP (primary) with Brevo (fallback).

The send_* functions are fire-and-forget: they log on failure but never
raise, so an email outage never breaks an account flow.  BackgroundMailer
hands them to FastAPI BackgroundTasks so delivery runs after the response.

Delivery order:
  1. SMTP: if configured
  2. Brevo: if SMTP fails or is not configured
  3. Log: with no provider at all the link is logged (local development)
"""
from __future__ import annotations

import logging

from fastapi import BackgroundTasks

from accounts.config import Settings
from accounts.email import brevo, smtp
from accounts.email.message import OutgoingEmail, new_password_email, verify_email

logger = logging.getLogger(__name__)


def has_provider(settings: Settings) -> bool:
    return smtp.is_configured(settings) or brevo.is_configured(settings)


async def deliver(email: OutgoingEmail, settings: Settings) -> bool:
    """Try SMTP first, fall back to Brevo.  Never raises."""
    if smtp.is_configured(settings):
        if await smtp.deliver(email, settings):
            return True
        logger.warning("SMTP failed for %s, falling back to Brevo", email.to_email)

    if brevo.is_configured(settings):
        if await brevo.deliver(email, settings):
            return True
        logger.error("Brevo fallback also failed for %s", email.to_email)
        return False

    logger.error("No email provider could deliver to %s", email.to_email)
    return False


async def send_verify_email(
    username: str, to_email: str, verify_url: str, settings: Settings
) -> None:
    if not has_provider(settings):
        logger.info("Verification email for %s (%s): %s", username, to_email, verify_url)
        return
    await deliver(verify_email(username, to_email, verify_url), settings)


async def send_new_password_email(
    username: str, to_email: str, reset_url: str, settings: Settings
) -> None:
    if not has_provider(settings):
        logger.info("Reset password email for %s (%s): %s", username, to_email, reset_url)
        return
    await deliver(new_password_email(username, to_email, reset_url), settings)


class BackgroundMailer:
    """AccountMailer that schedules delivery to run after the response is sent."""

    def __init__(self, background_tasks: BackgroundTasks, settings: Settings) -> None:
        self._tasks = background_tasks
        self._settings = settings

    async def send_verify_email(self, username: str, email: str, verify_url: str) -> None:
        self._tasks.add_task(send_verify_email, username, email, verify_url, self._settings)

    async def send_new_password_email(self, username: str, email: str, reset_url: str) -> None:
        self._tasks.add_task(send_new_password_email, username, email, reset_url, self._settings)
