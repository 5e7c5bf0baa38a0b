"""
Brevo (Sendinblue) transactional email over its REST API (fallback provider).

Returns True on success, False on any failure; never raises.
"""
from __future__ import annotations

import logging

import httpx

from accounts.config import Settings
from accounts.email.message import OutgoingEmail

logger = logging.getLogger(__name__)

BREVO_URL = "https://api.brevo.com/v3/smtp/email"


def is_configured(settings: Settings) -> bool:
    return bool(settings.brevo_api_key)


def payload(email: OutgoingEmail, settings: Settings) -> dict:
    return {
        "sender": {"email": settings.brevo_from_email, "name": settings.brevo_from_name},
        "to": [{"email": email.to_email, "name": email.to_name}],
        "subject": email.subject,
        "htmlContent": email.html,
        "textContent": email.text,
    }


async def deliver(email: OutgoingEmail, settings: Settings) -> bool:
    if not is_configured(settings):
        return False
    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.post(
                BREVO_URL,
                json=payload(email, settings),
                headers={"api-key": settings.brevo_api_key, "accept": "application/json"},
            )
    except httpx.HTTPError as exc:
        logger.error("Brevo request for %s failed: %s", email.to_email, exc)
        return False
    if response.is_error:
        logger.error("Brevo rejected email to %s (%s): %s", email.to_email, response.status_code, response.text[:300])
        return False
    return True
