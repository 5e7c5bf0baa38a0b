"""The two account emails, rendered once and handed to whichever provider delivers them."""
from __future__ import annotations

from dataclasses import dataclass
from html import escape


@dataclass(frozen=True)
class OutgoingEmail:
    to_email: str
    to_name: str
    subject: str
    text: str
    html: str


def _button(url: str, label: str) -> str:
    return (
        f"<p style='text-align:center;margin:32px 0'>"
        f"<a href='{escape(url, quote=True)}' "
        f"style='background:#2563eb;color:#fff;padding:14px 28px;border-radius:6px;"
        f"text-decoration:none;font-weight:bold'>{label}</a></p>"
        "<p>Or copy and paste this link into your browser:</p>"
        f"<p style='word-break:break-all;color:#6b7280'>{escape(url)}</p>"
    )


def _footer(note: str) -> str:
    return f"<p style='color:#6b7280;font-size:13px;margin-top:32px'>{note}</p>"


def verify_email(username: str, to_email: str, verify_url: str) -> OutgoingEmail:
    return OutgoingEmail(
        to_email=to_email,
        to_name=username,
        subject="Verify your email address",
        text=(
            f"Hi {username},\n\n"
            "Please verify your email address by opening the link below. "
            "Verifying also signs you in.\n\n"
            f"{verify_url}\n\n"
            "If you did not create an account, you can safely ignore this email.\n"
        ),
        html=(
            f"<p>Hi {escape(username)},</p>"
            "<p>Please verify your email address by clicking the button below. "
            "Verifying also signs you in.</p>"
            f"{_button(verify_url, 'Verify Email Address')}"
            + _footer("If you did not create an account, you can safely ignore this email.")
        ),
    )


def new_password_email(username: str, to_email: str, reset_url: str) -> OutgoingEmail:
    return OutgoingEmail(
        to_email=to_email,
        to_name=username,
        subject="Reset your password",
        text=(
            f"Hi {username},\n\n"
            "We received a request to reset the password for your account. "
            "Open the link below to choose a new one:\n\n"
            f"{reset_url}\n\n"
            "Only the most recent reset link works. If you did not request a reset, "
            "ignore this email and your password will not change.\n"
        ),
        html=(
            f"<p>Hi {escape(username)},</p>"
            "<p>We received a request to reset the password for your account.</p>"
            f"{_button(reset_url, 'Reset My Password')}"
            "<p>Only the most recent reset link works.</p>"
            + _footer(
                "If you did not request a password reset, you can safely ignore this email. "
                "Your password will not change."
            )
        ),
    )
