"""Explicit results of the flows; the host turns AuthenticatedAs into a session."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthenticatedAs:
    username: str


@dataclass(frozen=True)
class NeedsVerification:
    """Correct password, but the email address has not been verified yet."""

    username: str


LoginOutcome = AuthenticatedAs | NeedsVerification
