"""
Account service: pluggable behaviour handed to every flow.

AccountPolicy replaces per-site overrides with plain fields: the username
predicate, the password hashing context (work factor), the reset switch, and
the two outbound collaborators (mailer and link builder).
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol
from urllib.parse import quote

from passlib.context import CryptContext

from accounts.auth.constants import API_PREFIX, PLUGIN_PREFIX
from accounts.auth.utils import build_context, context
from accounts.config import Settings


class AccountMailer(Protocol):
    """Outbound email collaborator.  Fire-and-forget from the flows' view."""

    async def send_verify_email(self, username: str, email: str, verify_url: str) -> None: ...

    async def send_new_password_email(self, username: str, email: str, reset_url: str) -> None: ...


class AccountLinks:
    """Turns (username, key) pairs into absolute URLs for the two emailed links."""

    def __init__(self, base_url: str, prefix: str = API_PREFIX + PLUGIN_PREFIX) -> None:
        self._root = base_url.rstrip("/") + prefix

    def _link(self, action: str, username: str, key: str) -> str:
        return f"{self._root}/{action}/{quote(username, safe='')}/{quote(key, safe='')}"

    def verify_url(self, username: str, key: str) -> str:
        return self._link("verify", username, key)

    def new_password_url(self, username: str, key: str) -> str:
        return self._link("newpassword", username, key)


def is_alphanumeric(username: str) -> bool:
    """Default username policy: non-empty, letters and digits only."""
    return bool(username) and all(c.isalnum() for c in username)


@dataclass(frozen=True)
class AccountPolicy:
    mailer: AccountMailer
    links: AccountLinks
    check_valid_username: Callable[[str], bool] = is_alphanumeric
    crypt_context: CryptContext = field(default_factory=lambda: context)
    allow_password_reset: bool = True
    conceal_unknown_reset_username: bool = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        mailer: AccountMailer,
        *,
        check_valid_username: Callable[[str], bool] = is_alphanumeric,
    ) -> AccountPolicy:
        return cls(
            mailer=mailer,
            links=AccountLinks(settings.public_base_url),
            check_valid_username=check_valid_username,
            crypt_context=password_context(settings),
            allow_password_reset=settings.allow_password_reset,
            conceal_unknown_reset_username=settings.conceal_unknown_reset_username,
        )


_contexts: dict[tuple[int, int], CryptContext] = {}


def password_context(settings: Settings) -> CryptContext:
    """The configured work factor's CryptContext, built once per process."""
    key = (settings.password_hash_rounds, settings.password_hash_memory_cost)
    if key not in _contexts:
        _contexts[key] = build_context(*key)
    return _contexts[key]
