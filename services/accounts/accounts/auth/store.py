"""
Account service: persistence contract for the credential store.

The flows in service.py only ever talk to an AccountStore.  Every method
touches exactly one account and each mutation is a single-row update, so the
flows need no locking of their own:

  - create_user is atomic: concurrent creates of one username give exactly
    one success, every other caller sees UsernameAlreadyExists
  - mark_verified sets email_verified and clears email_verify_token together
  - set_password replaces password_hash and clears reset_token together
  - set_verify_token / set_reset_token overwrite, so the last write wins

All calls run inside the caller's transaction (the request-scoped session).
"""
from __future__ import annotations

import logging
import uuid
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from accounts.auth.models import Account
from accounts.exceptions import UsernameAlreadyExists

logger = logging.getLogger(__name__)


class AccountStore(Protocol):
    async def load_user(self, username: str) -> Account | None: ...

    async def create_user(
        self, username: str, email: str, verify_token: str, password_hash: str
    ) -> Account: ...

    async def mark_verified(self, account: Account) -> None: ...

    async def set_verify_token(self, account: Account, token: str) -> None: ...

    async def set_reset_token(self, account: Account, token: str) -> None: ...

    async def set_password(self, account: Account, password_hash: str) -> None: ...


def _new_account(
    username: str, email: str, verify_token: str, password_hash: str
) -> Account:
    # Reset token starts empty; nothing is pending until a reset is requested
    return Account(
        id=uuid.uuid4(),
        username=username,
        email=email,
        password_hash=password_hash,
        email_verified=False,
        email_verify_token=verify_token,
        reset_token="",
    )


# ── SQLAlchemy ────────────────────────────────────────────────────────────────

class SqlAccountStore:
    """AccountStore over an async SQLAlchemy session (flush, never commit)."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def load_user(self, username: str) -> Account | None:
        result = await self._session.execute(
            select(Account).where(Account.username == username)
        )
        return result.scalar_one_or_none()

    async def create_user(
        self, username: str, email: str, verify_token: str, password_hash: str
    ) -> Account:
        account = _new_account(username, email, verify_token, password_hash)
        # SAVEPOINT so a lost race leaves the surrounding transaction usable
        try:
            async with self._session.begin_nested():
                self._session.add(account)
        except IntegrityError as exc:
            logger.info("Duplicate username rejected by the database: %s", username)
            raise UsernameAlreadyExists(username) from exc
        return account

    async def mark_verified(self, account: Account) -> None:
        account.email_verified = True
        account.email_verify_token = ""
        await self._session.flush()

    async def set_verify_token(self, account: Account, token: str) -> None:
        account.email_verify_token = token
        await self._session.flush()

    async def set_reset_token(self, account: Account, token: str) -> None:
        account.reset_token = token
        await self._session.flush()

    async def set_password(self, account: Account, password_hash: str) -> None:
        account.password_hash = password_hash
        account.reset_token = ""
        await self._session.flush()


# ── In-process ────────────────────────────────────────────────────────────────

class InMemoryAccountStore:
    """
    AccountStore backed by a dict.

    Test double for the SQL store; nothing outside the test-suite wires it in.
    No await happens between the duplicate check and the insert, so
    create_user is atomic on a single event loop.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}

    def __len__(self) -> int:
        return len(self._accounts)

    async def load_user(self, username: str) -> Account | None:
        return self._accounts.get(username)

    async def create_user(
        self, username: str, email: str, verify_token: str, password_hash: str
    ) -> Account:
        if username in self._accounts:
            raise UsernameAlreadyExists(username)
        account = _new_account(username, email, verify_token, password_hash)
        self._accounts[username] = account
        return account

    async def mark_verified(self, account: Account) -> None:
        account.email_verified = True
        account.email_verify_token = ""

    async def set_verify_token(self, account: Account, token: str) -> None:
        account.email_verify_token = token

    async def set_reset_token(self, account: Account, token: str) -> None:
        account.reset_token = token

    async def set_password(self, account: Account, password_hash: str) -> None:
        account.password_hash = password_hash
        account.reset_token = ""
