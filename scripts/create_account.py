#!/usr/bin/env python3
"""
Create a pre-verified account, e.g. the first operator login of a fresh install.

Reads credentials from .env:
    ACCOUNT_USERNAME: username (required, letters and digits only)
    ACCOUNT_EMAIL: email address (required)
    ACCOUNT_PASSWORD: password (required)

Usage:
    python -m scripts.create_account
"""
from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

# Add backend root to path so imports resolve
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "services" / "accounts"))
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "shared"))

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from sqlalchemy.ext.asyncio import AsyncSession

from accounts.auth.models import Account
from accounts.auth.policy import is_alphanumeric, password_context
from accounts.auth.store import SqlAccountStore
from accounts.auth.utils import hash_password
from accounts.config import Settings
from shared.database.postgres import get_async_engine, session_factory_for


async def ensure_verified_account(
    session: AsyncSession,
    settings: Settings,
    username: str,
    email: str,
    password: str,
) -> tuple[Account, bool]:
    """Create the account verified, or verify an existing one. Returns (account, created)."""
    store = SqlAccountStore(session)
    existing = await store.load_user(username)
    if existing is not None:
        if not existing.email_verified:
            await store.mark_verified(existing)
            await session.commit()
        return existing, False

    # Same work factor the running service hashes with
    hashed = hash_password(password, password_context(settings))
    account = await store.create_user(username, email, verify_token="", password_hash=hashed)
    await store.mark_verified(account)
    await session.commit()
    return account, True


async def main() -> None:
    username = os.getenv("ACCOUNT_USERNAME", "")
    email = os.getenv("ACCOUNT_EMAIL", "")
    password = os.getenv("ACCOUNT_PASSWORD", "")
    if not username or not email or not password:
        print("Error: ACCOUNT_USERNAME, ACCOUNT_EMAIL and ACCOUNT_PASSWORD must be set in .env")
        sys.exit(1)
    if not is_alphanumeric(username):
        print(f"Error: invalid username {username!r} (letters and digits only)")
        sys.exit(1)

    settings = Settings()
    engine = get_async_engine(
        settings.accounts_database_url,
        ssl_mode=settings.database_ssl,
        ssl_cert=settings.database_ssl_cert,
    )
    session_factory = session_factory_for(engine)

    async with session_factory() as session:
        account, created = await ensure_verified_account(session, settings, username, email, password)
    if created:
        print(f"Account created: {username} <{email}> (id={account.id})")
    else:
        print(f"Account {username} already exists (id={account.id}); it is verified.")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
