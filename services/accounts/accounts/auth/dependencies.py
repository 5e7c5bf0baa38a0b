"""
Account service: FastAPI dependencies for the account plugin.

Everything a route needs (settings, store, policy, current account) is
resolved here so tests can swap any of them via app.dependency_overrides.
"""
from __future__ import annotations

from functools import lru_cache

from fastapi import BackgroundTasks, Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from accounts.auth.policy import AccountMailer, AccountPolicy
from accounts.auth.store import AccountStore, SqlAccountStore
from accounts.config import Settings
from accounts.database import get_db
from accounts.email.send import BackgroundMailer
from shared.auth.config import AuthSettings
from shared.auth.dependencies import (
    get_current_account_optional,
    get_current_account_required,
    http_bearer,
)
from shared.models.account import CurrentAccount


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_account_store(session: AsyncSession = Depends(get_db)) -> AccountStore:
    return SqlAccountStore(session)


def get_mailer(
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
) -> AccountMailer:
    return BackgroundMailer(background_tasks, settings)


def get_account_policy(
    mailer: AccountMailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
) -> AccountPolicy:
    return AccountPolicy.from_settings(settings, mailer)


def get_session_settings(settings: Settings = Depends(get_settings)) -> AuthSettings:
    return settings.auth_settings()


async def get_current_account(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    auth: AuthSettings = Depends(get_session_settings),
) -> CurrentAccount:
    # Checked with the same parameters this service signs with
    account = await get_current_account_optional(credentials, auth)
    return await get_current_account_required(account)
