"""
Account service: controller (request orchestration layer).

Responsibilities:
  - Receive validated input from the router.
  - Call service functions (which own the flows).
  - Turn AuthenticatedAs outcomes into a signed session assertion.
  - Compose and return the response model.

No business logic here; that belongs in service.py.
"""
from __future__ import annotations

from accounts.auth import service
from accounts.auth.constants import AccountMsg, confirmation_email_sent_message
from accounts.auth.outcomes import AuthenticatedAs, NeedsVerification
from accounts.auth.policy import AccountPolicy
from accounts.auth.schemas import (
    AccountResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    NewAccountRequest,
    NewAccountResponse,
    NewPasswordFormResponse,
    NewPasswordRequest,
    SessionResponse,
    UsernameRequest,
)
from accounts.auth.store import AccountStore
from accounts.config import Settings
from accounts.exceptions import InvalidCredentials, PasswordMismatch
from shared.auth.tokens import issue_session_token
from shared.models.account import CurrentAccount


# ── Session assertion ─────────────────────────────────────────────────────────

def _session(
    outcome: AuthenticatedAs, settings: Settings, message: str | None = None
) -> SessionResponse:
    return SessionResponse(
        username=outcome.username,
        access_token=issue_session_token(outcome.username, settings.auth_settings()),
        expires_in=settings.jwt_expire_seconds,
        message=message,
    )


# ── Login ─────────────────────────────────────────────────────────────────────

async def login(
    store: AccountStore,
    policy: AccountPolicy,
    body: LoginRequest,
    settings: Settings,
) -> LoginResponse:
    outcome = await service.authenticate(store, policy, body.username, body.password)
    if isinstance(outcome, NeedsVerification):
        return LoginResponse(
            status="email_unverified",
            username=outcome.username,
            message=AccountMsg.EMAIL_UNVERIFIED.value,
        )
    return LoginResponse(
        status="authenticated",
        username=outcome.username,
        access_token=issue_session_token(outcome.username, settings.auth_settings()),
        token_type="bearer",
        expires_in=settings.jwt_expire_seconds,
    )


# ── New account ───────────────────────────────────────────────────────────────

async def new_account(
    store: AccountStore,
    policy: AccountPolicy,
    body: NewAccountRequest,
) -> NewAccountResponse:
    if body.password1 != body.password2:
        raise PasswordMismatch()
    account = await service.create_account(
        store,
        policy,
        username=body.username,
        email=body.email,
        password=body.password1,
    )
    return NewAccountResponse(
        username=account.username,
        email=account.email,
        message=confirmation_email_sent_message(account.email),
    )


async def verify(
    store: AccountStore,
    username: str,
    key: str,
    settings: Settings,
) -> SessionResponse:
    outcome = await service.verify_account(store, username, key)
    return _session(outcome, settings, AccountMsg.EMAIL_VERIFIED.value)


async def resend_verify_email(
    store: AccountStore,
    policy: AccountPolicy,
    body: UsernameRequest,
) -> MessageResponse:
    account = await service.resend_verify_email(store, policy, body.username)
    return MessageResponse(message=confirmation_email_sent_message(account.email))


# ── Password reset ────────────────────────────────────────────────────────────

async def reset_password(
    store: AccountStore,
    policy: AccountPolicy,
    body: UsernameRequest,
) -> MessageResponse:
    await service.request_password_reset(store, policy, body.username)
    # Never echo the email address: anybody can request a reset for any username
    return MessageResponse(message=AccountMsg.RESET_PWD_EMAIL_SENT.value)


async def new_password_form(
    store: AccountStore,
    policy: AccountPolicy,
    username: str,
    key: str,
) -> NewPasswordFormResponse:
    account = await service.check_reset_key(store, policy, username, key)
    return NewPasswordFormResponse(username=account.username, key=key)


async def set_password(
    store: AccountStore,
    policy: AccountPolicy,
    body: NewPasswordRequest,
    settings: Settings,
) -> SessionResponse:
    outcome = await service.set_new_password(
        store,
        policy,
        username=body.username,
        key=body.key,
        password1=body.password1,
        password2=body.password2,
    )
    return _session(outcome, settings, AccountMsg.PASSWORD_UPDATED.value)


# ── Current account ───────────────────────────────────────────────────────────

async def me(store: AccountStore, current: CurrentAccount) -> AccountResponse:
    account = await store.load_user(current.username)
    if account is None:
        raise InvalidCredentials()
    return AccountResponse.model_validate(account)
