"""
Account service: pure business logic for the account flows.

Rules:
  - Zero FastAPI imports (exceptions excepted).
  - Zero direct DB access, only the AccountStore passed in.
  - All I/O functions are async def.
  - Username policy and password confirmation are checked before the store
    is touched.
  - Failures raise the exceptions in accounts.exceptions; successes return an
    explicit outcome (AuthenticatedAs / NeedsVerification) or the Account.
"""
from __future__ import annotations

import logging

from accounts.auth.models import Account
from accounts.auth.outcomes import AuthenticatedAs, LoginOutcome, NeedsVerification
from accounts.auth.policy import AccountPolicy
from accounts.auth.store import AccountStore
from accounts.auth.utils import hash_password, new_token, tokens_match, verify_password
from accounts.exceptions import (
    EmailAlreadyVerified,
    InvalidCredentials,
    InvalidKey,
    InvalidUsername,
    PasswordMismatch,
    PasswordResetDisabled,
    UnknownUsername,
    UsernameAlreadyExists,
)

logger = logging.getLogger(__name__)


# ── Login ─────────────────────────────────────────────────────────────────────

async def authenticate(
    store: AccountStore,
    policy: AccountPolicy,
    username: str,
    password: str,
) -> LoginOutcome:
    """
    Check credentials.

    Unknown user, wrong password and a username the policy would never have
    accepted all raise the same InvalidCredentials.  A correct password on an
    unverified account returns NeedsVerification and establishes nothing.
    """
    if not policy.check_valid_username(username):
        raise InvalidCredentials()

    account = await store.load_user(username)
    if account is None or not verify_password(
        password, account.password_hash, policy.crypt_context
    ):
        logger.warning("Failed login for %s", username)
        raise InvalidCredentials()

    if not account.email_verified:
        return NeedsVerification(username=account.username)
    return AuthenticatedAs(username=account.username)


# ── Registration + email verification ────────────────────────────────────────

async def create_account(
    store: AccountStore,
    policy: AccountPolicy,
    *,
    username: str,
    email: str,
    password: str,
) -> Account:
    """
    Create an unverified account and send the verification email.

    Guard clauses run first: the username policy (no store access), then a
    cheap existence check so a taken name costs no hashing.  The store's own
    atomic duplicate check still decides any race.
    """
    if not policy.check_valid_username(username):
        raise InvalidUsername()

    if await store.load_user(username) is not None:
        raise UsernameAlreadyExists(username)

    key = new_token()
    hashed = hash_password(password, policy.crypt_context)
    account = await store.create_user(username, email, key, hashed)
    logger.info("Account created: %s", username)

    await policy.mailer.send_verify_email(
        account.username, account.email, policy.links.verify_url(account.username, key)
    )
    return account


async def verify_account(
    store: AccountStore,
    username: str,
    key: str,
) -> AuthenticatedAs:
    """Redeem a verification key; success doubles as the first login."""
    account = await store.load_user(username)
    if (
        account is None
        or account.email_verified
        or not tokens_match(account.email_verify_token, key)
    ):
        logger.warning("Invalid verification key for %s", username)
        raise InvalidKey()

    await store.mark_verified(account)
    logger.info("Email verified: %s", username)
    return AuthenticatedAs(username=account.username)


async def resend_verify_email(
    store: AccountStore,
    policy: AccountPolicy,
    username: str,
) -> Account:
    """
    Issue a fresh verification key and email it again.

    The username comes from the NeedsVerification login outcome, so the
    password was already proven.  The new key overwrites the old one, which
    stops working immediately.
    """
    account = await store.load_user(username)
    if account is None:
        raise UnknownUsername()
    if account.email_verified:
        raise EmailAlreadyVerified()

    key = new_token()
    await store.set_verify_token(account, key)
    await policy.mailer.send_verify_email(
        account.username, account.email, policy.links.verify_url(account.username, key)
    )
    return account


# ── Password reset ────────────────────────────────────────────────────────────

def _require_reset_allowed(policy: AccountPolicy) -> None:
    if not policy.allow_password_reset:
        raise PasswordResetDisabled()


async def request_password_reset(
    store: AccountStore,
    policy: AccountPolicy,
    username: str,
) -> None:
    """
    Store a new reset key and email the new-password link.

    An unknown username raises UnknownUsername unless the policy conceals it,
    in which case the call returns as if an email had gone out.  A newer
    request replaces any key still outstanding.
    """
    _require_reset_allowed(policy)

    account = await store.load_user(username)
    if account is None:
        if policy.conceal_unknown_reset_username:
            return
        raise UnknownUsername()

    key = new_token()
    await store.set_reset_token(account, key)
    logger.info("Password reset requested: %s", username)
    await policy.mailer.send_new_password_email(
        account.username, account.email, policy.links.new_password_url(account.username, key)
    )


async def check_reset_key(
    store: AccountStore,
    policy: AccountPolicy,
    username: str,
    key: str,
) -> Account:
    """Return the account if (username, key) may set a new password."""
    _require_reset_allowed(policy)

    account = await store.load_user(username)
    if account is None or not tokens_match(account.reset_token, key):
        logger.warning("Invalid reset key for %s", username)
        raise InvalidKey()
    return account


async def set_new_password(
    store: AccountStore,
    policy: AccountPolicy,
    *,
    username: str,
    key: str,
    password1: str,
    password2: str,
) -> AuthenticatedAs:
    """
    Complete a reset and log the user in.

    The passwords are compared before any store access.  The key is then
    re-checked exactly like check_reset_key because username and key arrive
    as hidden form values.  set_password clears the key, so it works once.
    """
    _require_reset_allowed(policy)
    if password1 != password2:
        raise PasswordMismatch()

    account = await check_reset_key(store, policy, username, key)
    hashed = hash_password(password1, policy.crypt_context)
    await store.set_password(account, hashed)
    logger.info("Password updated via reset: %s", username)
    return AuthenticatedAs(username=account.username)
