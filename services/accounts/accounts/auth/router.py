"""
Account service: account plugin router (the dispatcher).

Only HTTP concerns live here:
  - Route declarations, HTTP methods, status codes, response_model
  - Dependency injection (store, policy, settings, current account)
  - Forwarding to the controller

Routing table (under /auth/account):

    POST  /login                       login
    POST  /newaccount                  create account, email verify link
    GET   /verify/{username}/{key}     redeem verify key, log in
    POST  /resendverifyemail           new verify key, email it again
    POST  /resetpassword               new reset key, email new-password link
    GET   /newpassword/{username}/{key}  check reset key, return form values
    POST  /setpassword                 set new password, log in
    GET   /me                          account behind the bearer token

Anything else is a 404.  Zero business logic.
"""
from fastapi import APIRouter, Depends, Request, status

from accounts.auth import controller
from accounts.auth.constants import PLUGIN_PREFIX
from accounts.auth.dependencies import (
    get_account_policy,
    get_account_store,
    get_current_account,
    get_settings,
)
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
from accounts.rate_limit import limiter
from shared.models.account import CurrentAccount

router = APIRouter(prefix=PLUGIN_PREFIX, tags=["account"])


# ── Login ─────────────────────────────────────────────────────────────────────

@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login with username + password",
)
@limiter.limit("10/minute")
async def login(
    request: Request,
    body: LoginRequest,
    store: AccountStore = Depends(get_account_store),
    policy: AccountPolicy = Depends(get_account_policy),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    return await controller.login(store, policy, body, settings)


# ── New account + verification ────────────────────────────────────────────────

@router.post(
    "/newaccount",
    response_model=NewAccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account and send the verification email",
)
@limiter.limit("5/hour")
async def new_account(
    request: Request,
    body: NewAccountRequest,
    store: AccountStore = Depends(get_account_store),
    policy: AccountPolicy = Depends(get_account_policy),
) -> NewAccountResponse:
    return await controller.new_account(store, policy, body)


@router.get(
    "/verify/{username}/{key}",
    response_model=SessionResponse,
    summary="Redeem the emailed verification link (logs the user in)",
)
async def verify(
    username: str,
    key: str,
    store: AccountStore = Depends(get_account_store),
    settings: Settings = Depends(get_settings),
) -> SessionResponse:
    return await controller.verify(store, username, key, settings)


@router.post(
    "/resendverifyemail",
    response_model=MessageResponse,
    summary="Issue a new verification key and resend the email",
)
@limiter.limit("5/hour")
async def resend_verify_email(
    request: Request,
    body: UsernameRequest,
    store: AccountStore = Depends(get_account_store),
    policy: AccountPolicy = Depends(get_account_policy),
) -> MessageResponse:
    return await controller.resend_verify_email(store, policy, body)


# ── Password reset ────────────────────────────────────────────────────────────

@router.post(
    "/resetpassword",
    response_model=MessageResponse,
    summary="Email a new-password link for the username",
)
@limiter.limit("5/hour")
async def reset_password(
    request: Request,
    body: UsernameRequest,
    store: AccountStore = Depends(get_account_store),
    policy: AccountPolicy = Depends(get_account_policy),
) -> MessageResponse:
    return await controller.reset_password(store, policy, body)


@router.get(
    "/newpassword/{username}/{key}",
    response_model=NewPasswordFormResponse,
    summary="Check the emailed reset link and return the new-password form values",
)
async def new_password(
    username: str,
    key: str,
    store: AccountStore = Depends(get_account_store),
    policy: AccountPolicy = Depends(get_account_policy),
) -> NewPasswordFormResponse:
    return await controller.new_password_form(store, policy, username, key)


@router.post(
    "/setpassword",
    response_model=SessionResponse,
    summary="Set a new password with a reset key (logs the user in)",
)
async def set_password(
    body: NewPasswordRequest,
    store: AccountStore = Depends(get_account_store),
    policy: AccountPolicy = Depends(get_account_policy),
    settings: Settings = Depends(get_settings),
) -> SessionResponse:
    return await controller.set_password(store, policy, body, settings)


# ── Current account ───────────────────────────────────────────────────────────

@router.get(
    "/me",
    response_model=AccountResponse,
    summary="Return the account behind the bearer token",
)
async def me(
    current: CurrentAccount = Depends(get_current_account),
    store: AccountStore = Depends(get_account_store),
) -> AccountResponse:
    return await controller.me(store, current)
