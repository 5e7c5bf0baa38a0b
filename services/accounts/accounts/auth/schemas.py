"""
Account service: Pydantic V2 request/response schemas for the account plugin.

Separation of concerns:
  - *Request  models:  input from the client (strict extra="forbid")
  - *Response models:  output to the client (never a hash or a key, except
    the reset key echoed back to the new-password form it came from)

Passwords are never whitespace-stripped.
"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ── Shared base ───────────────────────────────────────────────────────────────

class _Base(BaseModel):
    model_config = ConfigDict(extra="forbid")


# ── Login ─────────────────────────────────────────────────────────────────────

class LoginRequest(_Base):
    """Body for POST /auth/account/login."""

    username: str = Field(max_length=100)
    password: str = Field(max_length=128)


class LoginResponse(BaseModel):
    """
    Either a session (status "authenticated") or the unverified-email outcome.

    For "email_unverified" no token is issued; the username is what the
    client posts back to /resendverifyemail.
    """

    model_config = ConfigDict(extra="forbid")

    status: Literal["authenticated", "email_unverified"]
    username: str
    message: str | None = None
    access_token: str | None = None
    token_type: str | None = None
    expires_in: int | None = None


# ── New account ───────────────────────────────────────────────────────────────

class NewAccountRequest(_Base):
    """Body for POST /auth/account/newaccount."""

    username: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password1: str = Field(min_length=8, max_length=128)
    password2: str = Field(max_length=128)


class NewAccountResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    username: str
    email: str
    message: str


class UsernameRequest(_Base):
    """Body for POST /resendverifyemail and POST /resetpassword."""

    username: str = Field(min_length=1, max_length=100)


# ── Password reset ────────────────────────────────────────────────────────────

class NewPasswordFormResponse(BaseModel):
    """Hidden values for the new-password form shown after a valid reset link."""

    model_config = ConfigDict(extra="forbid")

    username: str
    key: str


class NewPasswordRequest(_Base):
    """Body for POST /auth/account/setpassword."""

    username: str = Field(min_length=1, max_length=100)
    key: str = Field(min_length=1, max_length=64)
    password1: str = Field(min_length=8, max_length=128)
    password2: str = Field(max_length=128)


# ── Response models ───────────────────────────────────────────────────────────

class SessionResponse(BaseModel):
    """Returned when a flow ends logged in (verification, password reset)."""

    model_config = ConfigDict(extra="forbid")

    username: str
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # access token lifetime in seconds
    message: str | None = None


class AccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    username: str
    email: str
    email_verified: bool


class MessageResponse(BaseModel):
    """Generic single-message response for informational endpoints."""

    model_config = ConfigDict(extra="forbid")

    message: str
