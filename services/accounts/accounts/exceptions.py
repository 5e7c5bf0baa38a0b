"""
Account service: domain-specific HTTP exceptions.

All exceptions use preset status codes and detail messages so that callers
never need to specify these at the call site.  They fall into four families:

  - AccountValidationError  bad input shape; specific, recoverable message
  - AuthFailure             bad credentials or key; deliberately generic message
  - ConflictError           duplicate username; names the username
  - ConfigurationDenied     feature switched off; looks like a plain 404
"""
from fastapi import HTTPException, status

from accounts.auth.constants import AccountMsg, username_exists_message


# ── Families ──────────────────────────────────────────────────────────────────

class AccountValidationError(HTTPException):
    def __init__(
        self,
        detail: str,
        status_code: int = 422,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail)


class AuthFailure(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class ConflictError(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ConfigurationDenied(HTTPException):
    code = "not_found"

    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")


# ── Validation ────────────────────────────────────────────────────────────────

class InvalidUsername(AccountValidationError):
    """Username fails the allowed-character policy."""

    def __init__(self) -> None:
        super().__init__(AccountMsg.INVALID_USERNAME.value)


class PasswordMismatch(AccountValidationError):
    def __init__(self) -> None:
        super().__init__(AccountMsg.PASSWORD_MISMATCH.value)


class UnknownUsername(AccountValidationError):
    """No account for the submitted username (reset request, resend)."""

    def __init__(self) -> None:
        super().__init__(
            AccountMsg.INVALID_USERNAME.value,
            status_code=status.HTTP_400_BAD_REQUEST,
        )


# ── Authentication ────────────────────────────────────────────────────────────

class InvalidCredentials(AuthFailure):
    """Same message for unknown user and wrong password (no enumeration)."""

    def __init__(self) -> None:
        super().__init__(AccountMsg.INVALID_USER_OR_PWD.value)


class InvalidKey(AuthFailure):
    """Verification or reset key is absent, consumed, replaced or simply wrong."""

    def __init__(self) -> None:
        super().__init__(AccountMsg.INVALID_KEY.value)


# ── Conflict ──────────────────────────────────────────────────────────────────

class UsernameAlreadyExists(ConflictError):
    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(username_exists_message(username))


class EmailAlreadyVerified(ConflictError):
    """Resend requested for an account that needs no verification."""

    def __init__(self) -> None:
        super().__init__("This email address has already been verified.")


# ── Configuration ─────────────────────────────────────────────────────────────

class PasswordResetDisabled(ConfigurationDenied):
    pass
