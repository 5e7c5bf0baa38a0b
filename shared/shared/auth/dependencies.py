import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shared.auth.config import AuthSettings
from shared.auth.tokens import InvalidSessionToken, read_session_token
from shared.models.account import CurrentAccount

logger = logging.getLogger(__name__)

http_bearer = HTTPBearer(auto_error=False)


def get_auth_settings() -> AuthSettings:
    return AuthSettings()


async def get_current_account_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    settings: AuthSettings = Depends(get_auth_settings),
) -> CurrentAccount | None:
    """The account behind the bearer token, or None for a missing or unusable token."""
    if not credentials or not credentials.credentials:
        return None
    try:
        return read_session_token(credentials.credentials, settings)
    except InvalidSessionToken as exc:
        logger.info("Rejected session token: %s", exc)
        return None


async def get_current_account_required(
    account: CurrentAccount | None = Depends(get_current_account_optional),
) -> CurrentAccount:
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return account
