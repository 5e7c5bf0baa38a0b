"""
Session assertions: the signed bearer token a successful account flow ends with.

Claims: sub (username), iat, exp, iss, aud.  Nothing else is trusted.
"""
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from shared.auth.config import AuthSettings
from shared.models.account import CurrentAccount


class InvalidSessionToken(Exception):
    """Bad signature, wrong issuer/audience, expired, or no subject."""


def issue_session_token(username: str, settings: AuthSettings) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": username,
        "iat": now,
        "exp": now + timedelta(seconds=settings.expire_seconds),
        "iss": settings.issuer,
        "aud": settings.audience,
    }
    return jwt.encode(claims, settings.secret, algorithm=settings.algorithm)


def read_session_token(token: str, settings: AuthSettings) -> CurrentAccount:
    try:
        claims = jwt.decode(
            token,
            settings.secret,
            algorithms=[settings.algorithm],
            issuer=settings.issuer,
            audience=settings.audience,
        )
    except JWTError as exc:
        raise InvalidSessionToken(str(exc)) from exc
    username = claims.get("sub")
    if not isinstance(username, str) or not username:
        raise InvalidSessionToken("Missing sub in token")
    return CurrentAccount(username=username)
