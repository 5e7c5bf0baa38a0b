import secrets

from passlib.context import CryptContext

from accounts.auth.constants import (
    PASSWORD_HASH_MEMORY_COST,
    PASSWORD_HASH_ROUNDS,
    TOKEN_BYTES,
)


def build_context(
    rounds: int = PASSWORD_HASH_ROUNDS,
    memory_cost: int = PASSWORD_HASH_MEMORY_COST,
) -> CryptContext:
    """Argon2 context with a fixed work factor; digests embed their own parameters."""
    return CryptContext(
        schemes=["argon2"],
        deprecated="auto",
        argon2__rounds=rounds,
        argon2__memory_cost=memory_cost,
    )


context = build_context()


def hash_password(password: str, crypt_context: CryptContext = context) -> str:
    return crypt_context.hash(password)


def verify_password(plain: str, hashed: str, crypt_context: CryptContext = context) -> bool:
    # Malformed or foreign digests count as a mismatch, never an error
    if not hashed:
        return False
    try:
        return crypt_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False


def new_token() -> str:
    """Return a fresh 256-bit URL-safe token drawn from the OS CSPRNG."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def tokens_match(stored: str, supplied: str) -> bool:
    """Compare a stored token to a supplied one; an empty stored token never matches."""
    if not stored or not supplied:
        return False
    return secrets.compare_digest(stored.encode(), supplied.encode())
