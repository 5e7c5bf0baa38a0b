import enum

# ── Secret primitives ─────────────────────────────────────────────────────────
PASSWORD_HASH_ROUNDS: int = 2           # argon2 time cost, keeps hashing in the tens of ms
PASSWORD_HASH_MEMORY_COST: int = 512    # KiB
TOKEN_BYTES: int = 32                   # 256 bits → 43 URL-safe characters

# ── Routing ───────────────────────────────────────────────────────────────────
API_PREFIX: str = "/api/v1"
PLUGIN_PREFIX: str = "/auth/account"


# ── Symbolic outcomes (rendered by the presentation layer) ───────────────────
class AccountMsg(str, enum.Enum):
    INVALID_USERNAME = "Invalid username."
    INVALID_USER_OR_PWD = "Invalid username or password."
    RESET_PWD_EMAIL_SENT = "A password reset email has been sent to your email address."
    EMAIL_VERIFIED = "Your email has been verified."
    EMAIL_UNVERIFIED = "Your email has not yet been verified."
    PASSWORD_UPDATED = "Your password has been updated."
    PASSWORD_MISMATCH = "Passwords did not match, please try again."
    INVALID_KEY = "I'm sorry, but that was an invalid verification key."


def username_exists_message(username: str) -> str:
    return f"The username {username} already exists.  Please choose an alternate username."


def confirmation_email_sent_message(email: str) -> str:
    return f"A confirmation e-mail has been sent to {email}."
