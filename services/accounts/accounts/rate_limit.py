"""
Global slowapi rate limiter.

Imported by auth/router.py for per-endpoint limits.  Mounted onto app.state in
main.py so slowapi middleware can find it.

Storage defaults to in-process memory; point RATELIMIT_STORAGE_URI at Redis
when running more than one worker.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from accounts.config import Settings

_settings = Settings()

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=_settings.ratelimit_storage_uri,
    enabled=_settings.ratelimit_enabled,
)
