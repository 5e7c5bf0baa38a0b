import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from accounts.auth.constants import API_PREFIX
from accounts.auth.dependencies import get_settings
from accounts.auth.router import router as account_router
from accounts.config import Settings
from accounts.database import dispose_db, init_db
from accounts.rate_limit import limiter
from shared.middleware.error_handler import error_envelope_middleware, http_exception_handler
from shared.middleware.request_id import RequestIdLogFilter, request_id_middleware


# ── OpenAPI metadata ──────────────────────────────────────────────────────────

_DESCRIPTION = """
## Accounts Service

Username/password accounts with email verification and password reset:

* **Login**: username + password. Unverified accounts get an `email_unverified`
  outcome instead of a session.
* **Registration**: creates an unverified account and emails a verification link.
* **Email verification**: the emailed link logs the user in; the key is single use.
  The link can be re-sent, which invalidates the previous one.
* **Password reset**: emails a new-password link; setting the new password logs the
  user in. Can be switched off entirely (`ALLOW_PASSWORD_RESET=false`).

### Authentication
Successful flows return a signed session assertion. Send it as:
```
Authorization: Bearer <access_token>
```

### Error shape
Errors return a consistent JSON envelope:
```json
{ "error": { "code": "invalid_key", "message": "Human-readable message" }, "request_id": "..." }
```
Validation errors (`422`) return the standard Pydantic error list under `detail`.

### Rate limits
`429 Too Many Requests` is returned when a per-IP rate limit is exceeded.
"""

_TAGS_METADATA = [
    {
        "name": "account",
        "description": (
            "Login, registration, email verification (and resend), "
            "password reset, and the current account."
        ),
    },
]

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"


# ── Health schema ─────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    service: str


# ── App factory ───────────────────────────────────────────────────────────────

def configure_logging(settings: Settings) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    handler.addFilter(RequestIdLogFilter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.log_level.upper())


def _install_error_handlers(app: FastAPI) -> None:
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)


def _install_middleware(app: FastAPI, settings: Settings) -> None:
    # Registration order is innermost first: CORS ends up outermost so 429s carry CORS headers
    app.add_middleware(SlowAPIMiddleware)
    app.middleware("http")(request_id_middleware)
    app.middleware("http")(error_envelope_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        max_age=600,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(get_settings())
    yield
    await dispose_db()


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)
    app = FastAPI(
        title="Accounts Service",
        version="1.0.0",
        description=_DESCRIPTION,
        openapi_tags=_TAGS_METADATA,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    _install_error_handlers(app)
    _install_middleware(app, settings)
    app.include_router(account_router, prefix=API_PREFIX)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="accounts")

    return app


app = create_app()
