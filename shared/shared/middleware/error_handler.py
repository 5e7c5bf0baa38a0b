import logging
import re
from collections.abc import Awaitable, Callable
from http import HTTPStatus

from fastapi import Request, status
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def error_code(exc: StarletteHTTPException) -> str:
    """
    Machine-readable code for an HTTP exception.

    An explicit ``code`` class attribute wins; plain HTTPExceptions use the status
    phrase (``not_found``); everything else is the snake_cased class name
    (``InvalidKey`` → ``invalid_key``).
    """
    explicit = getattr(type(exc), "code", None)
    if isinstance(explicit, str):
        return explicit
    if type(exc).__name__ == "HTTPException":
        try:
            return HTTPStatus(exc.status_code).phrase.lower().replace(" ", "_").replace("-", "_")
        except ValueError:
            return "http_error"
    return _CAMEL_BOUNDARY.sub("_", type(exc).__name__).lower()


def _envelope(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": error_code(exc),
                "message": exc.detail if isinstance(exc.detail, str) else str(exc.detail),
            },
            "request_id": getattr(request.state, "request_id", None),
        },
        headers=getattr(exc, "headers", None),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Registered on the app so route and dependency errors share the envelope."""
    return _envelope(request, exc)


async def error_envelope_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    try:
        return await call_next(request)
    except StarletteHTTPException as exc:
        return _envelope(request, exc)
    except Exception:
        logger.exception("Unhandled exception")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {"code": "internal_error", "message": "An unexpected error occurred"},
                "request_id": getattr(request.state, "request_id", None),
            },
        )
