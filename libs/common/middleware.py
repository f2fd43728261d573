"""Request logging for the activation API.

Each request gets a request id (taken from ``X-Request-ID`` or generated)
that is attached to every log line written while it is handled and echoed
back on the response.
"""
import logging
import time

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

UNLOGGED_PATHS = frozenset({"/health"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get("X-Request-ID"),
            path=request.url.path,
            method=request.method,
        )
        started = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            if request.url.path not in UNLOGGED_PATHS:
                _log_completed(request, response.status_code, started)
            return response
        finally:
            clear_request_context()


def _log_completed(request: Request, status_code: int, started: float) -> None:
    # request.state.user is set once the bearer token has been verified
    user = getattr(request.state, "user", None)
    logger.log(
        logging.WARNING if status_code >= 400 else logging.INFO,
        "Request completed",
        extra={
            "extra_fields": {
                "status_code": status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                "user_id": user.user_id if user else None,
            }
        },
    )


def add_observability_middleware(app: FastAPI) -> None:
    """Configure logging and install the request context middleware."""
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
