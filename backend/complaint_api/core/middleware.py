"""
NACOS Complaint System - HTTP Middleware

Request correlation and timing, response hardening headers and a body size cap.
"""

import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from starlette.types import ASGIApp

from complaint_api.core.logging_config import (
    logger,
    clear_context,
    set_request_id,
    generate_request_id,
)


QUIET_PATHS = frozenset({"/health", "/favicon.ico", "/docs", "/redoc", "/openapi.json"})
QUIET_SUFFIXES = (".js", ".css", ".png", ".ico")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def is_quiet_path(path: str) -> bool:
    return path in QUIET_PATHS or path.endswith(QUIET_SUFFIXES)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with an ID (taken from X-Request-ID when the caller sends
    one) and log its outcome.

    The ID and elapsed time are echoed back as X-Request-ID and X-Response-Time.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)
        quiet = is_quiet_path(request.url.path)
        started = time.perf_counter()

        if not quiet:
            logger.debug(
                f"{request.method} {request.url.path} started",
                extra={
                    "event_type": "http_request_start",
                    "client_ip": request.client.host if request.client else "unknown",
                }
            )

        try:
            response = await call_next(request)
        except Exception:
            elapsed = (time.perf_counter() - started) * 1000
            logger.exception(
                f"{request.method} {request.url.path} raised after {elapsed:.2f}ms",
                extra={"event_type": "http_request_error"}
            )
            clear_context()
            raise

        elapsed = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{elapsed:.2f}ms"
        if not quiet:
            logger.log_request(request.method, request.url.path, response.status_code, elapsed)

        clear_context()
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add SECURITY_HEADERS to every response"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies whose declared Content-Length exceeds ``max_size`` with a 413"""

    def __init__(self, app: ASGIApp, max_size: int = 1024 * 1024):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_size:
            logger.warning(
                f"Rejected {declared} byte body on {request.url.path}",
                extra={"event_type": "request_too_large", "max_size": self.max_size}
            )
            return JSONResponse(
                status_code=413,
                content={
                    "success": False,
                    "message": f"Request body too large. Maximum size is {self.max_size // 1024}KB",
                }
            )
        return await call_next(request)
