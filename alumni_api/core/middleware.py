"""
Alumni Network API - HTTP Middleware
Request logging with user attribution, security headers and body size limits
"""

import time
from typing import Callable, Optional, Set
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from alumni_api.core.config import settings
from alumni_api.core.logging_config import (
    logger,
    set_request_id,
    set_user_id,
    generate_request_id,
)


# Paths that should skip detailed logging (health checks, docs)
SKIP_LOGGING_PATHS: Set[str] = {
    "/health",
    "/",
    "/favicon.ico",
    "/docs",
    "/redoc",
    "/openapi.json",
}

# Export downloads can legitimately take a while
SLOW_REQUEST_EXEMPT_PREFIXES = ("/api/admin/export/",)

SLOW_REQUEST_MS = 1000


def should_skip_logging(path: str) -> bool:
    return path in SKIP_LOGGING_PATHS


def api_resource(path: str) -> Optional[str]:
    """
    Resource area a path belongs to, for grouping logs.

    /api/events/123/rsvp -> "events", /api/admin/users/9/role -> "admin/users".
    Paths outside the API prefix give None.
    """
    prefix = settings.API_PREFIX.rstrip("/") + "/"
    if not path.startswith(prefix):
        return None

    parts = [p for p in path[len(prefix):].split("/") if p]
    if not parts:
        return None
    if parts[0] == "admin" and len(parts) > 1:
        return f"admin/{parts[1]}"
    return parts[0]


def resolved_user_id(request: Request) -> Optional[str]:
    # Set on request.state by the auth dependencies; context vars set inside
    # the route do not flow back to the middleware.
    return getattr(request.state, "user_id", None)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every API request with its resource area, caller and outcome.

    - Tracks X-Request-ID for correlation (accepts one from the client)
    - Attributes the completion line to the authenticated user, if any,
      through the logging context
    - Flags denied requests (401/403) and slow requests separately
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)

        path = request.url.path
        method = request.method
        resource = api_resource(path)
        skip_logging = should_skip_logging(path)
        start_time = time.perf_counter()

        if not skip_logging:
            logger.debug(
                f"→ {method} {path}",
                extra={
                    "event_type": "http_request_start",
                    "http_method": method,
                    "http_path": path,
                    "api_resource": resource,
                    "client_ip": request.client.host if request.client else "unknown",
                }
            )

        try:
            try:
                response = await call_next(request)
            finally:
                set_user_id(resolved_user_id(request) or "")
        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"✗ {method} {path} - {type(exc).__name__} ({duration_ms:.2f}ms)",
                exc_info=True,
                extra={
                    "event_type": "http_request_error",
                    "http_method": method,
                    "http_path": path,
                    "api_resource": resource,
                    "duration_ms": duration_ms,
                    "error_type": type(exc).__name__,
                }
            )
            set_user_id("")
            set_request_id("")
            raise

        try:
            duration_ms = (time.perf_counter() - start_time) * 1000
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

            if not skip_logging:
                self._log_completion(request, response.status_code, resource, duration_ms)
            return response
        finally:
            set_user_id("")
            set_request_id("")

    def _log_completion(self, request: Request, status_code: int, resource: Optional[str], duration_ms: float):
        method = request.method
        path = request.url.path
        extra = {
            "event_type": "http_request_complete",
            "http_method": method,
            "http_path": path,
            "http_status": status_code,
            "api_resource": resource,
            "duration_ms": duration_ms,
        }
        message = f"← {method} {path} - {status_code} ({duration_ms:.2f}ms)"

        if status_code >= 500:
            logger.error(message, extra=extra)
        elif status_code in (401, 403):
            logger.warning(message, extra={**extra, "event_type": "http_access_denied"})
        elif status_code >= 400:
            logger.warning(message, extra=extra)
        else:
            logger.info(message, extra=extra)

        if duration_ms > SLOW_REQUEST_MS and not path.startswith(SLOW_REQUEST_EXEMPT_PREFIXES):
            logger.warning(
                f"Slow request: {method} {path} took {duration_ms:.2f}ms",
                extra={**extra, "event_type": "slow_request"}
            )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers to all responses
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["X-Frame-Options"] = "DENY"

        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects bodies over ``max_size`` bytes with the API's 413 error body"""

    def __init__(self, app: ASGIApp, max_size: int = 10 * 1024 * 1024):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")

        if content_length and content_length.isdigit() and int(content_length) > self.max_size:
            max_mb = self.max_size // 1024 // 1024
            logger.warning(
                f"Request body too large: {content_length} bytes on {request.url.path}",
                extra={
                    "event_type": "request_too_large",
                    "content_length": int(content_length),
                    "max_size": self.max_size,
                    "http_path": request.url.path,
                    "api_resource": api_resource(request.url.path),
                }
            )
            return JSONResponse(
                status_code=413,
                content={
                    "detail": f"Request body too large. Maximum size is {max_mb}MB",
                    "code": "PAYLOAD_TOO_LARGE",
                    "details": {"max_size_mb": max_mb},
                }
            )

        return await call_next(request)


__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "RequestSizeLimitMiddleware",
    "api_resource",
]
