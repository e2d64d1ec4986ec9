"""
RedSocial Backend — Request Logging Middleware
================================================

What:  One access log line per HTTP request on the `redsocial.access` logger.
How:   Times the downstream call and logs method, path, status, duration,
       request ID, client IP and, when a token was accepted, the username.

Level by status class:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Request bodies and Authorization headers are never logged (passwords and
tokens travel there).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("redsocial.access")

# Probed every few seconds by orchestrators
_QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Structured access logging with request ID correlation."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in _QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        client_ip = request.client.host if request.client else "unknown"
        identity = getattr(request.state, "identity", None)
        caller = identity.username if identity is not None else "-"
        rid = request_id_var.get("")

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] %s from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            caller,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "caller": caller,
            },
        )
        return response
