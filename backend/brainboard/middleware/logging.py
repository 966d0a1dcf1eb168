"""
Brainboard Backend: Request Logging Middleware
==============================================

What:  One access-log line per HTTP request on the `brainboard.access` logger.

Logged:      method, path, status, duration, request id, client ip
Not logged:  request bodies, Authorization headers, share tokens

Share tokens are credentials, so the token segment of /share/{token}/... and
/permission/{token} is replaced by its first four characters plus "...".

Level by status class: 5xx → ERROR, 4xx → WARNING, otherwise INFO.
GET /health is skipped.
"""

import logging
import re
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from brainboard.middleware.request_id import request_id_var

access_logger = logging.getLogger("brainboard.access")

SKIPPED_PATHS = frozenset({"/health"})

_TOKEN_SEGMENT = re.compile(r"^/(share|permission)/([^/]+)")


def redact_path(path: str) -> str:
    """`/share/3f9a...e1/cards` → `/share/3f9a.../cards`."""
    return _TOKEN_SEGMENT.sub(lambda m: f"/{m.group(1)}/{m.group(2)[:4]}...", path)


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in SKIPPED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        path = redact_path(request.url.path)
        peer = request.client.host if request.client else "-"
        rid = request_id_var.get("")
        access_logger.log(
            level_for_status(response.status_code),
            "%s %s -> %d in %.1fms [%s] %s",
            request.method,
            path,
            response.status_code,
            elapsed_ms,
            rid,
            peer,
            extra={
                "request_id": rid,
                "http_method": request.method,
                "http_path": path,
                "http_status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
