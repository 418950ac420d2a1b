"""
TimeRelay Backend — Request Logging Middleware
================================================

What:  One access-log line per request: method, path, matched route, status,
       duration.
How:   Measures wall time around the downstream handler and picks the log
       level from the status code (5xx → ERROR, 4xx → WARNING, else INFO).
       The same fields are attached to the record as `extra` attributes.
When:  After RequestIDMiddleware, so every line carries the request id.

Example:
    2024-01-15T12:00:00 [INFO] timerelay.access: POST /api/generate-report -> generate_report 200 2310.4ms [a1b2c3d4]

The route name is the key the exception handlers use to pick the 500 message,
so a failed line can be matched to the body the front end received.
Request bodies are never logged; they contain client names and ids.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from timerelay.middleware.request_id import request_id_var

logger = logging.getLogger("timerelay.access")


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request after its response is produced.

    Liveness and health probes are skipped; hosting platforms hit them every
    few seconds.
    """

    QUIET_PATHS = {"/", "/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        # Set by the router once a path matches; unmatched paths log as "-"
        route = getattr(request.scope.get("route"), "name", None) or "-"
        rid = request_id_var.get("")

        logger.log(
            level_for_status(status),
            "%s %s -> %s %d %.1fms [%s]",
            request.method,
            path,
            route,
            status,
            duration_ms,
            rid,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "route": route,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": request.client.host if request.client else "unknown",
            },
        )
        return response
