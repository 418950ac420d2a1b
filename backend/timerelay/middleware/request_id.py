"""
TimeRelay Backend — Request ID Middleware
===========================================

What:  Tags each incoming request with a short correlation id.
How:   Reuses the client's X-Request-ID header when it is a plain token,
       otherwise generates one; stores it in a ContextVar for loggers and
       exception handlers, and echoes it in the response headers.
When:  Runs before the logging middleware, so access log lines carry the id.

A report request fans out into several Notion and Sheets calls; grepping the
id is the quickest way to see all of them together in the log.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local storage for the current request id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"

# Client ids end up verbatim in log lines
CLIENT_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def accepted_request_id(header_value: str) -> str:
    """The client's id if it is a short plain token, else a fresh one."""
    if header_value and CLIENT_ID_PATTERN.fullmatch(header_value):
        return header_value
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a correlation id to every request and returns it in X-Request-ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = accepted_request_id(request.headers.get(REQUEST_ID_HEADER, ""))
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
