"""HTTP Middleware - request logging with trace correlation, span enrichment, JSON body guard.

Invariants:
    - One log line per completed request, carrying trace_id/span_id when tracing is on
    - Span attributes are only set on recording spans
    - POST/PUT under /api/users must declare application/json (parameters like
      charset allowed); anything else is rejected with 400 before routing
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from fastapi import Request, status
from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from user_api.api.responses import error_response
from user_api.infrastructure.tracing import (
    ATTR_ERROR_MESSAGE,
    ATTR_ERROR_TYPE,
    ATTR_HTTP_CLIENT_IP,
    ATTR_HTTP_REQUEST_SIZE,
    ATTR_HTTP_USER_AGENT,
)

logger = logging.getLogger("user_api.access")

JSON_BODY_METHODS = frozenset({"POST", "PUT"})
JSON_BODY_PREFIX = "/api/users"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Structured access log plus request/response attributes on the server span."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        span = trace.get_current_span()
        client = request.client.host if request.client else None
        if span.is_recording():
            span.set_attribute(ATTR_HTTP_USER_AGENT, request.headers.get("user-agent", ""))
            if client:
                span.set_attribute(ATTR_HTTP_CLIENT_IP, client)
            content_length = request.headers.get("content-length")
            if content_length and content_length.isdigit() and int(content_length) > 0:
                span.set_attribute(ATTR_HTTP_REQUEST_SIZE, int(content_length))

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        if span.is_recording() and response.status_code >= 400:
            span.set_attribute(ATTR_ERROR_TYPE, "http_error")
            span.set_attribute(ATTR_ERROR_MESSAGE, f"HTTP {response.status_code}")

        logger.info(
            "request.completed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "client": client,
            },
        )
        return response


class JSONContentTypeMiddleware(BaseHTTPMiddleware):
    """Reject user writes whose body is not declared as JSON."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method in JSON_BODY_METHODS and request.url.path.startswith(JSON_BODY_PREFIX):
            if not is_json_content_type(request.headers.get("content-type")):
                return error_response(
                    status.HTTP_400_BAD_REQUEST,
                    "Content-Type must be application/json",
                    code="UNSUPPORTED_CONTENT_TYPE",
                )
        return await call_next(request)


def is_json_content_type(header: str | None) -> bool:
    if not header:
        return False
    media_type = header.split(";", 1)[0].strip().lower()
    return media_type == "application/json"
