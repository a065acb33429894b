"""Error Handlers - global exception handlers for the user API.

Invariants:
    - UserApiError → its own envelope and http_status
    - RequestValidationError (malformed JSON, wrong types) → 400 "Validation failed"
    - Exception (catch-all) → 500, never leaks internal details
    - Every error envelope carries trace_id when a span is active
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from user_api.api.responses import error_response
from user_api.core.errors import UserApiError
from user_api.infrastructure.tracing import current_trace_id

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_user_api_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_user_api_error_handler(app: FastAPI) -> None:

    @app.exception_handler(UserApiError)
    async def user_api_error_handler(request: Request, exc: UserApiError):
        """Handle all domain errors."""
        logger.warning(
            f"{exc.__class__.__name__}: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "user_id": exc.context.user_id,
            },
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_response(current_trace_id()),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle request body parsing/type errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Validation failed",
            error=_summarize_request_errors(exc),
            code="VALIDATION_ERROR",
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all - never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            code="INTERNAL_ERROR",
        )


def _summarize_request_errors(exc: RequestValidationError) -> str:
    """Render schema errors as 'field: msg' joined by '; '."""
    parts = []
    for e in exc.errors():
        loc = [str(p) for p in e.get("loc", ()) if p != "body"]
        field = ".".join(loc) or "body"
        parts.append(f"{field}: {e.get('msg', 'is invalid')}")
    return "; ".join(parts)
