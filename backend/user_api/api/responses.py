"""Response Helpers - build the status/message/data envelope with trace correlation.

Invariants:
    - trace_id is included only when a valid span is active
    - Helpers never raise; error mapping happens in error_handlers
"""

from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse

from user_api.infrastructure.tracing import current_trace_id
from user_api.schemas.user import ApiResponse


def success_response(
    message: str, data: Any = None, status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    body = ApiResponse(
        status="success", message=message, data=data,
        trace_id=current_trace_id() or None,
    )
    return JSONResponse(status_code=status_code, content=body.to_content())


def created_response(message: str, data: Any = None) -> JSONResponse:
    return success_response(message, data, status.HTTP_201_CREATED)


def error_response(
    status_code: int, message: str, error: str | None = None, code: str | None = None,
) -> JSONResponse:
    body = ApiResponse(
        status="error", message=message, error=error, code=code,
        trace_id=current_trace_id() or None,
    )
    return JSONResponse(status_code=status_code, content=body.to_content())
