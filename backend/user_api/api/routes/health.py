"""Health Probe - liveness endpoint.

Invariants:
    - GET /health always returns 200 if the process is up
    - trace_id included when the request is traced
"""

from datetime import datetime, timezone

from fastapi import APIRouter, status
from opentelemetry import trace

from user_api.infrastructure.tracing import ATTR_OPERATION_RESULT, current_trace_id

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe."""
    body = {
        "status": "success",
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    trace_id = current_trace_id()
    if trace_id:
        body["trace_id"] = trace_id
    trace.get_current_span().set_attribute(ATTR_OPERATION_RESULT, "success")
    return body
