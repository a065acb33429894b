"""Error Hierarchy - the three error kinds the user core can produce.

Invariants:
    - Every error has a code (str), category (ErrorCategory) and http_status
    - UserValidationError carries ALL violations of one validation pass, never a subset
    - to_response() produces the REST error envelope; empty keys are omitted
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with UserApiError base: one FastAPI handler catches all
    - title is the envelope "message"; message is the envelope "error" detail
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ErrorCategory(str, Enum):
    """Error categories, also used as the error.type span attribute."""
    VALIDATION = "validation_error"
    CONFLICT = "conflict_error"
    NOT_FOUND = "not_found"
    INTERNAL = "internal_error"


@dataclass
class ErrorContext:
    """Context attached to an error for logging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class FieldViolation:
    """One violated constraint on one field.

    kind is usually a ConstraintKind value; any other string renders as
    "<Label> is invalid".
    """
    field: str
    label: str
    kind: str
    limit: int | None = None


class UserApiError(Exception):
    """Base exception for all user API errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        title: str,
        http_status: int = 500,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.title = title
        self.http_status = http_status
        self.context = context or ErrorContext()

    def to_response(self, trace_id: str = "") -> dict:
        """Convert to the standard REST error envelope."""
        body = {
            "status": "error",
            "message": self.title,
            "error": self.message,
            "code": self.code,
        }
        if trace_id:
            body["trace_id"] = trace_id
        return body


class UserValidationError(UserApiError):
    """Creation or update request failed field validation."""

    def __init__(
        self, violations: list[FieldViolation], message: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            "Validation failed", 400, context,
        )
        self.violations = list(violations)


class ConflictError(UserApiError):
    """Write would violate email uniqueness."""

    def __init__(
        self, email: str, title: str = "User creation failed",
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.email = email
        super().__init__(
            "user with this email already exists", "EMAIL_CONFLICT",
            ErrorCategory.CONFLICT, title, 409, ctx,
        )
        self.email = email


class NotFoundError(UserApiError):
    """No live record with the requested identifier or email."""

    def __init__(
        self, key: str, lookup: str = "id", context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        if lookup == "id":
            ctx.user_id = key
        else:
            ctx.email = key
        super().__init__(
            "user not found", "USER_NOT_FOUND", ErrorCategory.NOT_FOUND,
            "User not found", 404, ctx,
        )
        self.key = key
        self.lookup = lookup
