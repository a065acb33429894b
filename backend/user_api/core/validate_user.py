"""User Validation - field rules for creation/replacement requests and aggregate error rendering.

Invariants:
    - All functions are PURE: no IO, no logging, no side effects
    - check_* helpers return a FieldViolation on failure, None on success
    - Every string is trimmed before it is checked and before it is stored
    - At most one violation per field; violations reported in declaration order
    - validate_create_request is all-or-nothing: a NormalizedUser or UserValidationError

Design Decisions:
    - Email syntax delegated to email-validator with deliverability checks off
      (no DNS lookups inside the core)
    - Date of birth has no plausibility range; future dates are accepted
"""

import re
from datetime import date

from email_validator import EmailNotValidError, validate_email

from user_api.core.domain_types import (
    ADDRESS_MAX_LENGTHS,
    DATE_FORMAT_LABEL,
    FIELD_LABELS,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    PHONE_MAX_LENGTH,
    PHONE_MIN_LENGTH,
    ConstraintKind,
)
from user_api.core.errors import FieldViolation, UserValidationError
from user_api.core.user_record import CreationRequest, NormalizedUser, PostalAddress

_ISO_DATE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

VIOLATION_SEPARATOR = "; "


# ─── Field Checks ──────────────────────────────────────────────

def check_required_length(
    name: str, value: str, min_length: int, max_length: int,
) -> FieldViolation | None:
    """Required string whose trimmed length must fall in [min, max]."""
    if not value:
        return _violation(name, ConstraintKind.REQUIRED)
    return _check_bounds(name, value, min_length, max_length)


def check_email(name: str, value: str) -> FieldViolation | None:
    """Required string that must be a syntactically valid email address."""
    if not value:
        return _violation(name, ConstraintKind.REQUIRED)
    try:
        validate_email(
            value,
            check_deliverability=False,
            globally_deliverable=False,
            test_environment=True,
        )
    except EmailNotValidError:
        return _violation(name, ConstraintKind.EMAIL)
    return None


def check_optional_length(
    name: str, value: str, min_length: int | None, max_length: int,
) -> FieldViolation | None:
    """Optional string; bounds apply only when a value is present."""
    if not value:
        return None
    return _check_bounds(name, value, min_length, max_length)


def check_iso_date(name: str, value: str) -> FieldViolation | None:
    """Optional YYYY-MM-DD calendar date."""
    if not value:
        return None
    if parse_iso_date(value) is None:
        return _violation(name, ConstraintKind.DATE)
    return None


def parse_iso_date(value: str) -> date | None:
    """Parse strict YYYY-MM-DD; None for anything else (including 2023-02-30)."""
    if not _ISO_DATE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


# ─── Aggregate Validation ──────────────────────────────────────

def collect_violations(request: CreationRequest) -> list[FieldViolation]:
    """Run every field rule; return all violations in declaration order."""
    first_name = _trim(request.first_name)
    last_name = _trim(request.last_name)
    email = _trim(request.email)
    phone = _trim(request.phone)
    dob = _trim(request.date_of_birth)

    checks = [
        check_required_length("first_name", first_name, NAME_MIN_LENGTH, NAME_MAX_LENGTH),
        check_required_length("last_name", last_name, NAME_MIN_LENGTH, NAME_MAX_LENGTH),
        check_email("email", email),
        check_optional_length("phone", phone, PHONE_MIN_LENGTH, PHONE_MAX_LENGTH),
        check_iso_date("date_of_birth", dob),
    ]
    if request.address is not None:
        for name, max_length in ADDRESS_MAX_LENGTHS.items():
            value = _trim(getattr(request.address, name))
            checks.append(check_optional_length(name, value, None, max_length))

    return [v for v in checks if v is not None]


def validate_create_request(request: CreationRequest) -> NormalizedUser:
    """Validate and normalize a creation (or full replacement) request.

    Raises UserValidationError carrying every violation when any rule fails.
    """
    violations = collect_violations(request)
    if violations:
        raise UserValidationError(violations, format_violations(violations))

    return NormalizedUser(
        first_name=_trim(request.first_name),
        last_name=_trim(request.last_name),
        email=_trim(request.email),
        phone=_trim(request.phone) or None,
        date_of_birth=parse_iso_date(_trim(request.date_of_birth)),
        address=_normalize_address(request.address),
    )


# ─── Rendering ─────────────────────────────────────────────────

def format_violation(violation: FieldViolation) -> str:
    """Render one violation as '<Label> <reason>'."""
    kind = violation.kind
    if kind == ConstraintKind.REQUIRED:
        reason = "is required"
    elif kind == ConstraintKind.EMAIL:
        reason = "must be a valid email address"
    elif kind == ConstraintKind.MIN_LENGTH:
        reason = f"must be at least {violation.limit} characters long"
    elif kind == ConstraintKind.MAX_LENGTH:
        reason = f"must be at most {violation.limit} characters long"
    elif kind == ConstraintKind.DATE:
        reason = f"must be in {DATE_FORMAT_LABEL} format"
    else:
        reason = "is invalid"
    return f"{violation.label} {reason}"


def format_violations(violations: list[FieldViolation]) -> str:
    return VIOLATION_SEPARATOR.join(format_violation(v) for v in violations)


# ─── Helpers ───────────────────────────────────────────────────

def _check_bounds(
    name: str, value: str, min_length: int | None, max_length: int,
) -> FieldViolation | None:
    if min_length is not None and len(value) < min_length:
        return _violation(name, ConstraintKind.MIN_LENGTH, min_length)
    if len(value) > max_length:
        return _violation(name, ConstraintKind.MAX_LENGTH, max_length)
    return None


def _violation(
    name: str, kind: ConstraintKind, limit: int | None = None,
) -> FieldViolation:
    return FieldViolation(
        field=name, label=FIELD_LABELS[name], kind=kind.value, limit=limit,
    )


def _trim(value: str | None) -> str:
    return (value or "").strip()


def _normalize_address(address: PostalAddress | None) -> PostalAddress | None:
    if address is None:
        return None
    normalized = PostalAddress(
        **{name: _trim(getattr(address, name)) or None for name in ADDRESS_MAX_LENGTHS},
    )
    return None if normalized.is_empty() else normalized
