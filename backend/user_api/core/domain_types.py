"""Domain Types - identifiers, constraint kinds and field limits for user records.

Invariants:
    - UserId wraps the opaque string identifier; never reassigned after creation
    - Length limits are inclusive and measured on the trimmed value
    - FIELD_LABELS order is the order violations are reported in
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)


# ─── Enums ───────────────────────────────────────────────────────

class ConstraintKind(str, Enum):
    """Kinds of field constraint a violation can report."""
    REQUIRED = "required"
    EMAIL = "email"
    MIN_LENGTH = "min"
    MAX_LENGTH = "max"
    DATE = "date"


class StoreOperation(str, Enum):
    """Storage operations, used as the db.operation span attribute."""
    CREATE = "create"
    GET_BY_ID = "get_by_id"
    GET_BY_EMAIL = "get_by_email"
    GET_ALL = "get_all"
    UPDATE = "update"
    DELETE = "delete"


# ─── Field Limits ────────────────────────────────────────────────

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
PHONE_MIN_LENGTH = 10
PHONE_MAX_LENGTH = 15

ADDRESS_MAX_LENGTHS: dict[str, int] = {
    "street": 100,
    "city": 50,
    "state": 50,
    "postal_code": 20,
    "country": 50,
}

DATE_FORMAT_LABEL = "YYYY-MM-DD"

# Human-readable labels, in declaration order
FIELD_LABELS: dict[str, str] = {
    "first_name": "First name",
    "last_name": "Last name",
    "email": "Email",
    "phone": "Phone",
    "date_of_birth": "Date of birth",
    "street": "Street",
    "city": "City",
    "state": "State",
    "postal_code": "Postal code",
    "country": "Country",
}

USERS_TABLE = "users"
