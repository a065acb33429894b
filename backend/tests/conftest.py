"""Root conftest - shared test configuration and record builders."""

import os
from datetime import datetime, timezone

import pytest

# Tests never export spans or read a developer's tracing setup
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("TRACING_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")

from user_api.core.domain_types import UserId  # noqa: E402
from user_api.core.user_record import UserRecord  # noqa: E402

FIXED_NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_record(
    user_id: str = "user-1", email: str = "john.doe@example.com", **overrides,
) -> UserRecord:
    """Build a stored-shape record without going through validation."""
    values = {
        "id": UserId(user_id),
        "first_name": "John",
        "last_name": "Doe",
        "email": email,
        "created_at": FIXED_NOW,
        "updated_at": FIXED_NOW,
    }
    values.update(overrides)
    return UserRecord(**values)


@pytest.fixture
def record_factory():
    return make_record
