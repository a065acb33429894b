"""User Record - tests for record construction, replacement and wire shape.

Tests cover:
    - new_user_record copies normalized fields and stamps both timestamps
    - replace_user_record keeps id/created_at and clamps updated_at
    - full_name is derived
    - to_dict omits empty optionals and encodes dates/timestamps as ISO text
    - Records and addresses are immutable values
"""

import dataclasses
from datetime import date, datetime, timedelta, timezone

import pytest

from user_api.core.domain_types import UserId
from user_api.core.user_record import (
    NormalizedUser,
    PostalAddress,
    new_user_record,
    replace_user_record,
)

NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


def _normalized(**overrides) -> NormalizedUser:
    values = {"first_name": "Jane", "last_name": "Smith", "email": "jane@example.com"}
    values.update(overrides)
    return NormalizedUser(**values)


def test_new_record_uses_given_id_and_time():
    record = new_user_record(_normalized(phone="5551234567"), UserId("abc"), NOW)
    assert record.id == "abc"
    assert record.created_at == NOW
    assert record.updated_at == NOW
    assert record.phone == "5551234567"


def test_full_name_is_derived():
    record = new_user_record(_normalized(), UserId("abc"), NOW)
    assert record.full_name == "Jane Smith"


def test_replace_keeps_identity_and_creation_time():
    record = new_user_record(_normalized(), UserId("abc"), NOW)
    later = NOW + timedelta(hours=1)
    updated = replace_user_record(
        record, _normalized(first_name="Janet", email="janet@example.com"), later,
    )
    assert updated.id == "abc"
    assert updated.created_at == NOW
    assert updated.updated_at == later
    assert updated.first_name == "Janet"
    assert updated.email == "janet@example.com"


def test_replace_clamps_backwards_clock():
    record = new_user_record(_normalized(), UserId("abc"), NOW)
    updated = replace_user_record(record, _normalized(), NOW - timedelta(days=1))
    assert updated.updated_at == NOW
    assert updated.created_at <= updated.updated_at


def test_replace_clears_fields_missing_from_new_input():
    record = new_user_record(
        _normalized(phone="5551234567", address=PostalAddress(city="Austin")),
        UserId("abc"), NOW,
    )
    updated = replace_user_record(record, _normalized(), NOW)
    assert updated.phone is None
    assert updated.address is None


def test_to_dict_minimal_record_omits_optionals():
    data = new_user_record(_normalized(), UserId("abc"), NOW).to_dict()
    assert data == {
        "id": "abc",
        "first_name": "Jane",
        "last_name": "Smith",
        "full_name": "Jane Smith",
        "email": "jane@example.com",
        "created_at": "2024-03-01T09:30:00+00:00",
        "updated_at": "2024-03-01T09:30:00+00:00",
    }


def test_to_dict_full_record():
    record = new_user_record(
        _normalized(
            phone="5551234567",
            date_of_birth=date(1990, 5, 17),
            address=PostalAddress(city="Austin", postal_code="73301"),
        ),
        UserId("abc"), NOW,
    )
    data = record.to_dict()
    assert data["phone"] == "5551234567"
    assert data["date_of_birth"] == "1990-05-17"
    assert data["address"] == {"city": "Austin", "postal_code": "73301"}


def test_record_is_frozen():
    record = new_user_record(_normalized(), UserId("abc"), NOW)
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.email = "other@example.com"


def test_address_is_value_type():
    assert PostalAddress(city="Austin") == PostalAddress(city="Austin")
    assert PostalAddress().is_empty()
    assert not PostalAddress(country="US").is_empty()
