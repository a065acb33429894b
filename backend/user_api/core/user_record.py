"""User Record - the stored user shape, its embedded address and the creation input.

Invariants:
    - UserRecord and PostalAddress are frozen: a stored record is never partially mutated
    - id and created_at survive every replacement; created_at <= updated_at always
    - full_name is derived (first + " " + last), never stored
    - Records are only built from a NormalizedUser (validated input)
    - to_dict() omits empty optional fields; timestamps are ISO 8601 text
"""

from dataclasses import dataclass, fields, replace
from datetime import date, datetime

from user_api.core.domain_types import UserId


@dataclass(frozen=True)
class PostalAddress:
    """Postal address value; every sub-field is optional."""
    street: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None

    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))

    def to_dict(self) -> dict[str, str]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name)
        }


@dataclass(frozen=True)
class CreationRequest:
    """Raw, untrimmed creation input as parsed from the transport."""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    date_of_birth: str = ""
    address: PostalAddress | None = None


@dataclass(frozen=True)
class NormalizedUser:
    """Validated creation input: trimmed, empty optionals collapsed to None."""
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    date_of_birth: date | None = None
    address: PostalAddress | None = None


@dataclass(frozen=True)
class UserRecord:
    """A stored user."""
    id: UserId
    first_name: str
    last_name: str
    email: str
    created_at: datetime
    updated_at: datetime
    phone: str | None = None
    date_of_birth: date | None = None
    address: PostalAddress | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict:
        """Wire representation of the record."""
        data: dict = {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "email": self.email,
        }
        if self.phone:
            data["phone"] = self.phone
        if self.date_of_birth:
            data["date_of_birth"] = self.date_of_birth.isoformat()
        if self.address and not self.address.is_empty():
            data["address"] = self.address.to_dict()
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat()
        return data


def new_user_record(
    user: NormalizedUser, user_id: UserId, now: datetime,
) -> UserRecord:
    """Build a fresh record; both timestamps are `now`."""
    return UserRecord(
        id=user_id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        phone=user.phone,
        date_of_birth=user.date_of_birth,
        address=user.address,
        created_at=now,
        updated_at=now,
    )


def replace_user_record(
    existing: UserRecord, user: NormalizedUser, now: datetime,
) -> UserRecord:
    """Full replacement keeping id and created_at.

    updated_at is clamped to created_at so a clock that steps backwards
    cannot break the ordering invariant.
    """
    return replace(
        existing,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        phone=user.phone,
        date_of_birth=user.date_of_birth,
        address=user.address,
        updated_at=max(now, existing.created_at),
    )
