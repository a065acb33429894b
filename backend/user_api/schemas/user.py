"""User Schemas - JSON request bodies and the response envelope.

Invariants:
    - UserCreate accepts missing/empty fields so core validation can report
      "is required" instead of a schema error; wrong JSON types still fail here
    - ApiResponse is dumped with exclude_none: absent keys, never nulls
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from user_api.core.user_record import CreationRequest, PostalAddress


class AddressPayload(BaseModel):
    """Postal address as sent by clients; all sub-fields optional."""
    street: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None

    def to_domain(self) -> PostalAddress:
        return PostalAddress(**self.model_dump())


class UserCreate(BaseModel):
    """Body of POST /api/users and PUT /api/users/{id}."""
    model_config = ConfigDict(extra="ignore")

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    date_of_birth: str | None = None
    address: AddressPayload | None = None

    def to_creation_request(self) -> CreationRequest:
        return CreationRequest(
            first_name=self.first_name or "",
            last_name=self.last_name or "",
            email=self.email or "",
            phone=self.phone or "",
            date_of_birth=self.date_of_birth or "",
            address=self.address.to_domain() if self.address else None,
        )


class ApiResponse(BaseModel):
    """Standard response envelope."""
    status: Literal["success", "error"]
    message: str | None = None
    data: Any = None
    error: str | None = None
    code: str | None = None
    trace_id: str | None = None

    def to_content(self) -> dict:
        return self.model_dump(exclude_none=True)
