"""Boundary Protocols - storage contract between core and infrastructure.

Invariants:
    - Core NEVER imports from infrastructure; backends are injected into services
    - Every operation either meets its postcondition or raises exactly one of
      ConflictError / NotFoundError
    - create() checks email uniqueness and inserts atomically
    - update() replaces by id only; it does not recheck email uniqueness

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Synchronous methods: the in-memory backend does bounded local work with no IO
"""

from typing import Protocol

from user_api.core.domain_types import UserId
from user_api.core.user_record import UserRecord


class UserRepository(Protocol):
    """Contract for user storage backends."""
    def create(self, user: UserRecord) -> None: ...
    def get_by_id(self, user_id: UserId) -> UserRecord: ...
    def get_by_email(self, email: str) -> UserRecord: ...
    def get_all(self) -> list[UserRecord]: ...
    def update(self, user: UserRecord) -> None: ...
    def delete(self, user_id: UserId) -> None: ...
