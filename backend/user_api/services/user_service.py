"""User Service - validated creation, lookup, replacement and deletion of users.

Invariants:
    - Records are only built from validate_create_request output
    - Identifier generation and clock access are injected (id_factory, clock)
    - Creation pre-checks the email for a fast 409, but the store's atomic check
      is the one that decides concurrent races
    - update_user keeps id and created_at and refreshes updated_at
    - Every UserApiError is recorded on the operation span and re-raised unchanged
"""

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator

from opentelemetry import trace
from opentelemetry.trace import Span

from user_api.core.domain_types import UserId
from user_api.core.errors import ConflictError, NotFoundError, UserApiError
from user_api.core.repository_protocols import UserRepository
from user_api.core.user_record import (
    CreationRequest,
    UserRecord,
    new_user_record,
    replace_user_record,
)
from user_api.core.validate_user import validate_create_request
from user_api.infrastructure.tracing import (
    ATTR_OPERATION_RESULT,
    ATTR_USER_EMAIL,
    ATTR_USER_FIRST_NAME,
    ATTR_USER_ID,
    ATTR_USER_LAST_NAME,
    ATTR_USERS_COUNT,
    get_tracer,
    record_error,
)

logger = logging.getLogger(__name__)

TRACER_NAME = "user_api.services"


def _new_user_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserService:
    """Use-cases over a UserRepository."""

    def __init__(
        self,
        repository: UserRepository,
        tracer: trace.Tracer | None = None,
        id_factory: Callable[[], str] = _new_user_id,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self._tracer = tracer or get_tracer(TRACER_NAME)
        self._id_factory = id_factory
        self._clock = clock

    def create_user(self, request: CreationRequest) -> UserRecord:
        """Validate, reject duplicate emails, then store a new record."""
        with self._span("CreateUser") as span:
            span.set_attribute(ATTR_USER_EMAIL, request.email)
            span.set_attribute(ATTR_USER_FIRST_NAME, request.first_name)
            span.set_attribute(ATTR_USER_LAST_NAME, request.last_name)

            span.add_event("validation.start")
            normalized = validate_create_request(request)
            span.add_event("validation.success")

            span.add_event("email_check.start")
            if self._email_taken(normalized.email):
                raise ConflictError(normalized.email)
            span.add_event("email_check.success")

            user = new_user_record(
                normalized, UserId(self._id_factory()), self._clock(),
            )
            span.set_attribute(ATTR_USER_ID, user.id)

            span.add_event("repository.create.start")
            self.repository.create(user)
            span.add_event("repository.create.success")

            span.set_attribute(ATTR_OPERATION_RESULT, "success")
            span.add_event(
                "user.created",
                {ATTR_USER_ID: user.id, ATTR_USER_EMAIL: user.email},
            )
            logger.info("User created", extra={"user_id": user.id})
            return user

    def get_user(self, user_id: str) -> UserRecord:
        with self._span("GetUserByID") as span:
            span.set_attribute(ATTR_USER_ID, user_id)
            user = self.repository.get_by_id(UserId(user_id))
            span.set_attribute(ATTR_USER_EMAIL, user.email)
            span.set_attribute(ATTR_OPERATION_RESULT, "success")
            return user

    def get_user_by_email(self, email: str) -> UserRecord:
        with self._span("GetUserByEmail") as span:
            span.set_attribute(ATTR_USER_EMAIL, email)
            user = self.repository.get_by_email(email)
            span.set_attribute(ATTR_USER_ID, user.id)
            span.set_attribute(ATTR_OPERATION_RESULT, "success")
            return user

    def list_users(self) -> list[UserRecord]:
        with self._span("GetAllUsers") as span:
            users = self.repository.get_all()
            span.set_attribute(ATTR_USERS_COUNT, len(users))
            span.set_attribute(ATTR_OPERATION_RESULT, "success")
            return users

    def update_user(self, user_id: str, request: CreationRequest) -> UserRecord:
        """Full replacement of an existing user.

        Rejects an email already held by a different record. The check and the
        store update are separate steps, so two concurrent updates can still
        collide; the store itself does not enforce uniqueness on update.
        """
        with self._span("UpdateUser") as span:
            span.set_attribute(ATTR_USER_ID, user_id)
            span.set_attribute(ATTR_USER_EMAIL, request.email)

            span.add_event("validation.start")
            normalized = validate_create_request(request)
            span.add_event("validation.success")

            existing = self.repository.get_by_id(UserId(user_id))
            if normalized.email != existing.email:
                span.add_event("email_check.start")
                if self._email_taken(normalized.email):
                    raise ConflictError(normalized.email, title="User update failed")
                span.add_event("email_check.success")

            updated = replace_user_record(existing, normalized, self._clock())
            self.repository.update(updated)

            span.set_attribute(ATTR_OPERATION_RESULT, "success")
            logger.info("User updated", extra={"user_id": updated.id})
            return updated

    def delete_user(self, user_id: str) -> None:
        with self._span("DeleteUser") as span:
            span.set_attribute(ATTR_USER_ID, user_id)
            self.repository.delete(UserId(user_id))
            span.set_attribute(ATTR_OPERATION_RESULT, "success")
            logger.info("User deleted", extra={"user_id": user_id})

    # ─── internals ─────────────────────────────────────────────

    def _email_taken(self, email: str) -> bool:
        try:
            self.repository.get_by_email(email)
        except NotFoundError:
            return False
        return True

    @contextmanager
    def _span(self, op_name: str) -> Iterator[Span]:
        with self._tracer.start_as_current_span(
            f"UserService.{op_name}",
            record_exception=False,
            set_status_on_exception=False,
        ) as span:
            try:
                yield span
            except UserApiError as err:
                record_error(span, err, err.category.value)
                raise
