"""In-Memory User Store - the authoritative, thread-safe collection of user records.

Invariants:
    - Every operation runs under one lock: create's uniqueness scan and its insert
      are a single critical section, so concurrent same-email creates have one winner
    - Records are frozen dataclasses, so readers can never observe a half-written record
    - get_all() returns a snapshot list; later writes do not change it
    - Email comparison is exact and case-sensitive
    - update() does not recheck email uniqueness (see UserService.update_user)
    - The store never logs; failures are recorded on the operation's span and raised

Design Decisions:
    - threading.Lock for readers too: the stdlib has no reader/writer lock, and
      iterating a dict while another thread inserts is not safe
    - Linear email scan instead of an email index: update() may leave two records
      sharing an email, which an index keyed by email cannot represent
"""

import threading
from contextlib import contextmanager
from typing import Iterator

from opentelemetry import trace
from opentelemetry.trace import Span

from user_api.core.domain_types import USERS_TABLE, StoreOperation, UserId
from user_api.core.errors import ConflictError, NotFoundError
from user_api.core.user_record import UserRecord
from user_api.infrastructure.tracing import (
    ATTR_DB_OPERATION,
    ATTR_DB_TABLE,
    ATTR_OPERATION_RESULT,
    ATTR_USER_EMAIL,
    ATTR_USER_ID,
    ATTR_USERS_COUNT,
    get_tracer,
    record_error,
)

TRACER_NAME = "user_api.repository"


class InMemoryUserStore:
    """UserRepository backed by a lock-guarded dict keyed by user id."""

    def __init__(self, tracer: trace.Tracer | None = None):
        self._users: dict[UserId, UserRecord] = {}
        self._lock = threading.Lock()
        self._tracer = tracer or get_tracer(TRACER_NAME)

    def create(self, user: UserRecord) -> None:
        with self._span("Create", StoreOperation.CREATE) as span:
            span.set_attribute(ATTR_USER_ID, user.id)
            span.set_attribute(ATTR_USER_EMAIL, user.email)
            with self._lock:
                if self._find_by_email(user.email) is not None:
                    err = ConflictError(user.email)
                    record_error(span, err, "duplicate_email")
                    raise err
                self._users[user.id] = user
            span.set_attribute(ATTR_OPERATION_RESULT, "success")

    def get_by_id(self, user_id: UserId) -> UserRecord:
        with self._span("GetByID", StoreOperation.GET_BY_ID) as span:
            span.set_attribute(ATTR_USER_ID, user_id)
            with self._lock:
                user = self._users.get(user_id)
            if user is None:
                err = NotFoundError(user_id)
                record_error(span, err, "not_found")
                raise err
            span.set_attribute(ATTR_USER_EMAIL, user.email)
            span.set_attribute(ATTR_OPERATION_RESULT, "success")
            return user

    def get_by_email(self, email: str) -> UserRecord:
        with self._span("GetByEmail", StoreOperation.GET_BY_EMAIL) as span:
            span.set_attribute(ATTR_USER_EMAIL, email)
            with self._lock:
                user = self._find_by_email(email)
            if user is None:
                err = NotFoundError(email, lookup="email")
                record_error(span, err, "not_found")
                raise err
            span.set_attribute(ATTR_USER_ID, user.id)
            span.set_attribute(ATTR_OPERATION_RESULT, "success")
            return user

    def get_all(self) -> list[UserRecord]:
        with self._span("GetAll", StoreOperation.GET_ALL) as span:
            with self._lock:
                users = list(self._users.values())
            span.set_attribute(ATTR_USERS_COUNT, len(users))
            span.set_attribute(ATTR_OPERATION_RESULT, "success")
            return users

    def update(self, user: UserRecord) -> None:
        with self._span("Update", StoreOperation.UPDATE) as span:
            span.set_attribute(ATTR_USER_ID, user.id)
            span.set_attribute(ATTR_USER_EMAIL, user.email)
            with self._lock:
                if user.id not in self._users:
                    err = NotFoundError(user.id)
                    record_error(span, err, "not_found")
                    raise err
                self._users[user.id] = user
            span.set_attribute(ATTR_OPERATION_RESULT, "success")

    def delete(self, user_id: UserId) -> None:
        with self._span("Delete", StoreOperation.DELETE) as span:
            span.set_attribute(ATTR_USER_ID, user_id)
            with self._lock:
                if self._users.pop(user_id, None) is None:
                    err = NotFoundError(user_id)
                    record_error(span, err, "not_found")
                    raise err
            span.set_attribute(ATTR_OPERATION_RESULT, "success")

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    # ─── internals ─────────────────────────────────────────────

    def _find_by_email(self, email: str) -> UserRecord | None:
        """Caller must hold self._lock."""
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    @contextmanager
    def _span(self, op_name: str, operation: StoreOperation) -> Iterator[Span]:
        with self._tracer.start_as_current_span(
            f"InMemoryUserStore.{op_name}",
            record_exception=False,
            set_status_on_exception=False,
        ) as span:
            span.set_attribute(ATTR_DB_OPERATION, operation.value)
            span.set_attribute(ATTR_DB_TABLE, USERS_TABLE)
            yield span
