from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from user_registry.errors import ConflictError, NotFoundError, ValidationError
from user_registry.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Name, email, and age are required"
EMAIL_EXISTS_MESSAGE = "Email already exists"
USER_NOT_FOUND_MESSAGE = "User not found"
USER_DELETED_MESSAGE = "User deleted successfully"
USERS_CLEARED_MESSAGE = "All users cleared successfully"


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str
    age: int
    created_at: datetime
    updated_at: datetime


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validate(name: Any, email: Any, age: Any) -> None:
    if not isinstance(name, str) or not name:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)
    if not isinstance(email, str) or not email:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)
    # bool is an int subclass; True is not an age.
    if not isinstance(age, int) or isinstance(age, bool) or age <= 0:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)


class InMemoryUserStore:
    """Thread-safe in-memory user registry.

    Storage semantics:
    - Records live only in process memory (gone on restart).
    - Insertion order is preserved; deleting a record keeps the relative
      order of the others and an update keeps the record where it was.
    - Ids come from a counter that starts at ``id_seed``, advances once per
      successful create and is only rewound by :meth:`clear`.
    - Emails are unique (case-sensitive exact match).

    Concurrency:
    - One readers-writer lock guards the records, the email index and the
      id counter together.
    - ``list_all``/``get``/``count`` take it shared; every mutation takes it
      exclusive for the whole operation, so the uniqueness check and the
      write it protects can never interleave with another writer.
    - Records are frozen snapshots; callers never get a reference into the
      live collection.
    """

    def __init__(self, *, id_seed: int = 1, clock: Optional[Callable[[], datetime]] = None):
        if isinstance(id_seed, bool) or not isinstance(id_seed, int) or id_seed < 1:
            raise ValueError("id_seed must be a positive integer")
        self._seed = id_seed
        self._clock = clock or utcnow
        self._lock = ReadWriteLock()
        # dict preserves insertion order and `del` keeps the rest in place.
        self._users: Dict[int, User] = {}
        self._ids_by_email: Dict[str, int] = {}
        self._next_id = id_seed

    @property
    def seed(self) -> int:
        return self._seed

    # -- reads ---------------------------------------------------------------

    def list_all(self) -> List[User]:
        with self._lock.read():
            return list(self._users.values())

    def get(self, user_id: int) -> User:
        with self._lock.read():
            user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        return user

    def count(self) -> int:
        with self._lock.read():
            return len(self._users)

    # -- writes --------------------------------------------------------------

    def create(self, *, name: str, email: str, age: int) -> User:
        _validate(name, email, age)
        with self._lock.write():
            return self._create_locked(name=name, email=email, age=age)

    def update(self, user_id: int, *, name: str, email: str, age: int) -> User:
        _validate(name, email, age)
        with self._lock.write():
            current = self._users.get(user_id)
            if current is None:
                raise NotFoundError(USER_NOT_FOUND_MESSAGE)

            owner = self._ids_by_email.get(email)
            if owner is not None and owner != user_id:
                raise ConflictError(EMAIL_EXISTS_MESSAGE)

            now = self._clock()
            updated = replace(
                current,
                name=name,
                email=email,
                age=age,
                updated_at=max(now, current.created_at),
            )
            # Reassigning an existing key keeps its position.
            self._users[user_id] = updated
            if current.email != email:
                del self._ids_by_email[current.email]
                self._ids_by_email[email] = user_id

        logger.debug("Updated user id=%s", user_id)
        return updated

    def delete(self, user_id: int) -> str:
        with self._lock.write():
            user = self._users.pop(user_id, None)
            if user is None:
                raise NotFoundError(USER_NOT_FOUND_MESSAGE)
            del self._ids_by_email[user.email]
        logger.debug("Deleted user id=%s", user_id)
        return USER_DELETED_MESSAGE

    def clear(self) -> str:
        with self._lock.write():
            removed = len(self._users)
            self._users.clear()
            self._ids_by_email.clear()
            self._next_id = self._seed
        logger.debug("Cleared %d users; next id reset to %d", removed, self._seed)
        return USERS_CLEARED_MESSAGE

    def load(self, candidates: Iterable[Mapping[str, Any]]) -> List[User]:
        """Create several users under one write lock, all or nothing.

        Used to pre-seed the store at startup. If any candidate fails
        validation or collides on email, the store is left exactly as it was.
        """
        items = [dict(c) for c in candidates]
        for c in items:
            _validate(c.get("name"), c.get("email"), c.get("age"))

        with self._lock.write():
            saved_users = dict(self._users)
            saved_emails = dict(self._ids_by_email)
            saved_next_id = self._next_id
            try:
                return [self._create_locked(name=c["name"], email=c["email"], age=c["age"]) for c in items]
            except ConflictError:
                self._users = saved_users
                self._ids_by_email = saved_emails
                self._next_id = saved_next_id
                raise

    def _create_locked(self, *, name: str, email: str, age: int) -> User:
        # Caller holds the write lock.
        if email in self._ids_by_email:
            raise ConflictError(EMAIL_EXISTS_MESSAGE)

        now = self._clock()
        user = User(
            id=self._next_id,
            name=name,
            email=email,
            age=age,
            created_at=now,
            updated_at=now,
        )
        self._next_id += 1
        self._users[user.id] = user
        self._ids_by_email[email] = user.id
        logger.debug("Created user id=%s", user.id)
        return user
