"""In-memory user storage and the lock that guards it."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from typing import Dict, Iterator, List, Optional

from .locking import PoisonableLock
from .models import User, UserPayload


class UserStorage:
    """Mapping of identifier to user record.

    The storage is not thread-safe on its own; share it through
    :class:`SharedStorage`. Every read hands out a copy so callers can release
    the lock before they serialise anything.
    """

    def __init__(self) -> None:
        self._users: Dict[str, User] = {}

    def __len__(self) -> int:
        return len(self._users)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._users

    def create(self, user: User) -> None:
        # Callers assign the identifier before inserting.
        self._users[user.id] = replace(user)  # type: ignore[index]

    def get_by_id(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        if user is None:
            return None
        return replace(user)

    def fetch(self) -> List[User]:
        return [replace(user) for user in self._users.values()]

    def update(self, user_id: str, payload: UserPayload) -> Optional[User]:
        user = self._users.get(user_id)
        if user is None:
            return None
        user.name = payload.name
        user.email = payload.email
        return replace(user)

    def delete(self, user_id: str) -> Optional[User]:
        return self._users.pop(user_id, None)


class SharedStorage:
    """Owns a :class:`UserStorage` and serialises access to it."""

    def __init__(self, storage: UserStorage | None = None) -> None:
        self._storage = storage if storage is not None else UserStorage()
        self._lock = PoisonableLock()

    @property
    def poisoned(self) -> bool:
        return self._lock.poisoned

    @contextmanager
    def locked(self) -> Iterator[UserStorage]:
        """Hold the storage lock for the duration of the ``with`` block.

        Raises :class:`~userstore.locking.StorageLockError` when a previous
        holder failed inside its critical section.
        """

        with self._lock.hold():
            yield self._storage

    def clear_poison(self) -> None:
        self._lock.clear_poison()


__all__ = ["SharedStorage", "UserStorage"]
