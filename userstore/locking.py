"""Mutual exclusion for the shared user storage."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger("userstore.locking")


class StorageLockError(RuntimeError):
    """Raised when the storage lock cannot be acquired because it is poisoned."""


class PoisonableLock:
    """A ``threading.Lock`` that refuses further use after a failed critical section.

    When an exception escapes the body of :meth:`hold`, the data guarded by the
    lock may have been left half-modified. The lock records this and every
    subsequent acquisition raises :class:`StorageLockError` until
    :meth:`clear_poison` is called. Logging happens only after the lock has
    been released.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._poisoned = False

    @property
    def poisoned(self) -> bool:
        return self._poisoned

    @contextmanager
    def hold(self) -> Iterator[None]:
        failure: BaseException | None = None
        with self._lock:
            if self._poisoned:
                raise StorageLockError("Storage lock is poisoned")
            try:
                yield
            except BaseException as exc:
                self._poisoned = True
                failure = exc

        if failure is not None:
            logger.error("Storage lock poisoned by a failed critical section", exc_info=failure)
            raise failure

    def clear_poison(self) -> None:
        with self._lock:
            was_poisoned = self._poisoned
            self._poisoned = False
        if was_poisoned:
            logger.warning("Cleared poisoned storage lock")


__all__ = ["PoisonableLock", "StorageLockError"]
