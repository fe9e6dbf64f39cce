"""Time-ordered identifiers for new user records."""

from __future__ import annotations

import secrets
import threading
import time
import uuid

_MAX_SEQUENCE = (1 << 12) - 1
_RAND_B_BITS = 62
_VERSION = 0x7
_VARIANT = 0b10


class UUIDv7Generator:
    """Generate RFC 9562 version 7 UUIDs that increase monotonically.

    Layout (most significant bits first):

    - 48 bits Unix timestamp in milliseconds
    - 4 bits version (``0111``)
    - 12 bits sequence counter, randomly seeded at each new millisecond
    - 2 bits variant (``10``)
    - 62 random bits

    Values produced by one generator are strictly increasing, so their
    canonical string forms also sort in creation order. If the clock does not
    advance (or steps backwards) the previous timestamp is reused and the
    counter incremented; when the counter overflows the timestamp is bumped
    by one millisecond.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_timestamp = -1
        self._sequence = 0

    def _current_millis(self) -> int:
        return time.time_ns() // 1_000_000

    def _next_fields(self) -> tuple[int, int]:
        timestamp = self._current_millis()
        with self._lock:
            if timestamp > self._last_timestamp:
                # Leave headroom in the counter for ids minted in the same millisecond.
                self._sequence = secrets.randbits(11)
                self._last_timestamp = timestamp
            else:
                self._sequence += 1
                if self._sequence > _MAX_SEQUENCE:
                    self._last_timestamp += 1
                    self._sequence = 0
            return self._last_timestamp, self._sequence

    def generate_uuid(self) -> uuid.UUID:
        timestamp, sequence = self._next_fields()
        value = (timestamp & ((1 << 48) - 1)) << 80
        value |= _VERSION << 76
        value |= sequence << 64
        value |= _VARIANT << 62
        value |= secrets.randbits(_RAND_B_BITS)
        return uuid.UUID(int=value)

    def generate(self) -> str:
        return str(self.generate_uuid())


def uuid7_timestamp(value: str | uuid.UUID) -> int:
    """Return the millisecond timestamp embedded in a version 7 UUID."""

    parsed = value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
    if parsed.version != 7:
        raise ValueError("Identifier is not a version 7 UUID")
    return parsed.int >> 80


__all__ = ["UUIDv7Generator", "uuid7_timestamp"]
