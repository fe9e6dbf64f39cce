"""In-memory user record service."""

from __future__ import annotations

from typing import Any

from .locking import StorageLockError
from .models import User
from .storage import SharedStorage, UserStorage


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the FastAPI application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "SharedStorage",
    "StorageLockError",
    "User",
    "UserStorage",
    "create_app",
]
