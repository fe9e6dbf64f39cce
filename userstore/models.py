"""User records and their wire representations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel


@dataclass
class User:
    """A user record held by the storage."""

    id: Optional[str]
    name: str
    email: str


class UserPayload(BaseModel):
    """Request body accepted by the create and update endpoints."""

    name: str
    email: str


class UserView(BaseModel):
    id: str
    name: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "UserView":
        return cls(id=str(user.id), name=user.name, email=user.email)


__all__ = ["User", "UserPayload", "UserView"]
