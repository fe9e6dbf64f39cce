"""Uniform response envelope shared by every endpoint."""

from __future__ import annotations

from typing import Any, Dict

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

SUCCESS_MESSAGE = "success"
NOT_FOUND_MESSAGE = "user not found"
LOCK_ERROR_MESSAGE = "Storage lock error"


class ApiResponse(BaseModel):
    """``{"message": ..., "data": ...}`` with ``data`` omitted on errors."""

    message: str
    data: Any = None

    @classmethod
    def success(cls, data: Any) -> "ApiResponse":
        return cls(message=SUCCESS_MESSAGE, data=data)

    @classmethod
    def error(cls, message: str) -> "ApiResponse":
        return cls(message=message)

    def to_payload(self) -> Dict[str, Any]:
        # Only fields passed to the constructor are emitted, so errors carry no "data" key.
        return jsonable_encoder(self.model_dump(exclude_unset=True))


def envelope_response(envelope: ApiResponse, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=envelope.to_payload())


__all__ = [
    "ApiResponse",
    "LOCK_ERROR_MESSAGE",
    "NOT_FOUND_MESSAGE",
    "SUCCESS_MESSAGE",
    "envelope_response",
]
