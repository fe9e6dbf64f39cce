"""FastAPI application exposing the user CRUD endpoints."""

from __future__ import annotations

import logging
from typing import Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .handlers import router as users_router
from .identifiers import UUIDv7Generator
from .response import LOCK_ERROR_MESSAGE, ApiResponse, envelope_response
from .storage import SharedStorage

logger = logging.getLogger("userstore.service")

_UNPROCESSABLE_STATUS = 422


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request body"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    if location:
        return f"invalid request body: {location}: {message}"
    return f"invalid request body: {message}"


def register_exception_handlers(app: FastAPI) -> None:
    """Wrap transport-level and unexpected failures in the response envelope."""

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError):
        message = _describe_validation_error(exc)
        logger.info("Rejected request: %s", message)
        return envelope_response(ApiResponse.error(message), _UNPROCESSABLE_STATUS)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(_: Request, exc: StarletteHTTPException):
        response = envelope_response(ApiResponse.error(str(exc.detail)), exc.status_code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def handle_unexpected_error(_: Request, exc: Exception):
        # Handlers only raise from a failed critical section, which has poisoned the storage lock.
        logger.error("Unhandled error while serving request", exc_info=exc)
        return envelope_response(
            ApiResponse.error(LOCK_ERROR_MESSAGE),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


def create_app(
    *,
    storage: SharedStorage | None = None,
    id_generator: UUIDv7Generator | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application.

    A fresh :class:`SharedStorage` and identifier generator are created unless
    provided, so every application owns exactly one store for its lifetime.
    """

    app = FastAPI(
        title="User Store API",
        version="0.1.0",
        description="In-memory user records behind a shared lock.",
    )

    app.state.storage = storage if storage is not None else SharedStorage()
    app.state.id_generator = id_generator if id_generator is not None else UUIDv7Generator()

    @app.get("/healthz")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    app.include_router(users_router)
    register_exception_handlers(app)

    return app


__all__ = ["create_app", "register_exception_handlers"]
