"""CRUD endpoints for user records.

Each endpoint performs exactly one storage call while holding the shared
lock, then builds the response envelope after the lock is released.
Endpoints are plain functions so FastAPI runs them on its worker threads
instead of blocking the event loop on the storage lock.
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from .identifiers import UUIDv7Generator
from .locking import StorageLockError
from .models import User, UserPayload, UserView
from .response import LOCK_ERROR_MESSAGE, NOT_FOUND_MESSAGE, ApiResponse, envelope_response
from .storage import SharedStorage

logger = logging.getLogger("userstore.handlers")


def get_storage(request: Request) -> SharedStorage:
    return request.app.state.storage


def get_id_generator(request: Request) -> UUIDv7Generator:
    return request.app.state.id_generator


def _lock_error(operation: str) -> JSONResponse:
    logger.error("Storage lock unavailable during %s", operation)
    return envelope_response(
        ApiResponse.error(LOCK_ERROR_MESSAGE),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def _not_found() -> JSONResponse:
    return envelope_response(ApiResponse.error(NOT_FOUND_MESSAGE), status.HTTP_404_NOT_FOUND)


def _user_response(user: User) -> JSONResponse:
    return envelope_response(ApiResponse.success(UserView.from_user(user)))


router = APIRouter(prefix="/users", tags=["users"])


@router.post("/")
def create_user(
    payload: UserPayload,
    storage: SharedStorage = Depends(get_storage),
    id_generator: UUIDv7Generator = Depends(get_id_generator),
) -> JSONResponse:
    user = User(id=id_generator.generate(), name=payload.name, email=payload.email)

    try:
        with storage.locked() as users:
            users.create(user)
    except StorageLockError:
        return _lock_error("create")

    logger.info("Created user %s", user.id)
    return _user_response(user)


@router.get("/")
def fetch_users(storage: SharedStorage = Depends(get_storage)) -> JSONResponse:
    try:
        with storage.locked() as users:
            records = users.fetch()
    except StorageLockError:
        return _lock_error("fetch")

    views: List[UserView] = [UserView.from_user(user) for user in records]
    return envelope_response(ApiResponse.success(views))


@router.get("/{user_id}")
def get_user(user_id: str, storage: SharedStorage = Depends(get_storage)) -> JSONResponse:
    try:
        with storage.locked() as users:
            user = users.get_by_id(user_id)
    except StorageLockError:
        return _lock_error("get")

    if user is None:
        return _not_found()
    return _user_response(user)


@router.put("/{user_id}")
def update_user(
    user_id: str,
    payload: UserPayload,
    storage: SharedStorage = Depends(get_storage),
) -> JSONResponse:
    try:
        with storage.locked() as users:
            user = users.update(user_id, payload)
    except StorageLockError:
        return _lock_error("update")

    if user is None:
        return _not_found()
    logger.info("Updated user %s", user_id)
    return _user_response(user)


@router.delete("/{user_id}")
def delete_user(user_id: str, storage: SharedStorage = Depends(get_storage)) -> JSONResponse:
    try:
        with storage.locked() as users:
            user = users.delete(user_id)
    except StorageLockError:
        return _lock_error("delete")

    if user is None:
        return _not_found()
    logger.info("Deleted user %s", user_id)
    return _user_response(user)


__all__ = ["get_id_generator", "get_storage", "router"]
