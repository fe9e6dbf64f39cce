"""HTTP client for a running user service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from .models import UserView

DEFAULT_SERVICE_URL = "http://127.0.0.1:8080"


class UserServiceError(RuntimeError):
    """Raised when the user service rejects a request or cannot be reached."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UserNotFoundError(UserServiceError):
    """Raised when the requested user does not exist."""


@dataclass
class _ClientConfig:
    base_url: str
    timeout: float


def _normalize_base_url(base_url: str) -> str:
    cleaned = (base_url or "").strip()
    if not cleaned:
        raise ValueError("Service base URL must not be empty")
    return cleaned.rstrip("/")


def _extract_message(payload: object, default: str) -> str:
    if isinstance(payload, dict):
        value = payload.get("message")
        if isinstance(value, str) and value.strip():
            return value.strip()
    return default


class UserServiceClient:
    """Thin wrapper around the ``/users`` endpoints.

    An existing :class:`httpx.Client` may be supplied, which lets tests drive
    an in-process application through ``fastapi.testclient.TestClient``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_SERVICE_URL,
        *,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._config = _ClientConfig(base_url=_normalize_base_url(base_url), timeout=timeout)
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=self._config.base_url, timeout=self._config.timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "UserServiceClient":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def _request(self, method: str, path: str, *, json: Dict[str, Any] | None = None) -> Any:
        try:
            response = self._client.request(method, path, json=json)
        except httpx.RequestError as exc:  # pragma: no cover - network failure
            raise UserServiceError(f"Failed to contact user service: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400:
            default = f"User service request failed with status {response.status_code}"
            message = _extract_message(payload, default)
            if response.status_code == 404:
                raise UserNotFoundError(message, status_code=404)
            raise UserServiceError(message, status_code=response.status_code)

        if not isinstance(payload, dict) or "data" not in payload:
            raise UserServiceError("User service returned an unexpected response payload")
        return payload["data"]

    def list_users(self) -> List[UserView]:
        data = self._request("GET", "/users/")
        if not isinstance(data, list):
            raise UserServiceError("User service returned an invalid user list")
        return [UserView.model_validate(item) for item in data]

    def get_user(self, user_id: str) -> UserView:
        return UserView.model_validate(self._request("GET", f"/users/{user_id}"))

    def create_user(self, name: str, email: str) -> UserView:
        data = self._request("POST", "/users/", json={"name": name, "email": email})
        return UserView.model_validate(data)

    def update_user(self, user_id: str, name: str, email: str) -> UserView:
        data = self._request("PUT", f"/users/{user_id}", json={"name": name, "email": email})
        return UserView.model_validate(data)

    def delete_user(self, user_id: str) -> UserView:
        return UserView.model_validate(self._request("DELETE", f"/users/{user_id}"))


__all__ = [
    "DEFAULT_SERVICE_URL",
    "UserNotFoundError",
    "UserServiceClient",
    "UserServiceError",
]
