"""HTTP client for the user management API: list, search, create, update and delete users."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_API_PREFIX = "/api/v1"
DEFAULT_TIMEOUT_SEC = 10.0


class ApiError(Exception):
    """Raised for any non-2xx response or transport failure."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class UserApiClient:
    """
    Thin synchronous client. Responses are returned as the decoded JSON dicts the
    server sends (users never carry a password field).

    Pass `transport` to route requests somewhere other than the network (tests).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        api_prefix: str = DEFAULT_API_PREFIX,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_prefix = api_prefix.rstrip("/")
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> UserApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> Any:
        try:
            resp = self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.warning("Request %s %s failed: %s", method, path, e)
            raise ApiError(500, "Network error occurred") from e
        if resp.is_error:
            try:
                body = resp.json()
            except ValueError:
                body = None
            message = body.get("error") if isinstance(body, dict) else None
            raise ApiError(
                resp.status_code,
                message or f"HTTP {resp.status_code}: {resp.reason_phrase}",
            )
        return resp.json()

    def _users_path(self, suffix: str = "") -> str:
        return f"{self._api_prefix}/users{suffix}"

    def get_users(self) -> dict[str, Any]:
        """Return {"users": [...], "count": N}."""
        return self._request("GET", self._users_path())

    def get_user_by_id(self, id: str) -> dict[str, Any]:
        return self._request("GET", self._users_path(f"/{quote(id, safe='')}"))

    def get_user_by_user_id(self, user_id: str) -> dict[str, Any]:
        return self._request("GET", self._users_path(f"/search?user_id={quote(user_id, safe='')}"))

    def get_user_by_email(self, email: str) -> dict[str, Any]:
        return self._request("GET", self._users_path(f"/search/email?email={quote(email, safe='')}"))

    def create_user(self, user_id: str, email: str, password: str) -> dict[str, Any]:
        return self._request(
            "POST",
            self._users_path(),
            json={"user_id": user_id, "email": email, "password": password},
        )

    def update_user(
        self,
        id: str,
        user_id: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> dict[str, Any]:
        """
        Send only the fields that are given (not None and not empty).

        Raises ValueError without calling the server when there is nothing to change;
        the server itself would accept an empty update and only bump updated_at.
        """
        changes = {
            name: value
            for name, value in (("user_id", user_id), ("email", email), ("password", password))
            if value
        }
        if not changes:
            raise ValueError("No changes to update")
        return self._request("PUT", self._users_path(f"/{quote(id, safe='')}"), json=changes)

    def delete_user(self, id: str) -> dict[str, Any]:
        return self._request("DELETE", self._users_path(f"/{quote(id, safe='')}"))

    def check_health(self) -> dict[str, Any]:
        return self._request("GET", "/health")
