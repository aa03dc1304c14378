"""Async HTTP client for the DevTerminal API."""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)


class ApiError(RuntimeError):
    """Raised when the API answers with a non-success status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ApiClient:
    """Thin wrapper mapping each API endpoint to a coroutine."""

    def __init__(
        self,
        base_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        token: str | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        response = await self._client.request(method, path, json=json, headers=headers)
        try:
            data = response.json()
        except ValueError:
            data = None

        if response.is_error:
            message = data.get("message") if isinstance(data, dict) else None
            logger.debug("%s %s failed with %s", method, path, response.status_code)
            raise ApiError(response.status_code, message or f"Request failed ({response.status_code})")
        return data

    async def register(self, username: str, password: str) -> dict[str, Any]:
        return await self._request("POST", "/api/auth/register", json={"username": username, "password": password})

    async def login(self, username: str, password: str) -> dict[str, Any]:
        return await self._request("POST", "/api/auth/login", json={"username": username, "password": password})

    async def create_post(self, token: str, content: str) -> dict[str, Any]:
        return await self._request("POST", "/api/posts", token=token, json={"content": content})

    async def feed(self, token: str) -> list[dict[str, Any]]:
        return await self._request("GET", "/api/posts/feed", token=token)

    async def toggle_like(self, token: str, post_id: int) -> str:
        data = await self._request("POST", f"/api/posts/{post_id}/like", token=token)
        return data["message"]

    async def toggle_follow(self, token: str, user_id: int) -> str:
        data = await self._request("POST", f"/api/users/follow/{user_id}", token=token)
        return data["message"]

    async def profile(self, token: str, username: str) -> dict[str, Any]:
        return await self._request("GET", f"/api/users/profile/{quote(username, safe='')}", token=token)

    async def health(self) -> dict[str, Any]:
        return await self._request("GET", "/api/health")
