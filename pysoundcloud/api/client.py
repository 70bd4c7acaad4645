"""Thin aiohttp client for the SoundCloud REST API."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

import aiohttp

from pysoundcloud.errors import ApiError
from pysoundcloud.models import Group, MiniUser

logger = logging.getLogger("pysoundcloud.api")

DEFAULT_BASE_URL = "https://api.soundcloud.com"


class SoundCloudClient:
    """Fetches SoundCloud resources on behalf of an authenticated user.

    Usage::

        async with SoundCloudClient(token) as client:
            group = await client.get_group("123")
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._access_token = access_token
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "SoundCloudClient":
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def _get(self, path: str) -> dict[str, Any]:
        if self._session is None:
            raise RuntimeError("client is not open; use `async with SoundCloudClient(...)`")
        url = f"{self._base_url}{path}"
        headers = {
            "Authorization": f"OAuth {self._access_token}",
            "Accept": "application/json",
        }
        logger.debug("GET %s", url)
        try:
            async with self._session.get(url, headers=headers) as resp:
                if not resp.ok:
                    text = await resp.text()
                    raise ApiError(resp.status, text.strip() or resp.reason or "request failed")
                try:
                    data = await resp.json(content_type=None)
                except json.JSONDecodeError as exc:
                    raise ApiError(resp.status, "invalid JSON in response") from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise ApiError(None, f"request to {url} failed: {exc}") from exc

        if not isinstance(data, dict):
            raise ApiError(resp.status, "expected a JSON object")
        return data

    async def get_group(self, group_id: str) -> Group:
        return Group.from_dict(await self._get(f"/groups/{group_id}"))

    async def get_user(self, user_id: str) -> MiniUser:
        return MiniUser.from_dict(await self._get(f"/users/{user_id}"))

    async def get_me(self) -> MiniUser:
        """The user the access token belongs to."""
        return MiniUser.from_dict(await self._get("/me"))
