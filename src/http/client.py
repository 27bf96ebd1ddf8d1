# src/http/client.py — v1
"""Outbound HTTP with per-call timeouts.

Thin wrapper over a shared ``httpx.AsyncClient`` so that every network call
in the cache layer goes through one connection pool and one set of headers.
The client is owned by the composition root and closed there.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_HTTP_LIMITS = httpx.Limits(
    max_keepalive_connections=50,
    max_connections=100,
)

IMAGE_CONTENT_MARKERS = ("image", "icon")


class HttpClient:
    """Async HTTP GET/HEAD/POST with a timeout per call."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        user_agent: str | None = None,
    ) -> None:
        headers = {"User-Agent": user_agent} if user_agent else None
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            follow_redirects=True,
            limits=DEFAULT_HTTP_LIMITS,
            headers=headers,
        )

    async def head(self, url: str, timeout_ms: int) -> httpx.Response:
        """Issue a HEAD request."""
        return await self._client.head(url, timeout=_seconds(timeout_ms))

    async def get(self, url: str, timeout_ms: int) -> httpx.Response:
        """Issue a GET request and read the body."""
        return await self._client.get(url, timeout=_seconds(timeout_ms))

    async def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        timeout_ms: int,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """POST a JSON body."""
        return await self._client.post(
            url, json=payload, headers=headers, timeout=_seconds(timeout_ms)
        )

    async def is_image(self, url: str, timeout_ms: int) -> bool:
        """HEAD ``url`` and report whether it serves an image.

        Requires a 2xx status and a Content-Type mentioning ``image`` or
        ``icon``. Transport errors count as "not an image".
        """
        try:
            response = await self.head(url, timeout_ms)
        except httpx.HTTPError as e:
            logger.debug("HEAD %s failed: %s", url, e)
            return False
        return is_image_response(response)

    async def aclose(self) -> None:
        """Close the underlying client if this wrapper created it."""
        if self._owns_client:
            await self._client.aclose()


def is_image_response(response: httpx.Response) -> bool:
    """2xx status and an image-like Content-Type."""
    if not response.is_success:
        return False
    content_type = response.headers.get("content-type", "").lower()
    return any(marker in content_type for marker in IMAGE_CONTENT_MARKERS)


def _seconds(timeout_ms: int) -> float:
    return timeout_ms / 1000.0
