# src/sources/firecrawl_renderer.py — v1
"""Screenshot rendering through the Firecrawl scrape API.

The provider is disabled (not an error) when FIRECRAWL_API_KEY is absent;
the screenshot chain then goes straight to the placeholder fallback.
"""

from __future__ import annotations

import logging

import httpx

from markmedia.core.errors import SourceError
from markmedia.core.models import NormalizedKey, ScreenshotOptions
from markmedia.http.client import HttpClient
from markmedia.sources.base_source import BaseSource

logger = logging.getLogger(__name__)


class FirecrawlRenderer(BaseSource):
    """Render a page and return the provider-hosted screenshot URL."""

    name = "firecrawl"

    def __init__(
        self,
        http: HttpClient,
        api_key: str = "",
        base_url: str = "https://api.firecrawl.dev",
        request_timeout_ms: int = 30_000,
    ) -> None:
        api_key = api_key.strip()
        super().__init__(enabled=bool(api_key))
        self._http = http
        self._api_key = api_key
        self._endpoint = f"{base_url.rstrip('/')}/v1/scrape"
        self._request_timeout_ms = request_timeout_ms

    def build_payload(self, url: str, options: ScreenshotOptions) -> dict:
        """Scrape request body for a screenshot-only render."""
        fmt = "screenshot@fullPage" if options.full_page else "screenshot"
        return {
            "url": url,
            "formats": [fmt],
            "onlyMainContent": False,
            "waitFor": options.wait_for_ms,
            "timeout": self._request_timeout_ms,
        }

    async def fetch(self, key: NormalizedKey, options: ScreenshotOptions) -> str:
        if not self._api_key:
            raise SourceError(self.name, "API key missing")

        try:
            response = await self._http.post_json(
                self._endpoint,
                self.build_payload(key.value, options),
                timeout_ms=self._request_timeout_ms,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as e:
            raise SourceError(self.name, f"request failed: {e}") from e

        if not response.is_success:
            raise SourceError(self.name, f"HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise SourceError(self.name, "response is not JSON") from e

        screenshot = (body.get("data") or {}).get("screenshot")
        if not body.get("success") or not screenshot:
            raise SourceError(self.name, "no screenshot returned")
        return screenshot
