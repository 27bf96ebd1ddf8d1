# src/sources/favicon_sources.py — v1
"""Favicon source strategies, in significance order.

The three provider sources only *build* a URL; the chain validates it with a
HEAD request. The direct probe does its own HEADs against conventional paths
and is therefore prevalidated.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from markmedia.core.errors import SourceError
from markmedia.core.models import FaviconOptions, NormalizedKey
from markmedia.http.client import HttpClient, is_image_response
from markmedia.sources.base_source import BaseSource

logger = logging.getLogger(__name__)

DIRECT_PATHS = ("/favicon.ico", "/favicon.png", "/apple-touch-icon.png")


class GoogleFaviconSource(BaseSource):
    """Google's size-parameterized favicon redirect service."""

    name = "google"

    async def fetch(self, key: NormalizedKey, options: FaviconOptions) -> str:
        return (
            "https://www.google.com/s2/favicons"
            f"?domain={quote(key.value)}&sz={options.size}"
        )


class ClearbitLogoSource(BaseSource):
    """Clearbit logo API."""

    name = "clearbit"

    async def fetch(self, key: NormalizedKey, options: FaviconOptions) -> str:
        return f"https://logo.clearbit.com/{quote(key.value)}?size={options.size}"


class DuckDuckGoIconSource(BaseSource):
    """DuckDuckGo icon API (no tracking, no key)."""

    name = "duckduckgo"

    async def fetch(self, key: NormalizedKey, options: FaviconOptions) -> str:
        return f"https://icons.duckduckgo.com/ip3/{quote(key.value)}.ico"


class DirectProbeSource(BaseSource):
    """Probe conventional icon paths on the site itself."""

    name = "direct"
    prevalidated = True

    def __init__(self, http: HttpClient, enabled: bool = True) -> None:
        super().__init__(enabled=enabled)
        self._http = http

    @staticmethod
    def candidate_urls(domain: str) -> list[str]:
        """Probe order: bare domain paths, then ``www.`` favicon.ico."""
        urls = [f"https://{domain}{path}" for path in DIRECT_PATHS]
        urls.append(f"https://www.{domain}/favicon.ico")
        return urls

    async def fetch(self, key: NormalizedKey, options: FaviconOptions) -> str:
        for url in self.candidate_urls(key.value):
            try:
                response = await self._http.head(url, options.timeout_ms)
            except httpx.HTTPError as e:
                logger.debug("Direct probe %s failed: %s", url, e)
                continue
            if is_image_response(response):
                return url
        raise SourceError(self.name, "no direct favicon found")


def default_favicon_sources(
    http: HttpClient,
    google: bool = True,
    clearbit: bool = True,
    duckduckgo: bool = True,
    direct: bool = True,
) -> list[BaseSource]:
    """Favicon chain in declared significance order."""
    return [
        GoogleFaviconSource(enabled=google),
        ClearbitLogoSource(enabled=clearbit),
        DuckDuckGoIconSource(enabled=duckduckgo),
        DirectProbeSource(http, enabled=direct),
    ]
