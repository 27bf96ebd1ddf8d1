# src/api/facade.py — v1
"""Composition root — builds the favicon and screenshot services.

Usage:
    from markmedia.api.facade import build_services
    services = build_services(load_settings())
    await services.start()
    result = await services.favicons.get_favicon("example.com")
    await services.aclose()

Route handlers receive a ``MediaServices`` instance instead of importing
module-level singletons, so the cache layer stays testable on its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from markmedia.cache.cache_factory import create_blob_store
from markmedia.cache.resource_cache import ResourceCache
from markmedia.config.settings import Settings
from markmedia.core.models import (
    FaviconOptions,
    FaviconResult,
    ScreenshotOptions,
    ScreenshotResult,
)
from markmedia.http.client import HttpClient
from markmedia.resolver.chain import SourceChainResolver
from markmedia.resolver.fallback import FallbackGenerator
from markmedia.resolver.gate import RequestGate
from markmedia.services.favicon_service import FaviconService
from markmedia.services.screenshot_service import ScreenshotService
from markmedia.sources.favicon_sources import default_favicon_sources
from markmedia.sources.firecrawl_renderer import FirecrawlRenderer
from markmedia.thumbnails.passthrough import PassthroughThumbnailGenerator

if TYPE_CHECKING:
    from markmedia.cache.base_blob_store import BaseBlobStore

logger = logging.getLogger(__name__)


@dataclass
class MediaServices:
    """Wired services sharing one HTTP client."""

    settings: Settings
    http: HttpClient
    favicons: FaviconService
    screenshots: ScreenshotService

    async def start(self) -> None:
        """Ensure both buckets exist. Safe to call more than once."""
        await self.favicons.start()
        await self.screenshots.start()

    async def aclose(self) -> None:
        await self.http.aclose()


def build_services(
    settings: Settings | None = None,
    http: HttpClient | None = None,
    favicon_store: BaseBlobStore | None = None,
    screenshot_store: BaseBlobStore | None = None,
) -> MediaServices:
    """Wire every component from settings.

    Args:
        settings: Global settings. Loaded from .env if None.
        http: Shared HTTP client. Created from settings if None.
        favicon_store: Override for the favicon bucket backend.
        screenshot_store: Override for the screenshot bucket backend.

    Returns:
        MediaServices ready for ``start()``.
    """
    settings = settings or Settings()
    http = http or HttpClient(user_agent=settings.http_user_agent)

    favicon_store = favicon_store or create_blob_store(
        settings, settings.favicon_bucket, http
    )
    screenshot_store = screenshot_store or create_blob_store(
        settings, settings.screenshot_bucket, http
    )

    fallback = FallbackGenerator(
        background=settings.fallback_background,
        foreground=settings.fallback_foreground,
        thumbnail_sizes=settings.thumbnail_sizes,
    )

    favicon_sources = default_favicon_sources(
        http,
        google=settings.favicon_google_enabled,
        clearbit=settings.favicon_clearbit_enabled,
        duckduckgo=settings.favicon_duckduckgo_enabled,
        direct=settings.favicon_direct_enabled,
    )
    renderer = FirecrawlRenderer(
        http,
        api_key=settings.firecrawl_api_key,
        base_url=settings.firecrawl_base_url,
        request_timeout_ms=settings.firecrawl_request_timeout_ms,
    )
    if not settings.firecrawl_enabled:
        logger.warning(
            "FIRECRAWL_API_KEY not set - screenshots will use placeholders"
        )

    favicons = FaviconService(
        resolver=SourceChainResolver(favicon_sources, http),
        cache=ResourceCache(
            favicon_store, http, settings.cache_download_timeout_ms
        ),
        gate=RequestGate(settings.min_request_interval_ms),
        fallback=fallback,
        defaults=FaviconOptions(
            size=settings.favicon_default_size,
            timeout_ms=settings.favicon_timeout_ms,
        ),
    )
    screenshots = ScreenshotService(
        resolver=SourceChainResolver([renderer], http),
        cache=ResourceCache(
            screenshot_store, http, settings.cache_download_timeout_ms
        ),
        gate=RequestGate(settings.min_request_interval_ms),
        fallback=fallback,
        thumbnails=PassthroughThumbnailGenerator(settings.thumbnail_sizes),
        defaults=ScreenshotOptions(
            timeout_ms=settings.screenshot_timeout_ms,
            quality=settings.screenshot_quality,
            wait_for_ms=settings.screenshot_wait_for_ms,
        ),
    )

    return MediaServices(
        settings=settings, http=http, favicons=favicons, screenshots=screenshots
    )


async def resolve_favicons(
    services: MediaServices,
    domains: list[str],
    options: FaviconOptions | None = None,
) -> dict[str, FaviconResult]:
    """Bulk favicon entry point with the per-request item cap.

    Raises:
        ValueError: If more than ``bulk_max_items`` domains are requested.
    """
    _check_batch(domains, services.settings.bulk_max_items)
    return await services.favicons.bulk_process_favicons(domains, options)


async def capture_screenshots(
    services: MediaServices,
    urls: list[str],
    options: ScreenshotOptions | None = None,
) -> dict[str, ScreenshotResult]:
    """Bulk screenshot entry point with the per-request item cap.

    Raises:
        ValueError: If more than ``bulk_max_items`` URLs are requested.
    """
    _check_batch(urls, services.settings.bulk_max_items)
    return await services.screenshots.bulk_capture_screenshots(urls, options)


def _check_batch(items: list[str], max_items: int) -> None:
    if len(items) > max_items:
        raise ValueError(
            f"Maximum {max_items} items allowed per bulk request, got {len(items)}"
        )
