# src/services/screenshot_service.py — v1
"""Screenshot lookups: normalize → gate → durable cache → renderer → fallback.

A rendering failure of any kind (missing credentials, timeout, provider
error, non-image result) resolves to the placeholder; the only error a
caller can see is an unusable URL.
"""

from __future__ import annotations

import logging
from typing import Iterable

from markmedia.cache.keys import normalize_url, screenshot_cache_key
from markmedia.cache.resource_cache import ResourceCache
from markmedia.core.models import (
    NormalizedKey,
    ScreenshotOptions,
    ScreenshotResult,
    Thumbnails,
)
from markmedia.logging.context import set_lookup_context
from markmedia.resolver.bulk import resolve_many
from markmedia.resolver.chain import SourceChainResolver
from markmedia.resolver.fallback import FallbackGenerator
from markmedia.resolver.gate import RequestGate
from markmedia.thumbnails.base_thumbnail_generator import BaseThumbnailGenerator

logger = logging.getLogger(__name__)


class ScreenshotService:
    """Resolved-resource cache for page screenshots, keyed by URL."""

    def __init__(
        self,
        resolver: SourceChainResolver,
        cache: ResourceCache,
        gate: RequestGate,
        fallback: FallbackGenerator,
        thumbnails: BaseThumbnailGenerator,
        defaults: ScreenshotOptions | None = None,
    ) -> None:
        self._resolver = resolver
        self._cache = cache
        self._gate = gate
        self._fallback = fallback
        self._thumbnails = thumbnails
        self._defaults = defaults or ScreenshotOptions()

    @property
    def gate(self) -> RequestGate:
        return self._gate

    async def start(self) -> None:
        """Ensure the screenshot bucket exists."""
        await self._cache.start()

    async def capture_screenshot(
        self, url: str, options: ScreenshotOptions | None = None
    ) -> ScreenshotResult:
        """Resolve a screenshot for an absolute URL.

        Raises:
            InvalidInputError: If ``url`` is not a usable http(s) URL.
        """
        opts = options or self._defaults
        key = normalize_url(url)
        cache_key = screenshot_cache_key(key, opts.full_page, opts.quality)

        return await self._gate.run(
            cache_key,
            key.origin,
            lambda: self._resolve(key, cache_key, opts),
            lambda: self._fallback.screenshot(key),
        )

    async def bulk_capture_screenshots(
        self, urls: Iterable[str], options: ScreenshotOptions | None = None
    ) -> dict[str, ScreenshotResult]:
        """Capture many URLs; failing ones are omitted from the map."""
        return await resolve_many(
            urls, lambda url: self.capture_screenshot(url, options)
        )

    async def _resolve(
        self, key: NormalizedKey, cache_key: str, opts: ScreenshotOptions
    ) -> ScreenshotResult:
        set_lookup_context("screenshot", cache_key)

        if opts.use_cache:
            cached = await self._cache.lookup(cache_key)
            if cached:
                logger.debug("Cache hit for %s", key.value)
                return ScreenshotResult(
                    url=cached,
                    thumbnails=Thumbnails.uniform(cached),
                    source="cache",
                    cached=True,
                )

        outcome = await self._resolver.resolve(key, opts, opts.timeout_ms)
        if outcome is None:
            return self._fallback.screenshot(key)

        thumbnails = Thumbnails.uniform(outcome.url)
        if opts.generate_thumbnails:
            thumbnails = await self._generate_thumbnails(outcome.url, cache_key)

        if opts.use_cache:
            await self._cache.store_from_url(cache_key, outcome.url)

        return ScreenshotResult(
            url=outcome.url,
            thumbnails=thumbnails,
            source=outcome.source,
            cached=False,
        )

    async def _generate_thumbnails(self, image_url: str, cache_key: str) -> Thumbnails:
        try:
            return await self._thumbnails.generate(image_url, cache_key)
        except Exception as e:
            logger.warning("Thumbnail generation failed for %s: %s", cache_key, e)
            return Thumbnails.uniform(image_url)
