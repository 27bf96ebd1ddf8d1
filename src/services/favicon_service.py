# src/services/favicon_service.py — v1
"""Favicon lookups: normalize → gate → durable cache → source chain → fallback.

Usage:
    service = FaviconService(resolver, cache, gate, fallback)
    await service.start()
    result = await service.get_favicon("https://www.example.com/page")
"""

from __future__ import annotations

import logging
from typing import Iterable

from markmedia.cache.keys import favicon_cache_key, normalize_domain
from markmedia.cache.resource_cache import ResourceCache
from markmedia.core.errors import ResourceUnavailableError
from markmedia.core.models import FaviconOptions, FaviconResult, NormalizedKey
from markmedia.logging.context import set_lookup_context
from markmedia.resolver.bulk import resolve_many
from markmedia.resolver.chain import SourceChainResolver
from markmedia.resolver.fallback import FallbackGenerator
from markmedia.resolver.gate import RequestGate

logger = logging.getLogger(__name__)


class FaviconService:
    """Resolved-resource cache for favicons, keyed by domain."""

    def __init__(
        self,
        resolver: SourceChainResolver,
        cache: ResourceCache,
        gate: RequestGate,
        fallback: FallbackGenerator,
        defaults: FaviconOptions | None = None,
    ) -> None:
        self._resolver = resolver
        self._cache = cache
        self._gate = gate
        self._fallback = fallback
        self._defaults = defaults or FaviconOptions()

    @property
    def gate(self) -> RequestGate:
        return self._gate

    async def start(self) -> None:
        """Ensure the favicon bucket exists."""
        await self._cache.start()

    async def get_favicon(
        self, domain: str, options: FaviconOptions | None = None
    ) -> FaviconResult:
        """Resolve the favicon for a domain (or any URL on it).

        Raises:
            InvalidInputError: If no domain remains after normalization.
            ResourceUnavailableError: If every source failed and
                ``fallback_to_generic`` is False.
        """
        opts = options or self._defaults
        key = normalize_domain(domain)
        cache_key = favicon_cache_key(key, opts.size)

        return await self._gate.run(
            cache_key,
            key.origin,
            lambda: self._resolve(key, cache_key, opts),
            lambda: self._fallback.favicon(key, opts.size),
        )

    async def bulk_process_favicons(
        self, domains: Iterable[str], options: FaviconOptions | None = None
    ) -> dict[str, FaviconResult]:
        """Resolve many domains; failing ones are omitted from the map."""
        return await resolve_many(
            domains, lambda domain: self.get_favicon(domain, options)
        )

    async def _resolve(
        self, key: NormalizedKey, cache_key: str, opts: FaviconOptions
    ) -> FaviconResult:
        set_lookup_context("favicon", cache_key)

        if opts.use_cache:
            cached = await self._cache.lookup(cache_key)
            if cached:
                logger.debug("Cache hit for %s", key.value)
                return FaviconResult(
                    url=cached, source="cache", cached=True, size=opts.size
                )

        outcome = await self._resolver.resolve(key, opts, opts.timeout_ms)
        if outcome is not None:
            if opts.use_cache:
                await self._cache.store_from_url(cache_key, outcome.url)
            return FaviconResult(
                url=outcome.url, source=outcome.source, cached=False, size=opts.size
            )

        if opts.fallback_to_generic:
            return self._fallback.favicon(key, opts.size)
        raise ResourceUnavailableError(key.value)
