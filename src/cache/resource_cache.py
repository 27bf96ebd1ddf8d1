# src/cache/resource_cache.py — v1
"""Durable resource cache: blob store + best-effort persistence.

``lookup`` and ``store_from_url`` never raise. A store that is unreachable reads as a
miss and a failed upload is logged and skipped.
"""

from __future__ import annotations

import base64
import binascii
import logging

from markmedia.cache.base_blob_store import BaseBlobStore
from markmedia.http.client import HttpClient

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "image/png"
OBJECT_SUFFIX = ".png"


class ResourceCache:
    """Check-before / write-after cache around one blob bucket."""

    def __init__(
        self,
        store: BaseBlobStore,
        http: HttpClient,
        download_timeout_ms: int = 10_000,
    ) -> None:
        self._store = store
        self._http = http
        self._download_timeout_ms = download_timeout_ms

    @property
    def store(self) -> BaseBlobStore:
        return self._store

    async def start(self) -> None:
        """Ensure the backing bucket exists."""
        try:
            await self._store.ensure_bucket()
        except Exception:
            logger.warning(
                "Bucket setup failed for %s", self._store.bucket, exc_info=True
            )

    async def lookup(self, cache_key: str) -> str | None:
        """Public URL of the cached object, or None on miss/unavailability."""
        try:
            return await self._store.get(object_key(cache_key))
        except Exception as e:
            logger.warning("Cache lookup failed for %s: %s", cache_key, e)
            return None

    async def store_from_url(self, cache_key: str, source_url: str) -> bool:
        """Download ``source_url`` and upload it under ``cache_key``.

        Returns:
            True if the object was written.
        """
        try:
            fetched = await self._download(source_url)
            if fetched is None:
                return False
            data, content_type = fetched
            await self._store.put(object_key(cache_key), data, content_type)
            logger.debug("Cached %s (%d bytes)", cache_key, len(data))
            return True
        except Exception as e:
            logger.warning("Failed to cache %s: %s", cache_key, e)
            return False

    async def _download(self, source_url: str) -> tuple[bytes, str] | None:
        if source_url.startswith("data:"):
            return decode_data_uri(source_url)

        response = await self._http.get(source_url, self._download_timeout_ms)
        if not response.is_success:
            logger.debug(
                "Download of %s returned HTTP %d", source_url, response.status_code
            )
            return None
        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        if not content_type.startswith("image/"):
            content_type = DEFAULT_CONTENT_TYPE
        return response.content, content_type


def object_key(cache_key: str) -> str:
    """Blob object key for a cache key."""
    return f"{cache_key}{OBJECT_SUFFIX}"


def decode_data_uri(uri: str) -> tuple[bytes, str] | None:
    """Decode a base64 ``data:image/...`` URI into (bytes, content type)."""
    header, sep, payload = uri.partition(",")
    if not sep or ";base64" not in header:
        return None
    content_type = header[len("data:"):].split(";")[0] or DEFAULT_CONTENT_TYPE
    try:
        return base64.b64decode(payload, validate=True), content_type
    except (binascii.Error, ValueError):
        return None
