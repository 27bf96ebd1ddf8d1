# tests/unit/cache/test_resource_cache.py — v1
"""Tests for cache/resource_cache.py."""

from __future__ import annotations

import base64
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from markmedia.cache.resource_cache import ResourceCache, decode_data_uri, object_key

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class TestObjectKey:
    def test_png_suffix(self):
        assert object_key("example.com-abc") == "example.com-abc.png"


class TestDecodeDataUri:
    def test_base64_png(self):
        payload = base64.b64encode(PNG_BYTES).decode()
        data, content_type = decode_data_uri(f"data:image/png;base64,{payload}")
        assert data == PNG_BYTES
        assert content_type == "image/png"

    def test_not_base64(self):
        assert decode_data_uri("data:image/svg+xml,<svg/>") is None

    def test_corrupt_payload(self):
        assert decode_data_uri("data:image/png;base64,!!!") is None


class TestLookup:
    @pytest.mark.asyncio
    async def test_miss(self, resource_cache):
        assert await resource_cache.lookup("example.com-abc") is None

    @pytest.mark.asyncio
    async def test_store_then_hit(self, resource_cache, routes):
        routes.add("https://icons.test/a.png")
        assert await resource_cache.store_from_url("example.com-abc", "https://icons.test/a.png")
        url = await resource_cache.lookup("example.com-abc")
        assert url == "https://cdn.test/storage/favicons/example.com-abc.png"

    @pytest.mark.asyncio
    async def test_store_failure_reads_as_miss(self, http):
        store = MagicMock()
        store.bucket = "favicons"
        store.get = AsyncMock(side_effect=RuntimeError("unreachable"))
        cache = ResourceCache(store, http)
        assert await cache.lookup("k") is None


class TestStoreFromUrl:
    @pytest.mark.asyncio
    async def test_writes_downloaded_bytes(self, resource_cache, routes, tmp_path):
        routes.add("https://icons.test/a.ico", content_type="image/x-icon", body=b"ico")
        assert await resource_cache.store_from_url("k", "https://icons.test/a.ico")
        assert (tmp_path / "storage" / "favicons" / "k.png").read_bytes() == b"ico"

    @pytest.mark.asyncio
    async def test_http_error_status_not_written(self, resource_cache):
        assert not await resource_cache.store_from_url("k", "https://icons.test/missing")
        assert await resource_cache.lookup("k") is None

    @pytest.mark.asyncio
    async def test_transport_error_swallowed(self, resource_cache, routes):
        routes.add("https://icons.test/a.png", error=httpx.ConnectError("down"))
        assert not await resource_cache.store_from_url("k", "https://icons.test/a.png")

    @pytest.mark.asyncio
    async def test_upload_error_swallowed(self, http, routes):
        routes.add("https://icons.test/a.png")
        store = MagicMock()
        store.put = AsyncMock(side_effect=RuntimeError("quota exceeded"))
        cache = ResourceCache(store, http)
        assert not await cache.store_from_url("k", "https://icons.test/a.png")

    @pytest.mark.asyncio
    async def test_data_uri(self, resource_cache):
        payload = base64.b64encode(PNG_BYTES).decode()
        assert await resource_cache.store_from_url("k", f"data:image/png;base64,{payload}")
        assert await resource_cache.lookup("k") is not None

    @pytest.mark.asyncio
    async def test_non_image_content_type_defaults_to_png(self, http, routes):
        routes.add("https://icons.test/a", content_type="application/octet-stream")
        store = MagicMock()
        store.put = AsyncMock()
        cache = ResourceCache(store, http)
        assert await cache.store_from_url("k", "https://icons.test/a")
        assert store.put.call_args.args[2] == "image/png"


class TestStart:
    @pytest.mark.asyncio
    async def test_start_creates_bucket(self, resource_cache, tmp_path):
        await resource_cache.start()
        assert (tmp_path / "storage" / "favicons").is_dir()

    @pytest.mark.asyncio
    async def test_start_never_raises(self, http):
        store = MagicMock()
        store.bucket = "favicons"
        store.ensure_bucket = AsyncMock(side_effect=RuntimeError("denied"))
        await ResourceCache(store, http).start()
