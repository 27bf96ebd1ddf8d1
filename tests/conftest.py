# tests/conftest.py — v1
"""Shared test fixtures for all unit tests.

Provides a scripted HTTP transport, a controllable clock, fake source
strategies and a local blob store in a temp dir.
No network access — all HTTP goes through httpx.MockTransport.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

import httpx
import pytest

from markmedia.cache.local_store import LocalBlobStore
from markmedia.cache.resource_cache import ResourceCache
from markmedia.config.settings import Settings
from markmedia.core.errors import SourceError
from markmedia.core.models import NormalizedKey
from markmedia.http.client import HttpClient
from markmedia.logging.context import clear_context
from markmedia.resolver.fallback import FallbackGenerator
from markmedia.resolver.gate import RequestGate
from markmedia.sources.base_source import BaseSource

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


# === HTTP ===


@dataclass
class Route:
    status: int = 200
    content_type: str = "image/png"
    body: bytes = PNG_BYTES
    delay_s: float = 0.0
    error: Exception | None = None
    headers: dict[str, str] = field(default_factory=dict)


class RouteTable:
    """Scripted responses keyed by full URL; unknown URLs get a 404 page."""

    def __init__(self) -> None:
        self.routes: dict[str, Route] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, **kwargs) -> Route:
        route = Route(**kwargs)
        self.routes[url] = route
        return route

    def count(self, url: str, method: str | None = None) -> int:
        return sum(
            1
            for r in self.requests
            if str(r.url) == url and (method is None or r.method == method)
        )

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(
                404, headers={"content-type": "text/html"}, content=b"not found"
            )
        if route.delay_s:
            await asyncio.sleep(route.delay_s)
        if route.error is not None:
            raise route.error
        headers = {"content-type": route.content_type, **route.headers}
        if request.method == "HEAD":
            return httpx.Response(route.status, headers=headers)
        return httpx.Response(route.status, headers=headers, content=route.body)


@pytest.fixture
def routes() -> RouteTable:
    return RouteTable()


@pytest.fixture
def http(routes: RouteTable) -> HttpClient:
    """HttpClient wired to the route table."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(routes.handler))
    return HttpClient(client=client)


# === Clock / gate ===


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gate(clock: FakeClock) -> RequestGate:
    return RequestGate(min_interval_ms=1000, clock=clock)


# === Sources ===


class FakeSource(BaseSource):
    """Scripted source strategy that counts invocations."""

    def __init__(
        self,
        name: str,
        url: str | None = None,
        error: Exception | None = None,
        delay_s: float = 0.0,
        prevalidated: bool = True,
        enabled: bool = True,
    ) -> None:
        super().__init__(enabled=enabled)
        self.name = name
        self.url = url
        self.error = error
        self.delay_s = delay_s
        self.prevalidated = prevalidated
        self.calls = 0

    async def fetch(self, key: NormalizedKey, options) -> str:
        self.calls += 1
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.error is not None:
            raise self.error
        if self.url is None:
            raise SourceError(self.name, "scripted failure")
        return self.url


@pytest.fixture
def make_source():
    """Factory for FakeSource instances."""
    return FakeSource


# === Storage ===


@pytest.fixture
def local_store(tmp_path: Path) -> LocalBlobStore:
    return LocalBlobStore(
        root=tmp_path / "storage",
        bucket="favicons",
        public_base_url="https://cdn.test/storage",
    )


@pytest.fixture
def resource_cache(local_store: LocalBlobStore, http: HttpClient) -> ResourceCache:
    return ResourceCache(local_store, http)


@pytest.fixture
def fallback() -> FallbackGenerator:
    return FallbackGenerator()


# === Settings ===


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from any .env file."""
    return Settings(
        _env_file=None,
        local_storage_root=tmp_path / "storage",
        local_public_base_url="https://cdn.test/storage",
    )


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()
