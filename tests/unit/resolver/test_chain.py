# tests/unit/resolver/test_chain.py — v1
"""Tests for resolver/chain.py — ordering, short-circuit, timeouts."""

from __future__ import annotations

import asyncio

import pytest

from markmedia.core.errors import AttemptTimeoutError
from markmedia.core.models import FaviconOptions, NormalizedKey
from markmedia.resolver.chain import SourceChainResolver, race_timeout

KEY = NormalizedKey(kind="favicon", value="example.com", origin="example.com")
OPTS = FaviconOptions()


class TestRaceTimeout:
    @pytest.mark.asyncio
    async def test_returns_value(self):
        async def quick():
            return 42

        assert await race_timeout(quick(), 100, "s") == 42

    @pytest.mark.asyncio
    async def test_times_out(self):
        async def slow():
            await asyncio.sleep(1)

        with pytest.raises(AttemptTimeoutError) as exc:
            await race_timeout(slow(), 20, "slow")
        assert exc.value.source == "slow"
        assert exc.value.timeout_ms == 20

    @pytest.mark.asyncio
    async def test_propagates_errors(self):
        async def broken():
            raise KeyError("x")

        with pytest.raises(KeyError):
            await race_timeout(broken(), 100, "s")


class TestResolve:
    @pytest.mark.asyncio
    async def test_first_success_short_circuits(self, http, make_source):
        a = make_source("a", url="https://a.test/icon.png")
        b = make_source("b", url="https://b.test/icon.png")
        outcome = await SourceChainResolver([a, b], http).resolve(KEY, OPTS, 100)
        assert outcome.source == "a"
        assert outcome.url == "https://a.test/icon.png"
        assert a.calls == 1
        assert b.calls == 0

    @pytest.mark.asyncio
    async def test_failure_moves_to_next(self, http, make_source):
        a = make_source("a")
        b = make_source("b", url="https://b.test/icon.png")
        outcome = await SourceChainResolver([a, b], http).resolve(KEY, OPTS, 100)
        assert outcome.source == "b"

    @pytest.mark.asyncio
    async def test_unexpected_exception_moves_to_next(self, http, make_source):
        a = make_source("a", error=RuntimeError("bug"))
        b = make_source("b", url="https://b.test/icon.png")
        outcome = await SourceChainResolver([a, b], http).resolve(KEY, OPTS, 100)
        assert outcome.source == "b"

    @pytest.mark.asyncio
    async def test_disabled_source_skipped(self, http, make_source):
        a = make_source("a", url="https://a.test/icon.png", enabled=False)
        b = make_source("b", url="https://b.test/icon.png")
        chain = SourceChainResolver([a, b], http)
        assert chain.enabled_sources == ["b"]
        outcome = await chain.resolve(KEY, OPTS, 100)
        assert outcome.source == "b"
        assert a.calls == 0

    @pytest.mark.asyncio
    async def test_slow_source_costs_one_window(self, http, make_source):
        a = make_source("a", url="https://a.test/icon.png", delay_s=0.3)
        b = make_source("b", url="https://b.test/icon.png")
        loop = asyncio.get_running_loop()
        started = loop.time()
        outcome = await SourceChainResolver([a, b], http).resolve(KEY, OPTS, 50)
        assert outcome.source == "b"
        assert loop.time() - started < 0.25

    @pytest.mark.asyncio
    async def test_exhaustion_returns_none(self, http, make_source):
        chain = SourceChainResolver([make_source("a"), make_source("b")], http)
        assert await chain.resolve(KEY, OPTS, 100) is None

    @pytest.mark.asyncio
    async def test_empty_chain_returns_none(self, http):
        assert await SourceChainResolver([], http).resolve(KEY, OPTS, 100) is None

    @pytest.mark.asyncio
    async def test_empty_candidate_rejected(self, http, make_source):
        a = make_source("a", url="")
        b = make_source("b", url="https://b.test/icon.png")
        outcome = await SourceChainResolver([a, b], http).resolve(KEY, OPTS, 100)
        assert outcome.source == "b"


class TestValidation:
    @pytest.mark.asyncio
    async def test_html_candidate_rejected(self, http, routes, make_source):
        routes.add("https://a.test/icon", content_type="text/html")
        routes.add("https://b.test/icon.png")
        a = make_source("a", url="https://a.test/icon", prevalidated=False)
        b = make_source("b", url="https://b.test/icon.png", prevalidated=False)
        outcome = await SourceChainResolver([a, b], http).resolve(KEY, OPTS, 100)
        assert outcome.source == "b"
        assert routes.count("https://a.test/icon", "HEAD") == 1

    @pytest.mark.asyncio
    async def test_error_status_rejected(self, http, routes, make_source):
        routes.add("https://a.test/icon.png", status=404)
        a = make_source("a", url="https://a.test/icon.png", prevalidated=False)
        assert await SourceChainResolver([a], http).resolve(KEY, OPTS, 100) is None

    @pytest.mark.asyncio
    async def test_icon_content_type_accepted(self, http, routes, make_source):
        routes.add("https://a.test/favicon.ico", content_type="image/x-icon")
        a = make_source("a", url="https://a.test/favicon.ico", prevalidated=False)
        outcome = await SourceChainResolver([a], http).resolve(KEY, OPTS, 100)
        assert outcome.source == "a"

    @pytest.mark.asyncio
    async def test_prevalidated_skips_head(self, http, routes, make_source):
        a = make_source("a", url="https://a.test/icon.png", prevalidated=True)
        await SourceChainResolver([a], http).resolve(KEY, OPTS, 100)
        assert routes.requests == []

    @pytest.mark.asyncio
    async def test_data_uri_skips_head(self, http, routes, make_source):
        a = make_source("a", url="data:image/png;base64,AAAA", prevalidated=False)
        outcome = await SourceChainResolver([a], http).resolve(KEY, OPTS, 100)
        assert outcome.url.startswith("data:image/")
        assert routes.requests == []
