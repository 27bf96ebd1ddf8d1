# tests/unit/cache/test_keys.py — v1
"""Tests for cache/keys.py — normalization and cache-key derivation."""

from __future__ import annotations

import pytest

from markmedia.cache.keys import (
    favicon_cache_key,
    normalize_domain,
    normalize_url,
    screenshot_cache_key,
    short_digest,
)
from markmedia.core.errors import InvalidInputError


class TestNormalizeDomain:
    def test_strips_scheme_www_and_path(self):
        key = normalize_domain("https://www.Example.com/page")
        assert key.value == "example.com"
        assert key.origin == "example.com"
        assert key.kind == "favicon"

    @pytest.mark.parametrize("raw", [
        "example.com",
        "EXAMPLE.COM",
        "http://example.com",
        "www.example.com/",
        "example.com:8080/path?q=1",
        "  https://example.com#top ",
        "https://user:pw@example.com/",
    ])
    def test_equivalent_spellings(self, raw):
        assert normalize_domain(raw).value == "example.com"

    def test_subdomain_kept(self):
        assert normalize_domain("https://docs.python.org/3/").value == "docs.python.org"

    def test_malformed_degrades_to_cleanup(self):
        assert normalize_domain("not a domain").value == "not a domain"

    @pytest.mark.parametrize("raw", ["", "   ", "https://", "www./path"])
    def test_empty_after_normalization_rejected(self, raw):
        with pytest.raises(InvalidInputError):
            normalize_domain(raw)


class TestNormalizeUrl:
    def test_canonical_form(self):
        key = normalize_url("HTTPS://WWW.Example.com:443")
        assert key.value == "https://www.example.com/"
        assert key.origin == "example.com"
        assert key.kind == "screenshot"

    def test_non_default_port_kept(self):
        assert normalize_url("http://example.com:8080/a").value == "http://example.com:8080/a"

    def test_default_http_port_dropped(self):
        assert normalize_url("http://example.com:80/a").value == "http://example.com/a"

    def test_fragment_removed_and_query_sorted(self):
        key = normalize_url("https://example.com/p?b=2&a=1#section")
        assert key.value == "https://example.com/p?a=1&b=2"

    def test_missing_scheme_defaults_to_https(self):
        assert normalize_url("example.com/page").value == "https://example.com/page"

    def test_path_case_preserved(self):
        assert normalize_url("https://example.com/CaseSensitive").value.endswith(
            "/CaseSensitive"
        )

    @pytest.mark.parametrize("raw", [
        "",
        "ftp://example.com/file",
        "javascript://alert(1)",
        "https://",
        "http://example.com:notaport/",
    ])
    def test_invalid_urls_rejected(self, raw):
        with pytest.raises(InvalidInputError):
            normalize_url(raw)

    def test_invalid_input_error_is_value_error(self):
        with pytest.raises(ValueError):
            normalize_url("mailto://someone")


class TestCacheKeys:
    def test_favicon_key_depends_on_size(self):
        key = normalize_domain("example.com")
        assert favicon_cache_key(key, 32) != favicon_cache_key(key, 64)
        assert favicon_cache_key(key, 32) == favicon_cache_key(key, 32)
        assert favicon_cache_key(key, 32).startswith("example.com-")

    def test_favicon_key_same_for_equivalent_inputs(self):
        a = normalize_domain("https://www.example.com/x")
        b = normalize_domain("EXAMPLE.com")
        assert favicon_cache_key(a, 32) == favicon_cache_key(b, 32)

    def test_favicon_key_is_storage_safe(self):
        key = normalize_domain("not a domain")
        assert " " not in favicon_cache_key(key, 32)

    def test_favicon_key_distinguishes_idn_domains(self):
        a = favicon_cache_key(normalize_domain("bücher.de"), 32)
        b = favicon_cache_key(normalize_domain("bächer.de"), 32)
        assert a != b

    def test_favicon_key_distinguishes_long_shared_prefix(self):
        stem = "a" * 120
        a = favicon_cache_key(normalize_domain(f"{stem}.example.com"), 32)
        b = favicon_cache_key(normalize_domain(f"{stem}.example.org"), 32)
        assert a != b

    def test_screenshot_key_depends_on_options(self):
        key = normalize_url("https://example.com/")
        viewport = screenshot_cache_key(key, full_page=False, quality=80)
        full = screenshot_cache_key(key, full_page=True, quality=80)
        lower = screenshot_cache_key(key, full_page=False, quality=50)
        assert len({viewport, full, lower}) == 3
        assert "-viewport-" in viewport
        assert "-full-" in full

    def test_screenshot_key_distinguishes_pages(self):
        a = normalize_url("https://example.com/a")
        b = normalize_url("https://example.com/b")
        assert screenshot_cache_key(a, False, 80) != screenshot_cache_key(b, False, 80)

    def test_screenshot_key_same_for_equivalent_urls(self):
        a = normalize_url("https://Example.com:443/p?b=2&a=1")
        b = normalize_url("https://example.com/p?a=1&b=2#frag")
        assert screenshot_cache_key(a, False, 80) == screenshot_cache_key(b, False, 80)

    def test_short_digest_length(self):
        assert len(short_digest("anything")) == 12
        assert len(short_digest("anything", length=8)) == 8
