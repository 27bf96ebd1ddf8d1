# src/cache/keys.py — v1
"""Key normalization and cache-key derivation.

Two modes:
  - domain mode (favicons): best-effort cleanup; only input that cleans up
    to nothing is rejected.
  - URL mode (screenshots): strict, re-serialized through urllib so that
    equivalent spellings (case, default ports, trailing slash, fragment,
    query order) collapse to the same key.

Cache keys combine the normalized key with a short SHA-256 digest of the
options that change the stored image.
"""

from __future__ import annotations

import hashlib
import re
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from markmedia.core.errors import InvalidInputError
from markmedia.core.models import NormalizedKey

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
_DEFAULT_PORTS = {"http": 80, "https": 443}
_UNSAFE_KEY_CHARS = re.compile(r"[^a-z0-9.-]+")
_DIGEST_LEN = 12


def normalize_domain(raw: str) -> NormalizedKey:
    """Normalize a domain-like string for favicon lookups.

    Strips ``http(s)://`` and a leading ``www.``, lowercases, keeps the
    segment before the first ``/`` and drops any port.

    Raises:
        InvalidInputError: If nothing usable remains.
    """
    if raw is None:
        raise InvalidInputError("", "lookup key is required")
    text = raw.strip().lower()
    text = re.sub(r"^https?://", "", text)
    text = re.sub(r"^www\.", "", text)
    host = re.split(r"[/?#]", text, maxsplit=1)[0]
    host = host.rsplit("@", 1)[-1]  # drop userinfo
    host = host.split(":", 1)[0].strip(".")
    if not host:
        raise InvalidInputError(raw, "no domain after normalization")
    return NormalizedKey(kind="favicon", value=host, origin=host)


def normalize_url(raw: str) -> NormalizedKey:
    """Normalize an absolute URL for screenshot lookups.

    A missing scheme defaults to ``https://``. The fragment is removed and
    query parameters are sorted.

    Raises:
        InvalidInputError: If the input is not an http(s) URL with a host.
    """
    if raw is None or not raw.strip():
        raise InvalidInputError(raw or "", "lookup key is required")
    text = raw.strip()
    if not _SCHEME_RE.match(text):
        text = f"https://{text}"

    try:
        parts = urlsplit(text)
        port = parts.port
    except ValueError as e:
        raise InvalidInputError(raw, f"unparseable URL ({e})") from e

    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS:
        raise InvalidInputError(raw, "only http and https URLs are supported")

    host = (parts.hostname or "").strip(".")
    if not host:
        raise InvalidInputError(raw, "URL has no host")

    netloc = host
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        netloc = f"{host}:{port}"

    path = parts.path or "/"
    query = urlencode(sorted(parse_qsl(parts.query, keep_blank_values=True)))
    canonical = urlunsplit((scheme, netloc, path, query, ""))

    origin = host[4:] if host.startswith("www.") else host
    return NormalizedKey(kind="screenshot", value=canonical, origin=origin)


def favicon_cache_key(key: NormalizedKey, size: int) -> str:
    """Cache key for a favicon of ``size`` pixels.

    The digest covers the full domain; the readable prefix is lossy.
    """
    digest = short_digest(f"{key.value}|size={size}")
    return f"{_key_prefix(key.value)}-{digest}"


def screenshot_cache_key(
    key: NormalizedKey, full_page: bool, quality: int
) -> str:
    """Cache key for a screenshot of one canonical URL and render options."""
    mode = "full" if full_page else "viewport"
    digest = short_digest(f"{key.value}|{mode}|q{quality}")
    return f"{_key_prefix(key.origin)}-{mode}-{digest}"


def short_digest(text: str, length: int = _DIGEST_LEN) -> str:
    """Truncated SHA-256 hex digest."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:length]


def _key_prefix(text: str) -> str:
    """Readable, storage-safe prefix derived from a host."""
    cleaned = _UNSAFE_KEY_CHARS.sub("_", text.lower()).strip("_")
    return cleaned[:100] or "unknown"
