# src/resolver/fallback.py — v1
"""Deterministic placeholders for when every source fails.

Pure and synchronous: no network, no exceptions, same input gives the same
URL, so the UI always has something to render.
"""

from __future__ import annotations

from urllib.parse import quote, urlencode

from markmedia.core.models import (
    FaviconResult,
    NormalizedKey,
    ScreenshotResult,
    Thumbnails,
)

AVATAR_BASE = "https://ui-avatars.com/api/"
PLACEHOLDER_BASE = "https://via.placeholder.com"
DEFAULT_THUMBNAIL_SIZES: dict[str, tuple[int, int]] = {
    "small": (300, 200),
    "medium": (600, 400),
    "large": (1200, 800),
}


class FallbackGenerator:
    """Lettered-avatar favicons and text placeholder screenshots."""

    def __init__(
        self,
        background: str = "6366f1",
        foreground: str = "ffffff",
        thumbnail_sizes: dict[str, tuple[int, int]] | None = None,
    ) -> None:
        self._background = background
        self._foreground = foreground
        self._sizes = thumbnail_sizes or DEFAULT_THUMBNAIL_SIZES

    def favicon_url(self, domain: str, size: int = 32) -> str:
        letter = _first_letter(domain)
        query = urlencode(
            {
                "name": letter,
                "size": size,
                "background": self._background,
                "color": self._foreground,
                "format": "png",
            }
        )
        return f"{AVATAR_BASE}?{query}"

    def favicon(self, key: NormalizedKey, size: int = 32) -> FaviconResult:
        return FaviconResult(
            url=self.favicon_url(key.value, size),
            source="fallback",
            cached=False,
            size=size,
        )

    def thumbnails(self, label: str) -> Thumbnails:
        text = quote(label or "unknown", safe="")
        urls = {
            name: (
                f"{PLACEHOLDER_BASE}/{w}x{h}/{self._background}/{self._foreground}"
                f"?text={text}"
            )
            for name, (w, h) in self._sizes.items()
        }
        return Thumbnails(**urls)

    def screenshot(self, key: NormalizedKey) -> ScreenshotResult:
        thumbnails = self.thumbnails(key.origin)
        return ScreenshotResult(
            url=thumbnails.large,
            thumbnails=thumbnails,
            source="fallback",
            cached=False,
        )


def _first_letter(domain: str) -> str:
    for char in domain:
        if char.isalnum():
            return char.upper()
    return "?"
