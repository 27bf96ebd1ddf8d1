# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types — all imports come from core.models.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

ResourceKind = Literal["favicon", "screenshot"]

FaviconSource = Literal[
    "cache", "google", "clearbit", "duckduckgo", "direct", "fallback"
]
ScreenshotSource = Literal["cache", "firecrawl", "fallback"]


# === LOOKUP KEYS ===


class NormalizedKey(BaseModel):
    """Canonical lookup key.

    ``value`` is the bare domain for favicons and the canonical absolute URL
    for screenshots. ``origin`` is the host used for per-origin rate limiting.
    """

    model_config = {"frozen": True}

    kind: ResourceKind
    value: str
    origin: str


# === OPTIONS ===


class FaviconOptions(BaseModel):
    """Per-call favicon options."""

    size: int = Field(default=32, gt=0)
    use_cache: bool = True
    timeout_ms: int = Field(default=5000, gt=0)
    fallback_to_generic: bool = True


class ScreenshotOptions(BaseModel):
    """Per-call screenshot options."""

    use_cache: bool = True
    timeout_ms: int = Field(default=15_000, gt=0)
    quality: int = Field(default=80, gt=0, le=100)
    full_page: bool = False
    wait_for_ms: int = Field(default=2000, ge=0)
    generate_thumbnails: bool = True


# === RESULTS ===


class Thumbnails(BaseModel):
    """Screenshot URLs per display size (list, card, gallery)."""

    small: str
    medium: str
    large: str

    @classmethod
    def uniform(cls, url: str) -> Thumbnails:
        """All three sizes point at the same image."""
        return cls(small=url, medium=url, large=url)


class FaviconResult(BaseModel):
    """Resolved favicon. ``url`` is always set."""

    url: str = Field(min_length=1)
    source: FaviconSource
    cached: bool = False
    size: int


class ScreenshotResult(BaseModel):
    """Resolved screenshot. ``url`` is always set."""

    url: str = Field(min_length=1)
    thumbnails: Thumbnails
    source: ScreenshotSource
    cached: bool = False


class ChainOutcome(BaseModel):
    """A validated candidate produced by one source strategy."""

    url: str
    source: str
