# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for storage, provider, gate and logging settings.
Provider credentials are optional: a missing key disables that provider
instead of failing startup.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_SIZE_RE = re.compile(r"^\s*(\d+)\s*x\s*(\d+)\s*$", re.IGNORECASE)


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Storage ===
    storage_backend: Literal["local", "s3"] = "local"
    favicon_bucket: str = "favicons"
    screenshot_bucket: str = "screenshots"
    local_storage_root: Path = Path("~/.markmedia/storage")
    local_public_base_url: str = ""
    s3_endpoint_url: str = ""
    s3_region: str = ""
    s3_public_base_url: str = ""

    # === Durable cache ===
    cache_check_timeout_ms: int = 2000
    cache_download_timeout_ms: int = 10_000
    cache_ttl_seconds: int = 0  # 0 = entries never expire

    # === Request gate ===
    min_request_interval_ms: int = 1000

    # === Favicon providers ===
    favicon_google_enabled: bool = True
    favicon_clearbit_enabled: bool = True
    favicon_duckduckgo_enabled: bool = True
    favicon_direct_enabled: bool = True
    favicon_default_size: int = 32
    favicon_timeout_ms: int = 5000

    # === Screenshot provider ===
    firecrawl_api_key: str = ""
    firecrawl_base_url: str = "https://api.firecrawl.dev"
    firecrawl_request_timeout_ms: int = 30_000
    screenshot_timeout_ms: int = 15_000
    screenshot_quality: int = 80
    screenshot_wait_for_ms: int = 2000

    # === Thumbnails / placeholders ===
    thumbnail_small: str = "300x200"
    thumbnail_medium: str = "600x400"
    thumbnail_large: str = "1200x800"
    fallback_background: str = "6366f1"
    fallback_foreground: str = "ffffff"

    # === Bulk ===
    bulk_max_items: int = 10

    # === HTTP ===
    http_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator(
        "cache_check_timeout_ms",
        "cache_download_timeout_ms",
        "favicon_timeout_ms",
        "firecrawl_request_timeout_ms",
        "screenshot_timeout_ms",
        "favicon_default_size",
        "bulk_max_items",
    )
    @classmethod
    def validate_positive(cls, v: int, info) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @field_validator(
        "min_request_interval_ms", "cache_ttl_seconds", "screenshot_wait_for_ms"
    )
    @classmethod
    def validate_non_negative(cls, v: int, info) -> int:  # noqa: N805
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return v

    @field_validator("screenshot_quality")
    @classmethod
    def validate_quality(cls, v: int) -> int:  # noqa: N805
        if not 0 < v <= 100:
            raise ValueError("screenshot_quality must be in 1..100")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if not self.favicon_bucket or not self.screenshot_bucket:
            errors.append("FAVICON_BUCKET and SCREENSHOT_BUCKET must be non-empty")

        if self.favicon_bucket == self.screenshot_bucket:
            errors.append("FAVICON_BUCKET and SCREENSHOT_BUCKET must differ")

        for name in ("thumbnail_small", "thumbnail_medium", "thumbnail_large"):
            if not _SIZE_RE.match(getattr(self, name)):
                errors.append(f"{name.upper()} must look like WIDTHxHEIGHT")

        if self.storage_backend == "s3" and not (
            self.s3_public_base_url or self.s3_endpoint_url or self.s3_region
        ):
            errors.append(
                "STORAGE_BACKEND=s3 requires S3_PUBLIC_BASE_URL, "
                "S3_ENDPOINT_URL or S3_REGION to build public URLs"
            )

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def firecrawl_enabled(self) -> bool:
        """The renderer is only usable with credentials."""
        return bool(self.firecrawl_api_key.strip())

    @property
    def thumbnail_sizes(self) -> dict[str, tuple[int, int]]:
        """Parse the three thumbnail sizes into (width, height) pairs."""
        sizes: dict[str, tuple[int, int]] = {}
        for name in ("small", "medium", "large"):
            match = _SIZE_RE.match(getattr(self, f"thumbnail_{name}"))
            if match is None:
                raise ConfigurationError(
                    f"THUMBNAIL_{name.upper()} must look like WIDTHxHEIGHT"
                )
            sizes[name] = (int(match.group(1)), int(match.group(2)))
        return sizes


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-deployment config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
