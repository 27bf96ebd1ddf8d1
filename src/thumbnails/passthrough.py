# src/thumbnails/passthrough.py — v1
"""Passthrough generator: every size points at the full screenshot.

Configured sizes are kept so the placeholder fallback and any future
resizing backend agree on dimensions.
"""

from __future__ import annotations

from markmedia.core.models import Thumbnails
from markmedia.thumbnails.base_thumbnail_generator import BaseThumbnailGenerator


class PassthroughThumbnailGenerator(BaseThumbnailGenerator):
    """No resizing."""

    async def generate(self, image_url: str, cache_key: str) -> Thumbnails:
        return Thumbnails.uniform(image_url)
