# src/thumbnails/base_thumbnail_generator.py — v1
"""Abstract thumbnail generator — the seam for real image resizing.

Resolution logic only ever sees ``generate``; swapping in an image-processing
backend (storage-side transforms, Pillow, an external CDN) does not touch the
source chain or the gate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from markmedia.core.models import Thumbnails


class BaseThumbnailGenerator(ABC):
    """Produce small/medium/large variants of a resolved screenshot."""

    def __init__(self, sizes: dict[str, tuple[int, int]]) -> None:
        self.sizes = sizes

    @abstractmethod
    async def generate(self, image_url: str, cache_key: str) -> Thumbnails:
        """Return URLs for the three display sizes."""
