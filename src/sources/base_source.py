# src/sources/base_source.py — v1
"""Abstract source strategy for the source chain."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from markmedia.core.models import NormalizedKey


class BaseSource(ABC):
    """One way of resolving a resource to a candidate image URL.

    Attributes:
        name: Provenance tag reported in results (``google``, ``direct``...).
        enabled: False when the provider lacks credentials or was switched
            off in settings; the chain skips it without calling ``fetch``.
        prevalidated: True when ``fetch`` already confirmed the candidate
            serves an image, so the chain does not HEAD it again.
    """

    name: str = "unknown"
    prevalidated: bool = False

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    @abstractmethod
    async def fetch(self, key: NormalizedKey, options: Any) -> str:
        """Return a candidate URL.

        Raises:
            SourceError: If this source cannot produce a candidate.
        """

    def __repr__(self) -> str:
        state = "enabled" if self.enabled else "disabled"
        return f"<{type(self).__name__} {self.name} {state}>"
