# src/cache/base_blob_store.py — v1
"""Abstract blob store interface for the durable resource cache.

Objects are raw image bytes stored under a string key in a public-read
bucket. Writes are full overwrites (upsert), so concurrent writers of the
same key never need read-modify-write coordination.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone


class BaseBlobStore(ABC):
    """Unified interface for blob storage backends."""

    bucket: str
    ttl_seconds: int = 0

    @abstractmethod
    async def ensure_bucket(self) -> None:
        """Create the bucket if missing. Idempotent, never raises."""

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Publicly fetchable URL for an object key."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the public URL if the object exists and is fresh."""

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str) -> None:
        """Upload (or overwrite) an object."""

    def is_expired(self, modified_at: datetime | None) -> bool:
        """Whether an object last modified at ``modified_at`` is past the TTL.

        Objects without a known modification time never expire.
        """
        if self.ttl_seconds <= 0 or modified_at is None:
            return False
        if modified_at.tzinfo is None:
            modified_at = modified_at.replace(tzinfo=timezone.utc)
        age = (datetime.now(timezone.utc) - modified_at).total_seconds()
        return age > self.ttl_seconds
