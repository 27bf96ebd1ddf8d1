# src/cache/local_store.py — v1
"""Local filesystem blob store (STORAGE_BACKEND=local, the default).

Objects live under ``<root>/<bucket>/<key>``. Public URLs are built from
LOCAL_PUBLIC_BASE_URL (e.g. a static file server in front of the root).
Without it objects are still written but every lookup is a miss, since a
``file://`` path is not fetchable by clients.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from markmedia.cache.base_blob_store import BaseBlobStore

logger = logging.getLogger(__name__)


class LocalBlobStore(BaseBlobStore):
    """Blob store backed by a local directory."""

    def __init__(
        self,
        root: str | Path,
        bucket: str,
        public_base_url: str = "",
        ttl_seconds: int = 0,
    ) -> None:
        self._bucket_dir = Path(root).expanduser() / bucket
        self._public_base = public_base_url.rstrip("/")
        self.bucket = bucket
        self.ttl_seconds = ttl_seconds

    def _path(self, key: str) -> Path:
        return self._bucket_dir / key

    async def ensure_bucket(self) -> None:
        """Create the bucket directory."""
        try:
            self._bucket_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Failed to create bucket dir %s: %s", self._bucket_dir, e)
        if not self._public_base:
            logger.warning(
                "LOCAL_PUBLIC_BASE_URL not set - cached %s objects will not be served",
                self.bucket,
            )

    def public_url(self, key: str) -> str:
        if self._public_base:
            return f"{self._public_base}/{self.bucket}/{key}"
        return self._path(key).resolve().as_uri()

    async def get(self, key: str) -> str | None:
        if not self._public_base:
            return None
        path = self._path(key)
        try:
            stat = path.stat()
        except OSError:
            return None
        modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        if self.is_expired(modified):
            logger.debug("Cache object %s expired", key)
            return None
        return self.public_url(key)

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug("Local write: %s (%d bytes, %s)", path, len(data), content_type)
