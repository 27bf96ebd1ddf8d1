# src/cache/cache_factory.py — v1
"""Factory for blob store instantiation."""

from __future__ import annotations

from markmedia.cache.base_blob_store import BaseBlobStore
from markmedia.config.settings import Settings
from markmedia.http.client import HttpClient


def create_blob_store(
    settings: Settings, bucket: str, http: HttpClient
) -> BaseBlobStore:
    """Instantiate the configured storage backend for one bucket.

    Args:
        settings: Application settings (STORAGE_BACKEND and friends).
        bucket: Bucket name (favicons or screenshots).
        http: Shared HTTP client, used by S3 for public-URL checks.

    Returns:
        Configured BaseBlobStore implementation.
    """
    if settings.storage_backend == "local":
        from markmedia.cache.local_store import LocalBlobStore
        return LocalBlobStore(
            root=settings.local_storage_root,
            bucket=bucket,
            public_base_url=settings.local_public_base_url,
            ttl_seconds=settings.cache_ttl_seconds,
        )

    if settings.storage_backend == "s3":
        from markmedia.cache.s3_store import S3BlobStore
        return S3BlobStore(
            bucket=bucket,
            http=http,
            region=settings.s3_region or None,
            endpoint_url=settings.s3_endpoint_url or None,
            public_base_url=settings.s3_public_base_url or None,
            check_timeout_ms=settings.cache_check_timeout_ms,
            ttl_seconds=settings.cache_ttl_seconds,
        )

    raise ValueError(f"Unsupported storage backend: {settings.storage_backend!r}")
