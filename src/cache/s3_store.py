# src/cache/s3_store.py — v1
"""S3-compatible blob store (STORAGE_BACKEND=s3).

Supports AWS S3, MinIO and Supabase Storage's S3 endpoint.
Requires 'boto3' package: pip install boto3.

Existence checks HEAD the object's *public* URL with a short timeout; an
object that is not publicly readable is a miss.
"""

from __future__ import annotations

import asyncio
import json
import logging
from email.utils import parsedate_to_datetime

import httpx

from markmedia.cache.base_blob_store import BaseBlobStore
from markmedia.http.client import HttpClient

logger = logging.getLogger(__name__)

_CACHE_CONTROL = "public, max-age=31536000"


class S3BlobStore(BaseBlobStore):
    """Public-read bucket on S3-compatible object storage."""

    def __init__(
        self,
        bucket: str,
        http: HttpClient,
        region: str | None = None,
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
        check_timeout_ms: int = 2000,
        ttl_seconds: int = 0,
    ) -> None:
        """Initialize S3 blob store.

        Args:
            bucket: Bucket name.
            http: Shared HTTP client used for public-URL HEAD checks.
            region: AWS region (optional, uses boto3 default if not set).
            endpoint_url: Custom endpoint for MinIO/Supabase storage.
            public_base_url: Base of public object URLs; ``{base}/{bucket}/{key}``.
            check_timeout_ms: Bound on the existence HEAD.
            ttl_seconds: Objects older than this read as misses (0 = never).
        """
        try:
            import boto3
        except ImportError as e:
            raise ImportError(
                "boto3 package required for S3 storage: pip install boto3"
            ) from e

        kwargs: dict = {}
        if region:
            kwargs["region_name"] = region
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url

        self._s3 = boto3.client("s3", **kwargs)
        self._http = http
        self._region = region or ""
        self._endpoint = (endpoint_url or "").rstrip("/")
        self._public_base = (public_base_url or "").rstrip("/")
        self._check_timeout_ms = check_timeout_ms
        self.bucket = bucket
        self.ttl_seconds = ttl_seconds

    async def ensure_bucket(self) -> None:
        """Create the bucket with a public-read policy if it is missing."""
        try:
            await asyncio.to_thread(self._s3.head_bucket, Bucket=self.bucket)
            return
        except self._s3.exceptions.ClientError:
            pass
        except Exception as e:
            logger.warning("Failed to check bucket %s: %s", self.bucket, e)
            return

        try:
            create_kwargs: dict = {"Bucket": self.bucket}
            if self._region and self._region != "us-east-1" and not self._endpoint:
                create_kwargs["CreateBucketConfiguration"] = {
                    "LocationConstraint": self._region
                }
            await asyncio.to_thread(self._s3.create_bucket, **create_kwargs)
            await asyncio.to_thread(
                self._s3.put_bucket_policy,
                Bucket=self.bucket,
                Policy=json.dumps(_public_read_policy(self.bucket)),
            )
            logger.info("Created public bucket %s", self.bucket)
        except Exception as e:
            logger.warning("Failed to ensure bucket %s exists: %s", self.bucket, e)

    def public_url(self, key: str) -> str:
        if self._public_base:
            return f"{self._public_base}/{self.bucket}/{key}"
        if self._endpoint:
            return f"{self._endpoint}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self._region}.amazonaws.com/{key}"

    async def get(self, key: str) -> str | None:
        url = self.public_url(key)
        try:
            response = await self._http.head(url, self._check_timeout_ms)
        except httpx.HTTPError as e:
            logger.debug("Cache check for %s failed: %s", key, e)
            return None
        if not response.is_success:
            return None

        modified = None
        last_modified = response.headers.get("last-modified")
        if last_modified:
            try:
                modified = parsedate_to_datetime(last_modified)
            except (TypeError, ValueError):
                modified = None
        if self.is_expired(modified):
            logger.debug("Cache object %s expired", key)
            return None
        return url

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        await asyncio.to_thread(
            self._s3.put_object,
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
            CacheControl=_CACHE_CONTROL,
        )
        logger.debug("S3 write: s3://%s/%s (%d bytes)", self.bucket, key, len(data))


def _public_read_policy(bucket: str) -> dict:
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Sid": "PublicRead",
                "Effect": "Allow",
                "Principal": "*",
                "Action": ["s3:GetObject"],
                "Resource": [f"arn:aws:s3:::{bucket}/*"],
            }
        ],
    }
