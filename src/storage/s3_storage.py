# src/storage/s3_storage.py — v2
"""S3-compatible cluster-native storage (CLUSTER_STORAGE_SCHEME=s3).

Supports AWS S3, MinIO, and other S3-compatible storage.
Requires 'boto3' package: pip install boto3.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, BinaryIO
from urllib.parse import urlparse

from launchprep.storage.base_storage import BaseStorage

logger = logging.getLogger(__name__)


def split_s3_uri(uri: str) -> tuple[str, str]:
    """Split s3://bucket/key into (bucket, key)."""
    parsed = urlparse(uri)
    key = parsed.path.lstrip("/")
    if not parsed.netloc or not key:
        raise ValueError(f"Invalid object URI: {uri!r}")
    return parsed.netloc, key


class S3Storage(BaseStorage):
    """Read-side access to objects in S3-compatible storage."""

    def __init__(
        self,
        scheme: str = "s3",
        region: str | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        """Initialize S3 storage.

        Args:
            scheme: URI scheme routed to this backend (s3, s3a, s3n).
            region: AWS region (optional, uses boto3 default if not set).
            endpoint_url: Custom endpoint for MinIO/compatible storage.
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
        self.scheme = scheme.lower()

    def _head(self, uri: str) -> dict[str, Any]:
        bucket, key = split_s3_uri(uri)
        return self._s3.head_object(Bucket=bucket, Key=key)

    async def exists(self, uri: str) -> bool:
        try:
            self._head(uri)
            return True
        except self._s3.exceptions.ClientError:
            return False

    async def size(self, uri: str) -> int:
        return int(self._head(uri)["ContentLength"])

    async def last_modified(self, uri: str) -> int:
        return int(self._head(uri)["LastModified"].timestamp() * 1000)

    async def open(self, uri: str) -> BinaryIO:
        bucket, key = split_s3_uri(uri)
        response = self._s3.get_object(Bucket=bucket, Key=key)
        return response["Body"]

    async def copy(self, uri: str, target: Path) -> None:
        bucket, key = split_s3_uri(uri)
        target.parent.mkdir(parents=True, exist_ok=True)
        self._s3.download_file(bucket, key, str(target))
        logger.debug("S3 download: %s -> %s", uri, target)
