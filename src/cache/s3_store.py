# src/cache/s3_store.py — v2
"""S3-backed content cache (CACHE_BACKEND=s3).

Shares built bundles between launcher hosts. Requires 'boto3' package:
pip install boto3.
"""

from __future__ import annotations

import logging
from pathlib import Path

from launchprep.cache.base_location_cache import BaseLocationCache
from launchprep.core.models import Location

logger = logging.getLogger(__name__)


class S3LocationCache(BaseLocationCache):
    """Content cache storing artifacts as S3 objects under a key prefix."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "launchprep/cache/",
        region: str | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        """Initialize S3 cache.

        Args:
            bucket: S3 bucket name.
            prefix: Key prefix for all cached artifacts.
            region: AWS region (optional, uses boto3 default if not set).
            endpoint_url: Custom endpoint for MinIO/compatible storage.
        """
        try:
            import boto3
        except ImportError as e:
            raise ImportError(
                "boto3 package required for S3 cache: pip install boto3"
            ) from e

        kwargs: dict = {}
        if region:
            kwargs["region_name"] = region
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url

        super().__init__()
        self._s3 = boto3.client("s3", **kwargs)
        self._bucket = bucket
        self._prefix = prefix.rstrip("/") + "/" if prefix else ""

    @property
    def location_key(self) -> str:
        return f"s3://{self._bucket}/{self._prefix}"

    def _full_key(self, name: str) -> str:
        return f"{self._prefix}{name}"

    def _uri(self, name: str) -> str:
        return f"s3://{self._bucket}/{self._full_key(name)}"

    async def lookup(self, name: str) -> Location | None:
        try:
            head = self._s3.head_object(Bucket=self._bucket, Key=self._full_key(name))
        except self._s3.exceptions.ClientError:
            return None
        return Location(
            name=name,
            uri=self._uri(name),
            size=head["ContentLength"],
            last_modified=int(head["LastModified"].timestamp() * 1000),
        )

    async def commit(self, name: str, built: Path) -> Location:
        key = self._full_key(name)
        self._s3.upload_file(str(built), self._bucket, key)
        logger.debug("S3 cache upload: s3://%s/%s", self._bucket, key)
        location = await self.lookup(name)
        if location is None:
            raise OSError(f"Uploaded artifact not visible: {self._uri(name)}")
        return location

    async def delete(self, name: str) -> None:
        self._s3.delete_object(Bucket=self._bucket, Key=self._full_key(name))

    async def list_names(self) -> list[str]:
        response = self._s3.list_objects_v2(Bucket=self._bucket, Prefix=self._prefix)
        names = [
            obj["Key"][len(self._prefix):] for obj in response.get("Contents", [])
        ]
        return sorted(n for n in names if n and "/" not in n)
