# src/cache/cache_factory.py — v3
"""Factory for content cache instantiation."""

from __future__ import annotations

from launchprep.cache.base_location_cache import BaseLocationCache
from launchprep.config.settings import Settings


def create_location_cache(settings: Settings | None = None) -> BaseLocationCache:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the local backend.

    Returns:
        Configured BaseLocationCache implementation.
    """
    backend = "local" if settings is None else settings.cache_backend

    if backend == "local":
        from launchprep.cache.local_store import LocalLocationCache
        cache_root = "~/.launchprep/cache" if settings is None else settings.cache_root
        return LocalLocationCache(cache_root=cache_root)

    if backend == "s3":
        from launchprep.cache.s3_store import S3LocationCache
        if settings is None or not settings.cache_s3_bucket:
            raise ValueError("CACHE_S3_BUCKET must be set when CACHE_BACKEND=s3")
        return S3LocationCache(
            bucket=settings.cache_s3_bucket,
            prefix=settings.cache_s3_prefix,
            region=settings.cache_s3_region or None,
        )

    raise ValueError(f"Unsupported cache backend: {backend!r}")
