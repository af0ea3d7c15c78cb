# src/storage/storage_factory.py — v3
"""Factory: instantiate the cluster-native storage backend from configuration."""

from __future__ import annotations

from launchprep.config.settings import Settings
from launchprep.storage.base_storage import BaseStorage


def create_cluster_storage(settings: Settings) -> BaseStorage:
    """Create the storage backend for CLUSTER_STORAGE_SCHEME.

    Args:
        settings: Application settings.

    Returns:
        BaseStorage instance.

    Raises:
        ValueError: If the scheme has no backend.
    """
    scheme = settings.cluster_storage_scheme

    if scheme in ("s3", "s3a", "s3n"):
        from launchprep.storage.s3_storage import S3Storage
        return S3Storage(
            scheme=scheme,
            region=settings.cluster_storage_region or None,
            endpoint_url=settings.cluster_storage_endpoint_url or None,
        )

    raise ValueError(f"Unsupported cluster storage scheme: {scheme!r}")
