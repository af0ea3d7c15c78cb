# tests/unit/storage/test_unit_storage_factory.py — v1
"""Tests for storage/storage_factory.py."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from launchprep.config.settings import Settings
from launchprep.storage.s3_storage import S3Storage
from launchprep.storage.storage_factory import create_cluster_storage


class TestCreateClusterStorage:
    @pytest.mark.parametrize("scheme", ["s3", "s3a", "s3n"])
    def test_s3_family(self, scheme):
        s = Settings(_env_file=None, cluster_storage_scheme=scheme)
        with patch("boto3.client"):
            storage = create_cluster_storage(s)
        assert isinstance(storage, S3Storage)
        assert storage.scheme == scheme

    def test_endpoint_passed(self):
        s = Settings(
            _env_file=None,
            cluster_storage_endpoint_url="http://minio:9000",
            cluster_storage_region="eu-west-1",
        )
        with patch("boto3.client") as client:
            create_cluster_storage(s)
        client.assert_called_once_with(
            "s3", region_name="eu-west-1", endpoint_url="http://minio:9000"
        )

    def test_unsupported_scheme(self):
        s = Settings(_env_file=None, cluster_storage_scheme="gs")
        with pytest.raises(ValueError, match="Unsupported cluster storage scheme"):
            create_cluster_storage(s)
