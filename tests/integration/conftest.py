# tests/integration/conftest.py — v8
"""Shared fixtures for integration tests.

Launches run end to end against the local filesystem: a directory-backed
content cache and a DirectoryLauncher stand in for shared storage and the
cluster. No containers are needed.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from launchprep.launch.directory_launcher import DirectoryLauncher

logger = logging.getLogger(__name__)


@pytest.fixture
def cluster_dir(tmp_path: Path) -> Path:
    """Directory standing in for the cluster's file localization area."""
    path = tmp_path / "cluster"
    path.mkdir()
    return path


@pytest.fixture
def directory_launcher(cluster_dir: Path) -> DirectoryLauncher:
    return DirectoryLauncher(cluster_dir)
