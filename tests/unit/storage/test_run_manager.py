# tests/unit/storage/test_run_manager.py — v2
"""Tests for storage/run_manager.py — run IDs and staging cleanup."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from launchprep.storage.run_manager import delete_directory_contents, generate_run_id


class TestGenerateRunId:
    def test_format(self):
        assert re.fullmatch(r"\d{8}_\d{6}_[0-9a-f]{8}", generate_run_id())

    def test_timestamp_prefix(self):
        ts = datetime(2026, 2, 7, 14, 30, 5, tzinfo=timezone.utc)
        assert generate_run_id(ts).startswith("20260207_143005_")

    def test_unique(self):
        ts = datetime(2026, 2, 7, tzinfo=timezone.utc)
        assert generate_run_id(ts) != generate_run_id(ts)


class TestDeleteDirectoryContents:
    def test_removes_tree(self, tmp_path):
        root = tmp_path / "staging"
        (root / "sub").mkdir(parents=True)
        (root / "sub" / "f.txt").write_text("x")
        (root / "a.zip").write_bytes(b"z")
        delete_directory_contents(root)
        assert not root.exists()

    def test_retain_directory(self, tmp_path):
        root = tmp_path / "staging"
        root.mkdir()
        (root / "a.zip").write_bytes(b"z")
        delete_directory_contents(root, retain_directory=True)
        assert root.is_dir()
        assert list(root.iterdir()) == []

    def test_missing_directory_ignored(self, tmp_path):
        delete_directory_contents(tmp_path / "absent")
