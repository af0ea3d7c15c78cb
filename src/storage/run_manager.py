# src/storage/run_manager.py — v2
"""Run identity and staging lifecycle: run ids, staging creation and cleanup."""

from __future__ import annotations

import logging
import shutil
import uuid
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)


def generate_run_id(timestamp: datetime | None = None) -> str:
    """Generate a run_id: yyyymmdd_hhmmss_{uuid4_short}."""
    ts = timestamp or datetime.now(timezone.utc)
    short_uuid = uuid.uuid4().hex[:8]
    return f"{ts.strftime('%Y%m%d_%H%M%S')}_{short_uuid}"


def delete_directory_contents(directory: Path, retain_directory: bool = False) -> None:
    """Remove everything under directory, and directory itself unless retained.

    Missing directories are ignored. Other failures are logged, never raised.
    """
    if not directory.exists():
        return
    for child in directory.iterdir():
        try:
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()
        except OSError as exc:
            logger.warning("Failed to delete %s: %s", child, exc)
    if not retain_directory:
        try:
            directory.rmdir()
        except OSError as exc:
            logger.warning("Failed to delete %s: %s", directory, exc)
