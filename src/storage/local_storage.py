# src/storage/local_storage.py — v3
"""Local filesystem storage backend (file:// and bare paths)."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import BinaryIO
from urllib.parse import unquote, urlparse

from launchprep.storage.base_storage import BaseStorage


def uri_to_path(uri: str) -> Path:
    """Turn a bare path or file:// URI into a local Path."""
    parsed = urlparse(uri)
    if parsed.scheme in ("", "file"):
        return Path(unquote(parsed.path)) if parsed.scheme else Path(uri)
    raise ValueError(f"Not a local URI: {uri!r}")


class LocalStorage(BaseStorage):
    """Read-side access to the local filesystem."""

    scheme = "file"

    def handles(self, scheme: str | None) -> bool:
        return scheme is None or scheme.lower() == "file"

    async def exists(self, uri: str) -> bool:
        return uri_to_path(uri).exists()

    async def size(self, uri: str) -> int:
        return uri_to_path(uri).stat().st_size

    async def last_modified(self, uri: str) -> int:
        return int(uri_to_path(uri).stat().st_mtime * 1000)

    async def open(self, uri: str) -> BinaryIO:
        return uri_to_path(uri).open("rb")

    async def copy(self, uri: str, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(uri_to_path(uri), target)
