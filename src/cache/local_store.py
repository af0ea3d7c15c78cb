# src/cache/local_store.py — v2
"""Directory-backed content cache (default CACHE_BACKEND=local).

Artifacts live as plain files under CACHE_ROOT. Builds happen in a scratch
directory on the same filesystem and are published with an atomic rename,
so a reader never sees a partially written bundle.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from launchprep.cache.base_location_cache import BaseLocationCache
from launchprep.core.models import Location

logger = logging.getLogger(__name__)

_SCRATCH_DIR = ".building"


class LocalLocationCache(BaseLocationCache):
    """File-based content cache."""

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser().absolute()
        self._root.mkdir(parents=True, exist_ok=True)
        super().__init__(scratch_dir=self._root / _SCRATCH_DIR)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def location_key(self) -> str:
        return self._root.as_uri()

    async def lookup(self, name: str) -> Location | None:
        path = self._entry_path(name)
        if not path.is_file():
            return None
        return _location_of(name, path)

    async def commit(self, name: str, built: Path) -> Location:
        path = self._entry_path(name)
        os.replace(built, path)
        return _location_of(name, path)

    async def delete(self, name: str) -> None:
        path = self._entry_path(name)
        if path.exists():
            path.unlink()

    async def list_names(self) -> list[str]:
        return sorted(p.name for p in self._root.iterdir() if p.is_file())

    def _entry_path(self, name: str) -> Path:
        """Return file path for a cache name."""
        safe_name = name.replace("/", "_").replace("\\", "_")
        return self._root / safe_name


def _location_of(name: str, path: Path) -> Location:
    stat = path.stat()
    return Location(
        name=name,
        uri=path.as_uri(),
        size=stat.st_size,
        last_modified=int(stat.st_mtime * 1000),
    )
