# src/cache/base_location_cache.py — v3
"""Abstract content cache for built bundles.

Artifacts are shared across launches by name. get() builds on a miss and
guarantees at most one build per name at a time: concurrent callers for the
same name wait for the running build, then see the committed artifact.
Build locks are shared by every cache instance in the process that points
at the same backend location, so launches that each build their own cache
from settings still build an artifact once.
"""

from __future__ import annotations

import asyncio
import logging
import tempfile
import weakref
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from launchprep.core.models import Location

logger = logging.getLogger(__name__)

# loader(name, target_path) writes the artifact to target_path
Loader = Callable[[str, Path], None]

# running loop -> (location_key, name) -> lock
_BUILD_LOCKS: weakref.WeakKeyDictionary[
    asyncio.AbstractEventLoop, dict[tuple[str, str], asyncio.Lock]
] = weakref.WeakKeyDictionary()


def build_lock(location_key: str, name: str) -> asyncio.Lock:
    """Process-wide lock for building name at location_key on the running loop."""
    locks = _BUILD_LOCKS.setdefault(asyncio.get_running_loop(), {})
    lock = locks.get((location_key, name))
    if lock is None:
        lock = locks.setdefault((location_key, name), asyncio.Lock())
    return lock


class BaseLocationCache(ABC):
    """Unified interface for content cache backends."""

    def __init__(self, scratch_dir: Path | None = None) -> None:
        self._scratch_dir = scratch_dir

    async def get(self, name: str, loader: Loader) -> Location:
        """Return the artifact cached under name, building it on a miss."""
        async with build_lock(self.location_key, name):
            location = await self.lookup(name)
            if location is not None:
                logger.debug("Cache hit: %s", name)
                return location

            logger.info("Cache miss, building %s", name)
            if self._scratch_dir is not None:
                self._scratch_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.TemporaryDirectory(
                prefix="build-", dir=self._scratch_dir
            ) as tmp:
                target = Path(tmp) / name
                await asyncio.to_thread(loader, name, target)
                location = await self.commit(name, target)
            logger.debug("Cached %s (%d bytes)", name, location.size)
            return location

    @property
    @abstractmethod
    def location_key(self) -> str:
        """Identifies the backing store; caches with equal keys share builds."""

    @abstractmethod
    async def lookup(self, name: str) -> Location | None:
        """Return the committed artifact for name, or None."""

    @abstractmethod
    async def commit(self, name: str, built: Path) -> Location:
        """Publish a freshly built artifact under name."""

    @abstractmethod
    async def delete(self, name: str) -> None:
        """Remove a cached artifact."""

    @abstractmethod
    async def list_names(self) -> list[str]:
        """List cached artifact names."""
