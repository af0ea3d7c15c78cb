# src/resolver/file_resolver.py — v2
"""Resolve declared runtime files into sized, timestamped references.

Three branches, chosen by URI scheme:
  1. none / file      stat the local path in place
  2. cluster scheme   size and mtime through the cluster storage backend
  3. anything else    copy a snapshot into the staging directory, then stat it

Resolution runs once per declared file per launch; nothing is cached.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import tempfile
import urllib.request
from collections.abc import Callable
from pathlib import Path
from typing import Any, BinaryIO
from urllib.parse import urlparse

from launchprep.core.errors import FileResolutionError
from launchprep.core.models import LocalFileRef, ProgramSpec
from launchprep.storage.base_storage import BaseStorage
from launchprep.storage.local_storage import LocalStorage

logger = logging.getLogger(__name__)

UrlOpener = Callable[[str], Any]


class LocalFileResolver:
    """Turns declared LocalFileRefs into resolved ones for one launch.

    Args:
        cluster_storage: Backend for the cluster-native scheme. When None,
            only local paths and URL-fetchable resources resolve.
        url_opener: Opens any other URI as a readable stream
            (urllib.request.urlopen by default).
    """

    def __init__(
        self,
        cluster_storage: BaseStorage | None = None,
        url_opener: UrlOpener | None = None,
    ) -> None:
        self._local = LocalStorage()
        self._cluster = cluster_storage
        self._url_opener = url_opener or urllib.request.urlopen

    def _is_cluster(self, scheme: str | None) -> bool:
        return self._cluster is not None and self._cluster.handles(scheme)

    async def resolve(self, ref: LocalFileRef, staging_dir: Path) -> LocalFileRef:
        """Resolve one declared file.

        Raises:
            FileResolutionError: If the file is missing or cannot be copied.
        """
        scheme = ref.scheme
        try:
            if self._local.handles(scheme):
                if not await self._local.exists(ref.uri):
                    raise FileResolutionError(f"Local file not found: {ref.uri}")
                return ref.model_copy(update={
                    "size": await self._local.size(ref.uri),
                    "last_modified": await self._local.last_modified(ref.uri),
                })

            if self._is_cluster(scheme):
                return ref.model_copy(update={
                    "size": await self._cluster.size(ref.uri),  # type: ignore[union-attr]
                    "last_modified": await self._cluster.last_modified(ref.uri),  # type: ignore[union-attr]
                })

            copy = await asyncio.to_thread(self._snapshot, ref, staging_dir)
        except FileResolutionError:
            raise
        except Exception as exc:
            raise FileResolutionError(
                f"Failed to resolve {ref.name} ({ref.uri}): {exc}"
            ) from exc

        stat = copy.stat()
        logger.debug("Copied %s to %s (%d bytes)", ref.uri, copy, stat.st_size)
        return ref.model_copy(update={
            "uri": copy.as_uri(),
            "size": stat.st_size,
            "last_modified": int(stat.st_mtime * 1000),
        })

    async def resolve_all(
        self, program: ProgramSpec, staging_dir: Path
    ) -> dict[str, list[LocalFileRef]]:
        """Resolve every runnable's declared files, keyed by runnable name."""
        resolved: dict[str, list[LocalFileRef]] = {}
        for name, runnable in program.runnables.items():
            files = resolved.setdefault(name, [])
            for ref in runnable.local_files:
                files.append(await self.resolve(ref, staging_dir))
                logger.info("Added file %s for runnable %s", files[-1].uri, name)
        return resolved

    async def open(self, uri: str) -> BinaryIO:
        """Open any supported URI as a binary stream, same routing as resolve()."""
        scheme = urlparse(uri).scheme or None
        try:
            if self._local.handles(scheme):
                return await self._local.open(uri)
            if self._is_cluster(scheme):
                return await self._cluster.open(uri)  # type: ignore[union-attr]
            return await asyncio.to_thread(self._url_opener, uri)
        except Exception as exc:
            raise FileResolutionError(f"Failed to open {uri}: {exc}") from exc

    def _snapshot(self, ref: LocalFileRef, staging_dir: Path) -> Path:
        """Copy remote content into a uniquely named staging file."""
        base = Path(ref.name)
        fd, tmp = tempfile.mkstemp(prefix=f"{base.stem}-", suffix=base.suffix, dir=staging_dir)
        try:
            with os.fdopen(fd, "wb") as out, self._url_opener(ref.uri) as src:
                shutil.copyfileobj(src, out)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        return Path(tmp)
