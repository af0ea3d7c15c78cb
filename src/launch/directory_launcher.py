# src/launch/directory_launcher.py — v1
"""Launcher that materializes a request into a local directory.

Every file is copied under <target>/<run_id>/ using its localized name, and
the request itself is written next to them as launch_request.json. Useful for
local development and for inspecting exactly what a cluster would receive.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path
from urllib.parse import urlparse

from launchprep.core.models import LaunchRequest
from launchprep.launch.base_launcher import BaseClusterLauncher
from launchprep.storage.base_storage import BaseStorage
from launchprep.storage.local_storage import LocalStorage, uri_to_path

logger = logging.getLogger(__name__)

REQUEST_FILE = "launch_request.json"


class DirectoryLauncher(BaseClusterLauncher):
    """Copies dispatched files into target_dir/<run_id>.

    Args:
        target_dir: Root directory receiving one subdirectory per run.
        cluster_storage: Backend used for files living in cluster storage.
    """

    def __init__(
        self, target_dir: str | Path, cluster_storage: BaseStorage | None = None
    ) -> None:
        self._target_dir = Path(target_dir).expanduser()
        self._local = LocalStorage()
        self._cluster = cluster_storage

    @property
    def name(self) -> str:
        return "directory"

    def run_dir(self, run_id: str) -> Path:
        return self._target_dir / run_id

    async def launch(self, request: LaunchRequest) -> None:
        run_dir = self.run_dir(request.run_id)
        run_dir.mkdir(parents=True, exist_ok=True)

        for launch_file in request.files:
            target = run_dir / launch_file.name
            scheme = urlparse(launch_file.uri).scheme or None
            if self._local.handles(scheme):
                await asyncio.to_thread(shutil.copyfile, uri_to_path(launch_file.uri), target)
            elif self._cluster is not None and self._cluster.handles(scheme):
                await self._cluster.copy(launch_file.uri, target)
            else:
                raise ValueError(f"Cannot copy {launch_file.uri}: unsupported scheme")
            logger.debug("Copied %s to %s", launch_file.uri, target)

        (run_dir / REQUEST_FILE).write_text(
            request.model_dump_json(indent=2), encoding="utf-8"
        )
        logger.info(
            "Launch request %s written to %s (%d files)",
            request.run_id, run_dir, len(request.files),
        )
