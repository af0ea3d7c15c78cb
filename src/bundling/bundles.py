# src/bundling/bundles.py — v1
"""Builders for the five bundles a launch ships.

launcher, runtime and application bundles go through the shared content
cache; resources and runtime-config bundles are launch-specific and are
written straight into the staging directory.
"""

from __future__ import annotations

import asyncio
import logging
import zipfile
from collections.abc import Iterable
from contextlib import ExitStack
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

from launchprep.bundling.bundler import ApplicationBundler
from launchprep.cache.base_location_cache import BaseLocationCache
from launchprep.cache.fingerprint import application_bundle_name, normalize_module_names
from launchprep.core.models import LocalFileRef, ProgramSpec
from launchprep.resolver.file_resolver import LocalFileResolver
from launchprep.storage import layout

logger = logging.getLogger(__name__)


def application_modules(program: ProgramSpec, dependencies: Iterable[str]) -> list[str]:
    """Declared dependencies, every entry module and the event handler module."""
    modules = list(dependencies)
    modules.extend(r.entry_module for r in program.runnables.values())
    if program.event_handler is not None:
        modules.append(program.event_handler.module)
    return normalize_module_names(modules)


async def create_launcher_bundle(
    cache: BaseLocationCache, bundler: ApplicationBundler
) -> LocalFileRef:
    """Bootstrap bundle; constant content, constant cache name."""
    logger.info("Create and copy %s", layout.LAUNCHER_BUNDLE)
    location = await cache.get(
        layout.LAUNCHER_BUNDLE,
        lambda name, target: bundler.create_bundle(target, layout.LAUNCHER_MODULES),
    )
    logger.debug("Done %s", layout.LAUNCHER_BUNDLE)
    return location.as_local_file(layout.LAUNCHER_BUNDLE, archive=False)


async def create_runtime_bundle(
    cache: BaseLocationCache, bundler: ApplicationBundler
) -> LocalFileRef:
    """Runtime-support bundle carrying the remote agent."""
    logger.debug("Create and copy %s", layout.RUNTIME_BUNDLE)
    location = await cache.get(
        layout.RUNTIME_BUNDLE,
        lambda name, target: bundler.create_bundle(target, layout.RUNTIME_MODULES),
    )
    logger.debug("Done %s", layout.RUNTIME_BUNDLE)
    return location.as_local_file(layout.RUNTIME_BUNDLE, archive=True)


async def create_application_bundle(
    cache: BaseLocationCache,
    bundler: ApplicationBundler,
    modules: list[str],
) -> LocalFileRef:
    """Application bundle cached by the fingerprint of its module set.

    The cache name depends only on the module names, so launches sharing a
    dependency closure reuse one bundle. It is localized as application.zip.
    """
    name = application_bundle_name(modules)
    logger.debug("Create and copy %s as %s", layout.APPLICATION_BUNDLE, name)
    location = await cache.get(
        name, lambda _, target: bundler.create_bundle(target, modules)
    )
    logger.debug("Done %s", layout.APPLICATION_BUNDLE)
    return location.as_local_file(layout.APPLICATION_BUNDLE, archive=True)


async def create_resources_bundle(
    bundler: ApplicationBundler,
    resolver: LocalFileResolver,
    resources: list[str],
    staging_dir: Path,
) -> LocalFileRef | None:
    """Bundle ad-hoc resource URIs; None when there are none."""
    if not resources:
        return None

    logger.debug("Create and copy %s", layout.RESOURCES_BUNDLE)
    target = layout.bundle_path(staging_dir, layout.RESOURCES_BUNDLE)
    with ExitStack() as stack:
        streams = []
        for uri in resources:
            stream = await resolver.open(uri)
            stack.callback(stream.close)
            streams.append((_file_name(uri), stream))
        await asyncio.to_thread(bundler.create_bundle, target, (), streams)
    logger.debug("Done %s", layout.RESOURCES_BUNDLE)
    return _staged_file(layout.RESOURCES_BUNDLE, target, archive=True)


async def create_runtime_config_bundle(config_dir: Path, staging_dir: Path) -> LocalFileRef:
    """Zip every file directly under config_dir into runtime-config.zip."""
    logger.debug("Create and copy %s", layout.RUNTIME_CONFIG_BUNDLE)
    target = layout.bundle_path(staging_dir, layout.RUNTIME_CONFIG_BUNDLE)

    def _write() -> None:
        with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for path in sorted(config_dir.iterdir()):
                if path.is_file():
                    zf.write(path, path.name)

    await asyncio.to_thread(_write)
    logger.debug("Done %s", layout.RUNTIME_CONFIG_BUNDLE)
    return _staged_file(layout.RUNTIME_CONFIG_BUNDLE, target, archive=True)


def _staged_file(name: str, path: Path, archive: bool) -> LocalFileRef:
    stat = path.stat()
    return LocalFileRef(
        name=name,
        uri=path.as_uri(),
        archive=archive,
        size=stat.st_size,
        last_modified=int(stat.st_mtime * 1000),
    )


def _file_name(uri: str) -> str:
    """Last path segment of a URI."""
    path = urlparse(uri).path or uri
    return PurePosixPath(path).name
