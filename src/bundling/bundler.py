# src/bundling/bundler.py — v1
"""Zip bundler: packs module sources and ad-hoc resources into one file.

Modules are named explicitly (dotted import paths) and located with
importlib.util.find_spec. A package brings every .py file under it; a plain
module brings its file plus the __init__ files of its parent packages, so
the module stays importable from the zip.
"""

from __future__ import annotations

import importlib.util
import logging
import shutil
import zipfile
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import BinaryIO

from launchprep.core.errors import BundleError

logger = logging.getLogger(__name__)

# module_filter(module_name, source_path) -> include?
ModuleFilter = Callable[[str, Path], bool]


def accept_all(module_name: str, source_path: Path) -> bool:
    return True


class ApplicationBundler:
    """Builds zip bundles from module names and resource streams."""

    def __init__(self, module_filter: ModuleFilter | None = None) -> None:
        self._filter = module_filter or accept_all

    def create_bundle(
        self,
        target: Path,
        modules: Iterable[str] = (),
        resources: Iterable[tuple[str, BinaryIO]] = (),
    ) -> list[str]:
        """Write a zip bundle to target.

        Args:
            target: Output file path.
            modules: Dotted module or package names to pack.
            resources: (entry_name, stream) pairs stored at the zip root.

        Returns:
            Sorted entry names written.

        Raises:
            BundleError: If a module cannot be located or a resource name
                collides with another entry.
        """
        entries: dict[str, Path] = {}
        for name in modules:
            for arcname, path in self._module_entries(name):
                entries.setdefault(arcname, path)

        target.parent.mkdir(parents=True, exist_ok=True)
        written: list[str] = []
        with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for arcname in sorted(entries):
                zf.write(entries[arcname], arcname)
                written.append(arcname)
            for entry_name, stream in resources:
                if entry_name in entries or entry_name in written:
                    raise BundleError(f"Duplicate bundle entry: {entry_name}")
                with zf.open(entry_name, "w") as out:
                    shutil.copyfileobj(stream, out)
                written.append(entry_name)

        logger.debug("Bundled %d entries into %s", len(written), target.name)
        return sorted(written)

    def _module_entries(self, name: str) -> list[tuple[str, Path]]:
        spec = _find_spec(name)
        parts = name.split(".")
        entries: list[tuple[str, Path]] = []

        for i in range(1, len(parts)):
            parent = _find_spec(".".join(parts[:i]))
            if parent.origin and Path(parent.origin).name == "__init__.py":
                entries.append(("/".join(parts[:i]) + "/__init__.py", Path(parent.origin)))

        if spec.submodule_search_locations:
            for location in spec.submodule_search_locations:
                root = Path(location)
                for path in sorted(root.rglob("*.py")):
                    if "__pycache__" in path.parts:
                        continue
                    rel = path.relative_to(root)
                    module = ".".join([*parts, *rel.with_suffix("").parts])
                    module = module.removesuffix(".__init__")
                    if self._filter(module, path):
                        entries.append(("/".join([*parts, *rel.parts]), path))
            return entries

        if spec.origin in (None, "built-in", "frozen"):
            logger.debug("Skipping %s module %s", spec.origin or "namespace", name)
            return entries

        origin = Path(spec.origin)
        if self._filter(name, origin):
            entries.append(("/".join([*parts[:-1], origin.name]), origin))
        return entries


def _find_spec(name: str):
    try:
        spec = importlib.util.find_spec(name)
    except (ImportError, ValueError) as exc:
        raise BundleError(f"Cannot resolve module {name!r}: {exc}") from exc
    if spec is None:
        raise BundleError(f"Cannot resolve module {name!r}")
    return spec
