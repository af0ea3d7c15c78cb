# src/cache/fingerprint.py — v3
"""Content fingerprints for cacheable bundles.

The application bundle depends only on the set of module names it packs, so
two launches sharing a dependency closure share one cached bundle.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable

from launchprep.storage.layout import APPLICATION_BUNDLE


def normalize_module_names(names: Iterable[str]) -> list[str]:
    """Sorted, deduplicated, whitespace-stripped module names."""
    return sorted({name.strip() for name in names if name and name.strip()})


def compute_module_fingerprint(names: Iterable[str]) -> str:
    """MD5 hex digest over the sorted, deduplicated module names.

    Input order and duplicates never change the result.
    """
    hasher = hashlib.md5()  # noqa: S324
    for name in normalize_module_names(names):
        # NUL separator keeps ["ab", "c"] and ["a", "bc"] apart
        hasher.update(name.encode("utf-8"))
        hasher.update(b"\0")
    return hasher.hexdigest()


def application_bundle_name(names: Iterable[str]) -> str:
    """Cache name of the application bundle for a module set."""
    return f"{compute_module_fingerprint(names)}-{APPLICATION_BUNDLE}"
