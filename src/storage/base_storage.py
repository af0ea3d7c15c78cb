# src/storage/base_storage.py — v2
"""Abstract storage interface keyed by URI.

Backs the cluster-native branch of file resolution: size and modification
time are read in place, without copying.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO


class BaseStorage(ABC):
    """Unified interface for storage backends."""

    scheme: str = ""

    def handles(self, scheme: str | None) -> bool:
        """True when URIs with this scheme belong to the backend."""
        return scheme is not None and scheme.lower() == self.scheme

    @abstractmethod
    async def exists(self, uri: str) -> bool:
        """Check if the object exists."""

    @abstractmethod
    async def size(self, uri: str) -> int:
        """Object size in bytes."""

    @abstractmethod
    async def last_modified(self, uri: str) -> int:
        """Last modification time in epoch millis."""

    @abstractmethod
    async def open(self, uri: str) -> BinaryIO:
        """Open a readable binary stream. Caller closes it."""

    @abstractmethod
    async def copy(self, uri: str, target: Path) -> None:
        """Copy the object to a local path."""
