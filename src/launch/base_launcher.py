# src/launch/base_launcher.py — v1
"""Abstract cluster launcher interface.

The launcher receives a fully staged LaunchRequest and owns everything that
happens after dispatch. Implementations raise on rejection; the orchestrator
turns that into DispatchError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from launchprep.core.models import LaunchRequest


class BaseClusterLauncher(ABC):
    """Unified interface for handing a launch request to a cluster."""

    @abstractmethod
    async def launch(self, request: LaunchRequest) -> None:
        """Dispatch the request. Files are read before this returns."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Launcher identifier, used in logs."""
