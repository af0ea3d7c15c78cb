# src/runtime/handlers.py — v1
"""Event handlers run by the remote agent around a program run."""

from __future__ import annotations

import logging

from launchprep.core.models import EventHandlerSpec

logger = logging.getLogger(__name__)


class EventHandler:
    """Lifecycle hooks for one program run. Subclasses override what they need."""

    def __init__(self) -> None:
        self.configs: dict[str, str] = {}

    @classmethod
    def configure(cls, **configs: str) -> EventHandlerSpec:
        """Spec that makes the agent instantiate this handler."""
        return EventHandlerSpec(
            class_name=f"{cls.__module__}:{cls.__qualname__}", configs=configs
        )

    def initialize(self, configs: dict[str, str]) -> None:
        self.configs = dict(configs)

    def started(self, run_id: str, runnable: str) -> None:
        pass

    def completed(self, run_id: str, runnable: str) -> None:
        pass

    def aborted(self, run_id: str, runnable: str, error: BaseException) -> None:
        pass

    def destroy(self) -> None:
        pass


class LogOnlyEventHandler(EventHandler):
    """Default handler: logs lifecycle events, takes no action."""

    def started(self, run_id: str, runnable: str) -> None:
        logger.info("Run %s: runnable %s started", run_id, runnable)

    def completed(self, run_id: str, runnable: str) -> None:
        logger.info("Run %s: runnable %s completed", run_id, runnable)

    def aborted(self, run_id: str, runnable: str, error: BaseException) -> None:
        logger.error("Run %s: runnable %s aborted: %s", run_id, runnable, error)
