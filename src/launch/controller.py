# src/launch/controller.py — v1
"""Launch states and the handle returned for a dispatched run."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from launchprep.core.models import LaunchRequest, ProgramRun


class LaunchState(str, Enum):
    """Orchestrator state; FAILED is reachable from any non-terminal state."""

    INITIALIZING = "initializing"
    STAGING = "staging"
    BUNDLING = "bundling"
    SERIALIZING = "serializing"
    DISPATCHING = "dispatching"
    CLEANING = "cleaning"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (LaunchState.DONE, LaunchState.FAILED)


@dataclass(frozen=True)
class LaunchController:
    """Handle for a run the cluster launcher accepted.

    Only built after a successful dispatch; a failed launch raises instead.
    """

    run_id: str
    program_run: ProgramRun
    request: LaunchRequest
    state: LaunchState = LaunchState.DONE
