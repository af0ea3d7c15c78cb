# src/logging/context.py — v2
"""Contextual logging support: attach run_id, program and state to log records.

The run scope is entered once per launch with run_logging_context() and is
always released, whatever way the launch exits.
"""

from __future__ import annotations

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per launch.
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_program: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "program", default=None
)
_namespace: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "namespace", default=None
)
_state: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "state", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    run_id: str | None = None
    program: str | None = None
    namespace: str | None = None
    state: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        run_id=_run_id.get(),
        program=_program.get(),
        namespace=_namespace.get(),
        state=_state.get(),
    )


def set_state_context(state: str | None) -> None:
    """Tag subsequent records with the launch state."""
    _state.set(state)


@contextmanager
def run_logging_context(
    run_id: str, program: str, namespace: str | None = None
) -> Iterator[LogContext]:
    """Scope log records to one run; previous values are restored on exit."""
    tokens = [
        (_run_id, _run_id.set(run_id)),
        (_program, _program.set(program)),
        (_namespace, _namespace.set(namespace)),
        (_state, _state.set(None)),
    ]
    try:
        yield get_context()
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def clear_context() -> None:
    """Reset all context variables."""
    _run_id.set(None)
    _program.set(None)
    _namespace.set(None)
    _state.set(None)
