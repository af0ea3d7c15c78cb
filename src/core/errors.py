# src/core/errors.py — v1
"""Launch failure taxonomy.

Configuration errors are raised at the preparer call site before any I/O.
Timeout, bundling, resolution and dispatch errors fail the launch call.
"""

from __future__ import annotations


class LaunchError(Exception):
    """Base class for every launch failure."""

    def __init__(self, message: str, run_id: str | None = None) -> None:
        self.run_id = run_id
        super().__init__(message)


class LaunchConfigurationError(LaunchError, ValueError):
    """Invalid preparer configuration (null value, bad runnable count)."""


class UnknownRunnableError(LaunchConfigurationError):
    """A runnable name not declared on the program spec."""

    def __init__(self, runnable: str, program: str) -> None:
        self.runnable = runnable
        super().__init__(
            f"Runnable {runnable!r} is not defined in program {program!r}"
        )


class LaunchTimeoutError(LaunchError, TimeoutError):
    """Elapsed time exceeded the launch budget at a checkpoint."""


class BundleError(LaunchError, OSError):
    """A bundle could not be built (unresolvable module, missing resource)."""


class FileResolutionError(LaunchError, OSError):
    """A declared file could not be resolved or copied."""


class DispatchError(LaunchError):
    """The cluster launcher rejected or failed the launch request."""


class IncompatibleDescriptorError(LaunchError):
    """A runtime descriptor has an unexpected format or version."""
