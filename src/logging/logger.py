# src/logging/logger.py — v3
"""Log formatters and setup for launch logs.

Every record emitted inside a launch carries the run context (run id,
program, namespace, state). Records raised from a LaunchError also carry
the error type and the run it failed.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from launchprep.logging.context import get_context

if TYPE_CHECKING:
    from launchprep.config.settings import Settings

ROOT_LOGGER_NAME = "launchprep"


def _launch_error(record: logging.LogRecord) -> dict[str, Any] | None:
    """Type and run id of a LaunchError attached to the record, if any."""
    from launchprep.core.errors import LaunchError

    exc = record.exc_info[1] if record.exc_info else None
    if not isinstance(exc, LaunchError):
        return None
    error: dict[str, Any] = {"type": type(exc).__name__}
    if exc.run_id:
        error["run_id"] = exc.run_id
    return error


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with the run context under "context"."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            entry["context"] = context
        if getattr(record, "data", None):
            entry["data"] = record.data  # type: ignore[attr-defined]

        error = _launch_error(record)
        if error is not None:
            entry["error"] = error
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Single-line records for terminals: time, level, logger, run, state."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        created = datetime.fromtimestamp(record.created, timezone.utc)
        parts = [
            created.strftime("%Y-%m-%d %H:%M:%S"),
            f"[{record.levelname:8s}]",
            record.name,
        ]
        if ctx.run_id:
            parts.append(f"[{ctx.run_id}]")
        if ctx.state:
            parts.append(f"({ctx.state})")
        parts.append(f"- {record.getMessage()}")
        line = " ".join(parts)
        if record.exc_info and record.exc_info[1] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | Path | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> logging.Logger:
    """Install stderr (and optionally rotating file) handlers on the launchprep logger.

    Handlers from an earlier call are closed and replaced.

    Args:
        level: Level name for the launchprep logger.
        log_format: "json" or "text".
        log_file: Launch log file; None logs to stderr only.
        rotation: Size that triggers rotation, e.g. "10MB".
        retention: Number of rotated launch logs kept.

    Returns:
        The configured launchprep logger.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter: logging.Formatter = JsonFormatter() if log_format == "json" else TextFormatter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        from launchprep.logging.handlers import create_rotating_handler

        file_handler = create_rotating_handler(log_file, rotation=rotation, retention=retention)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    return root_logger


def setup_logging_from_settings(
    settings: Settings, level: str | None = None, log_format: str | None = None
) -> logging.Logger:
    """setup_logging() driven by LOG_* settings; arguments override them."""
    return setup_logging(
        level=level or settings.log_level,
        log_format=log_format or settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
