# src/runtime/agent.py — v2
"""Remote execution agent.

Runs inside the cluster container after the bootstrap put the runtime and
application bundles on sys.path. Loads the runtime descriptor from the
expanded runtime-config bundle, then calls the runnable's entry
point with its ordered arguments, wrapped by the configured event handler.

Usage:
    python -m launchprep.runtime.agent <runtime-config-dir> [runnable]
"""

from __future__ import annotations

import importlib
import json
import logging
import logging.config
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from launchprep.core.models import EventHandlerSpec
from launchprep.runtime.constants import (
    APPLICATION_CLASSPATH,
    CLASSPATH,
    CLASSPATH_SEPARATOR,
    LOGGING_TEMPLATE,
    RUNTIME_SPEC,
)
from launchprep.runtime.descriptor import RuntimeDescriptor, load_descriptor
from launchprep.runtime.handlers import EventHandler, LogOnlyEventHandler

logger = logging.getLogger(__name__)


def load_object(reference: str) -> Any:
    """Import ``package.module:attr.path`` and return the attribute."""
    module_name, _, attr_path = reference.partition(":")
    obj: Any = importlib.import_module(module_name)
    for attr in filter(None, attr_path.split(".")):
        obj = getattr(obj, attr)
    return obj


def extend_sys_path(config_dir: Path) -> list[str]:
    """Prepend application class-path entries, then class-path entries."""
    added: list[str] = []
    for file_name in (APPLICATION_CLASSPATH, CLASSPATH):
        path = config_dir / file_name
        if not path.is_file():
            continue
        for entry in path.read_text(encoding="utf-8").split(CLASSPATH_SEPARATOR):
            entry = entry.strip()
            if entry and entry not in sys.path:
                added.append(entry)
    sys.path[0:0] = added
    return added


def configure_logging(config_dir: Path, levels: dict[str, str]) -> None:
    """Apply the shipped logging template, then per-logger level overrides."""
    template = config_dir / LOGGING_TEMPLATE
    if template.is_file():
        logging.config.dictConfig(json.loads(template.read_text(encoding="utf-8")))
    for name, level in levels.items():
        target = logging.getLogger() if name in ("", "ROOT") else logging.getLogger(name)
        target.setLevel(level)


def create_event_handler(spec: EventHandlerSpec | None) -> EventHandler:
    if spec is None:
        return LogOnlyEventHandler()
    handler = load_object(spec.class_name)()
    handler.initialize(spec.configs)
    return handler


def run(config_dir: Path, runnable: str | None = None) -> int:
    """Execute one runnable described by the runtime-config directory.

    Returns:
        Process exit code; the entry point's int result when it returns one.
    """
    descriptor: RuntimeDescriptor = load_descriptor(config_dir / RUNTIME_SPEC)
    name = runnable or descriptor.runnable_name
    spec = descriptor.program.runnables[name]

    extend_sys_path(config_dir)
    configure_logging(config_dir, descriptor.log_levels.get(name, {}))
    os.environ.update(descriptor.environments.get(name, {}))

    handler = create_event_handler(descriptor.program.event_handler)
    entry: Callable[[list[str]], Any] = load_object(spec.entry_point)
    handler.started(descriptor.run_id, name)
    try:
        result = entry(descriptor.arguments.for_runnable(name))
    except BaseException as exc:
        handler.aborted(descriptor.run_id, name, exc)
        raise
    else:
        handler.completed(descriptor.run_id, name)
    finally:
        handler.destroy()

    return result if isinstance(result, int) else 0


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print("usage: agent <runtime-config-dir> [runnable]", file=sys.stderr)
        return 2
    return run(Path(args[0]), args[1] if len(args) > 1 else None)


if __name__ == "__main__":
    sys.exit(main())
