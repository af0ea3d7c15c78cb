# src/runtime/descriptor.py — v2
"""Runtime descriptor: the self-contained execution plan the remote agent loads.

The launch side builds it from a frozen LaunchPlan and the resolved files;
the agent reads it back with load_descriptor(), which refuses descriptors
written in another format or version.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, ValidationError

from launchprep.core.errors import IncompatibleDescriptorError
from launchprep.core.models import (
    InterpreterOptions,
    LocalFileRef,
    ProgramSpec,
)
from launchprep.runtime.arguments import Arguments
from launchprep.runtime.handlers import LogOnlyEventHandler

if TYPE_CHECKING:
    from launchprep.preparer.plan import LaunchPlan

logger = logging.getLogger(__name__)

DESCRIPTOR_FORMAT = "launchprep/runtime-descriptor"
DESCRIPTOR_VERSION = 1


class RuntimeDescriptor(BaseModel):
    """Everything the remote side needs; no lookups back into the launcher."""

    format: str = DESCRIPTOR_FORMAT
    version: int = DESCRIPTOR_VERSION
    run_id: str
    program_name: str
    program: ProgramSpec
    arguments: Arguments = Field(default_factory=Arguments)
    environments: dict[str, dict[str, str]] = Field(default_factory=dict)
    log_levels: dict[str, dict[str, str]] = Field(default_factory=dict)
    max_retries: dict[str, int] = Field(default_factory=dict)
    interpreter_options: InterpreterOptions = Field(default_factory=InterpreterOptions)
    config: dict[str, str] = Field(default_factory=dict)
    runnable_configs: dict[str, dict[str, str]] = Field(default_factory=dict)

    @property
    def runnable_name(self) -> str:
        return next(iter(self.program.runnables))


def build_runtime_descriptor(
    plan: LaunchPlan,
    resolved_files: dict[str, list[LocalFileRef]],
    config_prefix: str = "runtime.",
) -> RuntimeDescriptor:
    """Combine a frozen plan with the resolved per-runnable files.

    Args:
        plan: Frozen preparer configuration.
        resolved_files: Output of LocalFileResolver.resolve_all().
        config_prefix: Only configuration keys under this prefix propagate.
    """
    runnables = {
        name: spec.model_copy(update={"local_files": list(resolved_files.get(name, []))})
        for name, spec in plan.program.runnables.items()
    }
    event_handler = plan.program.event_handler or LogOnlyEventHandler.configure()
    program = plan.program.model_copy(
        update={"runnables": runnables, "event_handler": event_handler}
    )

    global_options = plan.extra_options
    runnable_options = {
        name: f"{global_options} {options}".strip()
        for name, options in plan.runnable_extra_options.items()
    }

    return RuntimeDescriptor(
        run_id=plan.program_run.run_id,
        program_name=plan.program.name,
        program=program,
        arguments=Arguments(
            arguments=list(plan.arguments),
            runnable_arguments={k: list(v) for k, v in plan.runnable_arguments.items()},
        ),
        environments={k: dict(v) for k, v in plan.environments.items()},
        log_levels={k: dict(v) for k, v in plan.log_levels.items()},
        max_retries=dict(plan.max_retries),
        interpreter_options=InterpreterOptions(
            extra_options=global_options,
            runnable_extra_options=runnable_options,
            debug_options=plan.debug_options,
        ),
        config={
            k: v for k, v in plan.configuration.items() if k.startswith(config_prefix)
        },
        runnable_configs={k: dict(v) for k, v in plan.runnable_configs.items()},
    )


def save_descriptor(descriptor: RuntimeDescriptor, path: Path) -> None:
    logger.debug("Creating %s", path)
    path.write_text(descriptor.model_dump_json(indent=2), encoding="utf-8")
    logger.debug("Done %s", path)


def load_descriptor(path: Path) -> RuntimeDescriptor:
    """Read a descriptor, checking format and version before the structure.

    Raises:
        IncompatibleDescriptorError: Unknown format, other version, or a
            structure that does not validate.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise IncompatibleDescriptorError(f"Descriptor {path} is not JSON: {exc}") from exc

    if not isinstance(raw, dict) or raw.get("format") != DESCRIPTOR_FORMAT:
        raise IncompatibleDescriptorError(f"Descriptor {path} has an unknown format")
    if raw.get("version") != DESCRIPTOR_VERSION:
        raise IncompatibleDescriptorError(
            f"Descriptor version {raw.get('version')!r} is not supported "
            f"(expected {DESCRIPTOR_VERSION})"
        )

    try:
        return RuntimeDescriptor.model_validate(raw)
    except ValidationError as exc:
        raise IncompatibleDescriptorError(f"Descriptor {path} is malformed: {exc}") from exc
