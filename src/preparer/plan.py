# src/preparer/plan.py — v1
"""Frozen launch configuration handed from the preparer to the orchestrator."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from launchprep.bundling.bundler import ModuleFilter
from launchprep.core.models import ClusterInfo, DebugOptions, ProgramRun, ProgramSpec


def freeze_mapping(data: Mapping) -> Mapping:
    """Read-only copy; nested mappings and lists are frozen too."""
    frozen = {}
    for key, value in data.items():
        if isinstance(value, Mapping):
            value = freeze_mapping(value)
        elif isinstance(value, list):
            value = tuple(value)
        frozen[key] = value
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class LaunchPlan:
    """Immutable snapshot of everything a preparer accumulated."""

    program: ProgramSpec
    program_run: ProgramRun
    cluster: ClusterInfo
    arguments: tuple[str, ...] = ()
    runnable_arguments: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    environments: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    dependencies: tuple[str, ...] = ()
    resources: tuple[str, ...] = ()
    class_paths: tuple[str, ...] = ()
    application_class_paths: tuple[str, ...] = ()
    log_levels: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    max_retries: Mapping[str, int] = field(default_factory=dict)
    configuration: Mapping[str, str] = field(default_factory=dict)
    runnable_configs: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    extra_options: str = ""
    runnable_extra_options: Mapping[str, str] = field(default_factory=dict)
    debug_options: DebugOptions = field(default_factory=DebugOptions)
    module_filter: ModuleFilter | None = None

    @property
    def runnable_name(self) -> str:
        return next(iter(self.program.runnables))

    @property
    def run_id(self) -> str:
        return self.program_run.run_id
