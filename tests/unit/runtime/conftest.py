# tests/unit/runtime/conftest.py — v1
"""Fixtures for runtime tests: a frozen plan and a written runtime-config dir."""

from __future__ import annotations

from pathlib import Path

import pytest

from launchprep.core.models import DebugOptions, LocalFileRef
from launchprep.preparer.plan import LaunchPlan, freeze_mapping
from launchprep.runtime.arguments import Arguments, save_arguments
from launchprep.runtime.descriptor import build_runtime_descriptor, save_descriptor


@pytest.fixture
def plan(program_spec, program_run, cluster) -> LaunchPlan:
    return LaunchPlan(
        program=program_spec,
        program_run=program_run,
        cluster=cluster,
        arguments=("--date", "2026-01-01"),
        runnable_arguments=freeze_mapping({"counter": ["--verbose"]}),
        environments=freeze_mapping({"counter": {"LP_TEST_ENV": "on"}}),
        log_levels=freeze_mapping({"counter": {"ROOT": "DEBUG", "app.io": "WARN"}}),
        max_retries=freeze_mapping({"counter": 3}),
        configuration=freeze_mapping({"runtime.threads": "4", "launcher.secret": "x"}),
        runnable_configs=freeze_mapping({"counter": {"k": "v"}}),
        extra_options="-X dev",
        runnable_extra_options=freeze_mapping({"counter": "-O"}),
        debug_options=DebugOptions(enabled=True, runnables=["counter"]),
    )


@pytest.fixture
def resolved_files() -> dict[str, list[LocalFileRef]]:
    return {
        "counter": [
            LocalFileRef(
                name="words.txt", uri="file:///data/words.txt", size=100, last_modified=1
            )
        ]
    }


@pytest.fixture
def config_dir(tmp_path: Path, plan, resolved_files) -> Path:
    """Runtime-config directory as the orchestrator writes it, minus the logging template."""
    directory = tmp_path / "runtime-config"
    directory.mkdir()
    save_descriptor(build_runtime_descriptor(plan, resolved_files), directory / "spec.json")
    save_arguments(
        Arguments(
            arguments=list(plan.arguments),
            runnable_arguments={k: list(v) for k, v in plan.runnable_arguments.items()},
        ),
        directory / "arguments.json",
    )
    (directory / "classpath").write_text("")
    (directory / "application-classpath").write_text("")
    return directory
