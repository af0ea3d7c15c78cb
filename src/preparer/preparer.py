# src/preparer/preparer.py — v1
"""Fluent configuration accumulator for a single-runnable program launch.

Usage:
    preparer = LaunchPreparer(program, program_run, cluster, launcher)
    controller = await (
        preparer.with_application_arguments("--date", "2026-01-01")
        .with_env({"TZ": "UTC"})
        .set_log_level("DEBUG")
        .start(timeout=120)
    )

Every call validates eagerly: a runnable name the program does not declare
fails at the call site, before any bundling work starts.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from launchprep.bundling.bundler import ModuleFilter
from launchprep.config.settings import Settings
from launchprep.core.errors import LaunchConfigurationError, UnknownRunnableError
from launchprep.core.models import ClusterInfo, DebugOptions, ProgramRun, ProgramSpec
from launchprep.preparer.plan import LaunchPlan, freeze_mapping

if TYPE_CHECKING:
    from launchprep.cache.base_location_cache import BaseLocationCache
    from launchprep.launch.base_launcher import BaseClusterLauncher
    from launchprep.launch.controller import LaunchController
    from launchprep.storage.base_storage import BaseStorage

logger = logging.getLogger(__name__)

ROOT_LOGGER = "ROOT"
_VALID_LEVELS = {"TRACE", "DEBUG", "INFO", "WARN", "WARNING", "ERROR", "FATAL", "CRITICAL", "OFF"}


class LaunchPreparer:
    """Accumulates launch configuration for exactly one runnable.

    Args:
        program: Program description; must declare exactly one runnable.
        program_run: Run identity (carries the run id).
        cluster: Target cluster handed to the launcher.
        launcher: External cluster launcher.
        settings: Application settings (defaults loaded from .env).
        cache: Shared content cache; built from settings when omitted.
        cluster_storage: Cluster-native storage backend; optional.
        configuration: Initial launch configuration map.
        extra_options: Initial global interpreter options; defaults to
            PROGRAM_INTERPRETER_OPTS.

    Raises:
        LaunchConfigurationError: If the program does not have exactly one
            runnable.
    """

    def __init__(
        self,
        program: ProgramSpec,
        program_run: ProgramRun,
        cluster: ClusterInfo,
        launcher: BaseClusterLauncher,
        *,
        settings: Settings | None = None,
        cache: BaseLocationCache | None = None,
        cluster_storage: BaseStorage | None = None,
        configuration: Mapping[str, str] | None = None,
        extra_options: str | None = None,
    ) -> None:
        if len(program.runnables) != 1:
            raise LaunchConfigurationError(
                f"Only one runnable is supported, program {program.name!r} "
                f"declares {len(program.runnables)}",
                run_id=program_run.run_id,
            )

        self._settings = settings or Settings()
        self._program = program
        self._program_run = program_run
        self._cluster = cluster
        self._launcher = launcher
        self._cache = cache
        self._cluster_storage = cluster_storage

        self._arguments: list[str] = []
        self._runnable_arguments: dict[str, list[str]] = {}
        self._environments: dict[str, dict[str, str]] = {}
        self._dependencies: list[str] = []
        self._resources: list[str] = []
        self._class_paths: list[str] = []
        self._application_class_paths: list[str] = []
        self._log_levels: dict[str, dict[str, str]] = {}
        self._max_retries: dict[str, int] = {}
        self._configuration: dict[str, str] = dict(configuration or {})
        self._runnable_configs: dict[str, dict[str, str]] = {}
        self._runnable_extra_options: dict[str, str] = {}
        self._debug_options = DebugOptions()
        self._module_filter: ModuleFilter | None = None
        self._extra_options = (
            extra_options if extra_options is not None
            else self._settings.program_interpreter_opts
        )

    @property
    def program(self) -> ProgramSpec:
        return self._program

    @property
    def run_id(self) -> str:
        return self._program_run.run_id

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _confirm_runnable(self, runnable: str) -> None:
        if runnable is None:
            raise LaunchConfigurationError("Runnable name cannot be None")
        if runnable not in self._program.runnables:
            raise UnknownRunnableError(runnable, self._program.name)

    @staticmethod
    def _require(value: Any, what: str) -> None:
        if value is None:
            raise LaunchConfigurationError(f"{what} cannot be None")

    # ------------------------------------------------------------------
    # Arguments and environment
    # ------------------------------------------------------------------

    def with_application_arguments(self, *args: str) -> LaunchPreparer:
        """Append global arguments; order is kept."""
        self._arguments.extend(args)
        return self

    def with_arguments(self, runnable: str, *args: str) -> LaunchPreparer:
        """Append arguments for one runnable, after the global ones at run time."""
        self._confirm_runnable(runnable)
        self._runnable_arguments.setdefault(runnable, []).extend(args)
        return self

    def with_env(self, env: Mapping[str, str], runnable: str | None = None) -> LaunchPreparer:
        """Merge environment variables.

        Without a runnable the variables go to every runnable, keeping keys a
        runnable already set. With a runnable, existing keys are overwritten.
        """
        self._require(env, "Environment")
        if runnable is None:
            for name in self._program.runnables:
                self._set_env(name, env, overwrite=False)
            return self
        self._confirm_runnable(runnable)
        self._set_env(runnable, env, overwrite=True)
        return self

    def _set_env(self, runnable: str, env: Mapping[str, str], overwrite: bool) -> None:
        environment = self._environments.setdefault(runnable, {})
        for key, value in env.items():
            if overwrite or key not in environment:
                environment[key] = value

    # ------------------------------------------------------------------
    # Interpreter options
    # ------------------------------------------------------------------

    def set_interpreter_options(
        self, options: str, runnable: str | None = None
    ) -> LaunchPreparer:
        """Replace the global options, or set one runnable's options."""
        if runnable is not None:
            self._confirm_runnable(runnable)
        self._require(options, "Interpreter options")
        if runnable is None:
            self._extra_options = options
        else:
            self._runnable_extra_options[runnable] = options
        return self

    def add_interpreter_options(self, options: str) -> LaunchPreparer:
        """Append to the global options, space separated."""
        self._require(options, "Interpreter options")
        self._extra_options = (
            f"{self._extra_options} {options}" if self._extra_options else options
        )
        return self

    def enable_debugging(self, *runnables: str, do_suspend: bool = False) -> LaunchPreparer:
        """Enable remote debugging; no names means every runnable."""
        for runnable in runnables:
            self._confirm_runnable(runnable)
        self._debug_options = DebugOptions(
            enabled=True, do_suspend=do_suspend, runnables=list(runnables)
        )
        return self

    # ------------------------------------------------------------------
    # Bundling inputs
    # ------------------------------------------------------------------

    def with_dependencies(self, *modules: str) -> LaunchPreparer:
        """Declare module identifiers packed into the application bundle."""
        self._dependencies.extend(modules)
        return self

    def with_resources(self, *uris: str) -> LaunchPreparer:
        """Attach ad-hoc resources packed into the resources bundle."""
        self._resources.extend(uris)
        return self

    def with_class_paths(self, *paths: str) -> LaunchPreparer:
        self._class_paths.extend(paths)
        return self

    def with_application_class_paths(self, *paths: str) -> LaunchPreparer:
        self._application_class_paths.extend(paths)
        return self

    def with_bundler_module_filter(self, module_filter: ModuleFilter) -> LaunchPreparer:
        """Predicate deciding which module files enter the application bundle."""
        self._module_filter = module_filter
        return self

    # ------------------------------------------------------------------
    # Runtime tuning
    # ------------------------------------------------------------------

    def with_max_retries(self, runnable: str, max_retries: int) -> LaunchPreparer:
        self._confirm_runnable(runnable)
        if max_retries is None or max_retries < 0:
            raise LaunchConfigurationError(
                f"Max retries must be >= 0, got {max_retries!r}"
            )
        self._max_retries[runnable] = max_retries
        return self

    def set_log_level(self, level: str | int) -> LaunchPreparer:
        """Root log level for every runnable."""
        return self.set_log_levels({ROOT_LOGGER: level})

    def set_log_levels(
        self, levels: Mapping[str, str | int], runnable: str | None = None
    ) -> LaunchPreparer:
        """Per-logger levels for every runnable, or for one."""
        if runnable is not None:
            self._confirm_runnable(runnable)
        self._require(levels, "Log levels")
        normalized = {name: _level_name(name, level) for name, level in levels.items()}
        targets = [runnable] if runnable is not None else list(self._program.runnables)
        for name in targets:
            self._log_levels[name] = dict(normalized)
        return self

    def with_configuration(
        self, config: Mapping[str, str], runnable: str | None = None
    ) -> LaunchPreparer:
        """Merge launch configuration, or replace one runnable's configuration."""
        self._require(config, "Configuration")
        if runnable is None:
            self._configuration.update(config)
        else:
            self._confirm_runnable(runnable)
            self._runnable_configs[runnable] = dict(config)
        return self

    # ------------------------------------------------------------------
    # Accepted, no effect on this launcher
    # ------------------------------------------------------------------

    def set_user(self, user: str) -> LaunchPreparer:
        logger.debug("User is not supported for %s", type(self).__name__)
        return self

    def set_scheduler_queue(self, queue: str) -> LaunchPreparer:
        logger.debug("Scheduler queue is not supported for %s", type(self).__name__)
        return self

    def add_log_handler(self, handler: Any) -> LaunchPreparer:
        logger.debug("Log handler is not supported for %s", type(self).__name__)
        return self

    # ------------------------------------------------------------------
    # Launch
    # ------------------------------------------------------------------

    def freeze(self) -> LaunchPlan:
        """Immutable snapshot of the accumulated configuration."""
        return LaunchPlan(
            program=self._program.model_copy(deep=True),
            program_run=self._program_run,
            cluster=self._cluster,
            arguments=tuple(self._arguments),
            runnable_arguments=freeze_mapping(self._runnable_arguments),
            environments=freeze_mapping(self._environments),
            dependencies=tuple(self._dependencies),
            resources=tuple(self._resources),
            class_paths=tuple(self._class_paths),
            application_class_paths=tuple(self._application_class_paths),
            log_levels=freeze_mapping(self._log_levels),
            max_retries=freeze_mapping(self._max_retries),
            configuration=freeze_mapping(self._configuration),
            runnable_configs=freeze_mapping(self._runnable_configs),
            extra_options=self._extra_options,
            runnable_extra_options=freeze_mapping(self._runnable_extra_options),
            debug_options=self._debug_options.model_copy(deep=True),
            module_filter=self._module_filter,
        )

    async def start(self, timeout: float | None = None) -> LaunchController:
        """Freeze and launch. timeout defaults to LAUNCH_TIMEOUT_S seconds.

        Raises:
            LaunchError: Any failure of the launch, typed by cause.
        """
        from launchprep.launch.orchestrator import LaunchOrchestrator

        orchestrator = LaunchOrchestrator(
            launcher=self._launcher,
            settings=self._settings,
            cache=self._cache,
            cluster_storage=self._cluster_storage,
        )
        return await orchestrator.launch(self.freeze(), timeout=timeout)


def _level_name(logger_name: str, level: str | int | None) -> str:
    if level is None:
        raise LaunchConfigurationError(f"Log level cannot be None for logger {logger_name}")
    if isinstance(level, int):
        name = logging.getLevelName(level)
        if not isinstance(name, str) or name.startswith("Level "):
            raise LaunchConfigurationError(f"Unknown log level {level!r} for {logger_name}")
        return name
    name = str(level).upper()
    if name not in _VALID_LEVELS:
        raise LaunchConfigurationError(f"Unknown log level {level!r} for {logger_name}")
    return name
