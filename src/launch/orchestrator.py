# src/launch/orchestrator.py — v1
"""Launch orchestrator: staging, bundling, serialization and dispatch.

State machine:
    INITIALIZING -> STAGING -> BUNDLING -> SERIALIZING -> DISPATCHING
                 -> CLEANING -> DONE
    any non-terminal state -> FAILED

The elapsed time is checked against the launch timeout after every bundle
step and after serialization. Nothing is dispatched once the budget is
exceeded. The staging directory is removed whatever way the launch ends.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import time
from collections.abc import Callable
from importlib import resources
from pathlib import Path

from launchprep.bundling.bundler import ApplicationBundler
from launchprep.bundling.bundles import (
    application_modules,
    create_application_bundle,
    create_launcher_bundle,
    create_resources_bundle,
    create_runtime_bundle,
    create_runtime_config_bundle,
)
from launchprep.cache.base_location_cache import BaseLocationCache
from launchprep.cache.cache_factory import create_location_cache
from launchprep.config.settings import Settings
from launchprep.core.errors import (
    BundleError,
    DispatchError,
    LaunchConfigurationError,
    LaunchError,
    LaunchTimeoutError,
)
from launchprep.core.models import LaunchFile, LaunchRequest, LocalFileRef
from launchprep.launch.base_launcher import BaseClusterLauncher
from launchprep.launch.controller import LaunchController, LaunchState
from launchprep.logging.context import run_logging_context, set_state_context
from launchprep.preparer.plan import LaunchPlan
from launchprep.resolver.file_resolver import LocalFileResolver
from launchprep.runtime.arguments import Arguments, save_arguments
from launchprep.runtime.constants import CLASSPATH_SEPARATOR, LOGGING_TEMPLATE, SETUP_SCRIPTS
from launchprep.runtime.descriptor import build_runtime_descriptor, save_descriptor
from launchprep.storage import layout
from launchprep.storage.base_storage import BaseStorage
from launchprep.storage.run_manager import delete_directory_contents

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

RESOURCES_PACKAGE = "launchprep.resources"


class Deadline:
    """Launch time budget, checked at step boundaries only."""

    def __init__(self, timeout_s: float, clock: Clock = time.monotonic) -> None:
        self.timeout_s = timeout_s
        self._clock = clock
        self._start = clock()

    @property
    def elapsed(self) -> float:
        return self._clock() - self._start

    def check(self, step: str, run_id: str | None = None) -> None:
        """Raise LaunchTimeoutError if the budget is spent after step."""
        elapsed = self.elapsed
        if elapsed > self.timeout_s:
            raise LaunchTimeoutError(
                f"Aborting launch after {step}: {elapsed:.1f}s elapsed, "
                f"timeout is {self.timeout_s}s",
                run_id=run_id,
            )
        logger.debug("%s done after %.3fs", step, elapsed)


class LaunchOrchestrator:
    """Runs one frozen LaunchPlan through the launch states.

    Args:
        launcher: Cluster launcher receiving the final request.
        settings: Application settings.
        cache: Shared content cache; built from settings when omitted.
        cluster_storage: Cluster-native storage for the resolver.
        resolver: File resolver; built around cluster_storage when omitted.
        clock: Monotonic clock used for the launch deadline.
    """

    def __init__(
        self,
        launcher: BaseClusterLauncher,
        settings: Settings | None = None,
        cache: BaseLocationCache | None = None,
        cluster_storage: BaseStorage | None = None,
        resolver: LocalFileResolver | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self._settings = settings or Settings()
        self._launcher = launcher
        self._cache = cache or create_location_cache(self._settings)
        self._resolver = resolver or LocalFileResolver(cluster_storage)
        self._clock = clock
        self.state = LaunchState.INITIALIZING

    def _transition(self, state: LaunchState) -> None:
        logger.debug("Launch state %s -> %s", self.state.value, state.value)
        self.state = state
        set_state_context(state.value)

    async def launch(self, plan: LaunchPlan, timeout: float | None = None) -> LaunchController:
        """Stage, bundle, serialize and dispatch plan.

        Args:
            plan: Frozen preparer configuration.
            timeout: Seconds allowed until dispatch; LAUNCH_TIMEOUT_S if None.

        Returns:
            LaunchController for the dispatched run.

        Raises:
            LaunchTimeoutError: The budget ran out at a checkpoint.
            BundleError: A bundle could not be built.
            FileResolutionError: A declared file could not be resolved.
            DispatchError: The launcher failed.
        """
        timeout_s = self._settings.launch_timeout_s if timeout is None else timeout
        if timeout_s <= 0:
            raise LaunchConfigurationError(
                f"Launch timeout must be positive, got {timeout_s}", run_id=plan.run_id
            )

        self.state = LaunchState.INITIALIZING
        deadline = Deadline(timeout_s, clock=self._clock)
        staging_dir: Path | None = None

        with run_logging_context(
            plan.run_id, plan.program.name, plan.program_run.namespace
        ):
            try:
                self._transition(LaunchState.STAGING)
                staging_dir = await asyncio.to_thread(
                    layout.create_staging_dir, self._settings.staging_root, plan.run_id
                )
                logger.info(
                    "Launching program %s, staging in %s",
                    plan.program_run.qualified_name, staging_dir,
                )

                self._transition(LaunchState.BUNDLING)
                bundles = await self._create_bundles(plan, staging_dir, deadline)

                self._transition(LaunchState.SERIALIZING)
                resolved = await self._resolver.resolve_all(plan.program, staging_dir)
                bundles.append(await self._create_runtime_config(plan, resolved, staging_dir))
                deadline.check("runtime config", plan.run_id)

                self._transition(LaunchState.DISPATCHING)
                request = self._build_request(plan, bundles, resolved)
                await self._dispatch(request)

                self._transition(LaunchState.CLEANING)
            except LaunchError as exc:
                self._fail(exc, plan)
                raise
            except Exception as exc:
                self._fail(exc, plan)
                raise LaunchError(f"Launch failed: {exc}", run_id=plan.run_id) from exc
            finally:
                if staging_dir is not None:
                    await asyncio.to_thread(delete_directory_contents, staging_dir)

            self._transition(LaunchState.DONE)
            logger.info(
                "Program %s dispatched in %.3fs", plan.program.name, deadline.elapsed
            )
            return LaunchController(
                run_id=plan.run_id,
                program_run=plan.program_run,
                request=request,
                state=self.state,
            )

    def _fail(self, exc: BaseException, plan: LaunchPlan) -> None:
        failed_in = self.state
        self._transition(LaunchState.FAILED)
        logger.exception(
            "Launch of program %s failed during %s: %s",
            plan.program.name, failed_in.value, exc,
        )

    async def _create_bundles(
        self, plan: LaunchPlan, staging_dir: Path, deadline: Deadline
    ) -> list[LocalFileRef]:
        bundler = ApplicationBundler(plan.module_filter)
        bundles = [await create_launcher_bundle(self._cache, bundler)]
        deadline.check("launcher bundle", plan.run_id)

        bundles.append(await create_runtime_bundle(self._cache, bundler))
        deadline.check("runtime bundle", plan.run_id)

        modules = application_modules(plan.program, plan.dependencies)
        bundles.append(await create_application_bundle(self._cache, bundler, modules))
        deadline.check("application bundle", plan.run_id)

        resources_bundle = await create_resources_bundle(
            bundler, self._resolver, list(plan.resources), staging_dir
        )
        if resources_bundle is not None:
            bundles.append(resources_bundle)
        deadline.check("resources bundle", plan.run_id)
        return bundles

    async def _create_runtime_config(
        self,
        plan: LaunchPlan,
        resolved: dict[str, list[LocalFileRef]],
        staging_dir: Path,
    ) -> LocalFileRef:
        config_dir = await asyncio.to_thread(layout.create_runtime_config_dir, staging_dir)
        try:
            await asyncio.to_thread(self._write_runtime_config, plan, resolved, config_dir)
            return await create_runtime_config_bundle(config_dir, staging_dir)
        finally:
            await asyncio.to_thread(delete_directory_contents, config_dir)

    def _write_runtime_config(
        self,
        plan: LaunchPlan,
        resolved: dict[str, list[LocalFileRef]],
        config_dir: Path,
    ) -> None:
        descriptor = build_runtime_descriptor(
            plan, resolved, self._settings.runtime_config_prefix
        )
        save_descriptor(descriptor, layout.runtime_spec_path(config_dir))
        save_arguments(
            Arguments(
                arguments=list(plan.arguments),
                runnable_arguments={k: list(v) for k, v in plan.runnable_arguments.items()},
            ),
            layout.arguments_path(config_dir),
        )
        layout.classpath_path(config_dir).write_text(
            CLASSPATH_SEPARATOR.join(plan.class_paths), encoding="utf-8"
        )
        layout.application_classpath_path(config_dir).write_text(
            CLASSPATH_SEPARATOR.join(plan.application_class_paths), encoding="utf-8"
        )

        packaged = resources.files(RESOURCES_PACKAGE)
        template = packaged / LOGGING_TEMPLATE
        if template.is_file():
            layout.logging_template_path(config_dir).write_bytes(template.read_bytes())
        for script in SETUP_SCRIPTS:
            source = packaged / script
            if not source.is_file():
                raise BundleError(f"Setup script {script} is missing", run_id=plan.run_id)
            with source.open("rb") as src, (config_dir / script).open("wb") as dst:
                shutil.copyfileobj(src, dst)

    def _build_request(
        self,
        plan: LaunchPlan,
        bundles: list[LocalFileRef],
        resolved: dict[str, list[LocalFileRef]],
    ) -> LaunchRequest:
        files = [LaunchFile(name=b.name, uri=b.uri, archive=b.archive) for b in bundles]
        for name in plan.program.runnables:
            files.extend(
                LaunchFile(name=ref.name, uri=ref.uri, archive=ref.archive)
                for ref in resolved.get(name, [])
            )
        return LaunchRequest(
            run_id=plan.run_id,
            cluster_name=plan.cluster.name,
            files=files,
            cluster_properties=dict(plan.cluster.properties),
        )

    async def _dispatch(self, request: LaunchRequest) -> None:
        logger.info(
            "Dispatching %d files to launcher %s", len(request.files), self._launcher.name
        )
        try:
            await self._launcher.launch(request)
        except Exception as exc:
            raise DispatchError(
                f"Launcher {self._launcher.name} failed: {exc}", run_id=request.run_id
            ) from exc
