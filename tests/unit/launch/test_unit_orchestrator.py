# tests/unit/launch/test_unit_orchestrator.py — v1
"""Tests for launch/orchestrator.py — deadline, states, cleanup, dispatch."""

from __future__ import annotations

import zipfile

import pytest

from launchprep.core.errors import (
    BundleError,
    DispatchError,
    LaunchConfigurationError,
    LaunchTimeoutError,
)
from launchprep.launch.controller import LaunchController, LaunchState
from launchprep.launch.orchestrator import Deadline, LaunchOrchestrator
from launchprep.logging.context import get_context
from launchprep.preparer.preparer import LaunchPreparer
from launchprep.storage.local_storage import uri_to_path


class FakeClock:
    """Returns queued readings, then repeats the last one."""

    def __init__(self, *readings: float) -> None:
        self._readings = list(readings)

    def __call__(self) -> float:
        if len(self._readings) > 1:
            return self._readings.pop(0)
        return self._readings[0]


@pytest.fixture
def plan(program_spec, program_run, cluster, launcher, settings):
    return LaunchPreparer(
        program_spec, program_run, cluster, launcher, settings=settings
    ).freeze()


def _orchestrator(launcher, settings, location_cache, clock=None) -> LaunchOrchestrator:
    kwargs = {"clock": clock} if clock is not None else {}
    return LaunchOrchestrator(launcher, settings=settings, cache=location_cache, **kwargs)


class TestDeadline:
    def test_within_budget(self):
        Deadline(10, clock=FakeClock(0, 5)).check("step")

    def test_exceeded(self):
        deadline = Deadline(10, clock=FakeClock(0, 10.5))
        with pytest.raises(LaunchTimeoutError, match="after step"):
            deadline.check("step", run_id="r1")

    def test_elapsed(self):
        assert Deadline(10, clock=FakeClock(100, 103)).elapsed == 3


class TestLaunch:
    @pytest.mark.asyncio
    async def test_success_returns_controller(self, plan, launcher, settings, location_cache):
        orchestrator = _orchestrator(launcher, settings, location_cache)
        controller = await orchestrator.launch(plan)

        assert isinstance(controller, LaunchController)
        assert controller.run_id == plan.run_id
        assert controller.state is LaunchState.DONE
        assert orchestrator.state is LaunchState.DONE
        assert controller.request is launcher.requests[0]

    @pytest.mark.asyncio
    async def test_dispatch_order_and_archive_flags(self, plan, launcher, settings, location_cache):
        await _orchestrator(launcher, settings, location_cache).launch(plan)
        files = launcher.requests[0].files
        assert [(f.name, f.archive) for f in files] == [
            ("launcher.zip", False),
            ("runtime.zip", True),
            ("application.zip", True),
            ("runtime-config.zip", True),
        ]

    @pytest.mark.asyncio
    async def test_request_carries_cluster(self, plan, launcher, settings, location_cache):
        await _orchestrator(launcher, settings, location_cache).launch(plan)
        request = launcher.requests[0]
        assert request.cluster_name == "test-cluster"
        assert request.cluster_properties == {"zone": "a"}
        assert request.run_id == plan.run_id

    @pytest.mark.asyncio
    async def test_runtime_config_contents(self, plan, launcher, settings, location_cache):
        await _orchestrator(launcher, settings, location_cache).launch(plan)
        archive = launcher.contents["runtime-config.zip"]
        path = settings.local_data_dir / "rc.zip"
        path.write_bytes(archive)
        with zipfile.ZipFile(path) as zf:
            assert sorted(zf.namelist()) == [
                "application-classpath",
                "arguments.json",
                "classpath",
                "logging.json",
                "setup_env.py",
                "setup_env.sh",
                "spec.json",
            ]

    @pytest.mark.asyncio
    async def test_staging_removed_after_success(self, plan, launcher, settings, location_cache):
        await _orchestrator(launcher, settings, location_cache).launch(plan)
        assert list(settings.staging_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_context_cleared_after_success(self, plan, launcher, settings, location_cache):
        await _orchestrator(launcher, settings, location_cache).launch(plan)
        assert get_context().run_id is None
        assert get_context().state is None

    @pytest.mark.asyncio
    async def test_invalid_timeout(self, plan, launcher, settings, location_cache):
        with pytest.raises(LaunchConfigurationError):
            await _orchestrator(launcher, settings, location_cache).launch(plan, timeout=0)
        assert not settings.staging_root.exists()


class TestFailures:
    @pytest.mark.asyncio
    async def test_timeout_after_launcher_bundle(self, plan, launcher, settings, location_cache):
        orchestrator = _orchestrator(
            launcher, settings, location_cache, clock=FakeClock(0, 61)
        )
        with pytest.raises(LaunchTimeoutError, match="launcher bundle") as exc_info:
            await orchestrator.launch(plan, timeout=60)

        assert exc_info.value.run_id == plan.run_id
        assert launcher.requests == []
        assert orchestrator.state is LaunchState.FAILED
        assert list(settings.staging_root.iterdir()) == []
        assert get_context().run_id is None

    @pytest.mark.asyncio
    async def test_timeout_after_serialization(self, plan, launcher, settings, location_cache):
        # start, four bundle checks, then the runtime-config check
        clock = FakeClock(0, 1, 2, 3, 4, 100)
        with pytest.raises(LaunchTimeoutError, match="runtime config"):
            await _orchestrator(launcher, settings, location_cache, clock).launch(plan, timeout=60)
        assert launcher.requests == []

    @pytest.mark.asyncio
    async def test_bundle_failure(
        self, program_spec, program_run, cluster, launcher, settings, location_cache
    ):
        plan = (
            LaunchPreparer(program_spec, program_run, cluster, launcher, settings=settings)
            .with_dependencies("no_such_module_for_launch")
            .freeze()
        )
        orchestrator = _orchestrator(launcher, settings, location_cache)
        with pytest.raises(BundleError, match="no_such_module_for_launch"):
            await orchestrator.launch(plan)
        assert orchestrator.state is LaunchState.FAILED
        assert launcher.requests == []
        assert list(settings.staging_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_dispatch_failure_wrapped(
        self, plan, launcher_factory, settings, location_cache, caplog
    ):
        launcher = launcher_factory(fail_with=RuntimeError("cluster down"))
        orchestrator = _orchestrator(launcher, settings, location_cache)
        with pytest.raises(DispatchError, match="cluster down") as exc_info:
            await orchestrator.launch(plan)
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert orchestrator.state is LaunchState.FAILED
        assert list(settings.staging_root.iterdir()) == []
        assert "failed during dispatching" in caplog.text

    @pytest.mark.asyncio
    async def test_resolution_failure(
        self, program_spec, program_run, cluster, launcher, settings, location_cache, tmp_path
    ):
        from launchprep.core.errors import FileResolutionError
        from launchprep.core.models import LocalFileRef

        program = program_spec.model_copy(deep=True)
        program.runnables["counter"].local_files.append(
            LocalFileRef(name="gone.txt", uri=(tmp_path / "gone.txt").as_uri())
        )
        plan = LaunchPreparer(program, program_run, cluster, launcher, settings=settings).freeze()
        with pytest.raises(FileResolutionError):
            await _orchestrator(launcher, settings, location_cache).launch(plan)
        assert launcher.requests == []


class TestResolvedFiles:
    @pytest.mark.asyncio
    async def test_runnable_files_follow_bundles(
        self, program_spec, program_run, cluster, launcher, settings, location_cache, tmp_path
    ):
        from launchprep.core.models import LocalFileRef

        data = tmp_path / "words.txt"
        data.write_bytes(b"w" * 100)
        program = program_spec.model_copy(deep=True)
        program.runnables["counter"].local_files.append(
            LocalFileRef(name="words.txt", uri=data.as_uri())
        )
        plan = LaunchPreparer(program, program_run, cluster, launcher, settings=settings).freeze()

        await _orchestrator(launcher, settings, location_cache).launch(plan)

        last = launcher.requests[0].files[-1]
        assert last.name == "words.txt"
        assert last.archive is False
        assert uri_to_path(last.uri) == data
