# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides a sample importable application module, program specs, settings
rooted in tmp_path, a local content cache and a recording launcher.
No external services: S3 is mocked where it appears.
"""

from __future__ import annotations

import sys
import textwrap
from pathlib import Path

import pytest

from launchprep.cache.local_store import LocalLocationCache
from launchprep.config.settings import Settings
from launchprep.core.models import (
    ClusterInfo,
    LaunchRequest,
    ProgramRun,
    ProgramSpec,
    RunnableSpec,
)
from launchprep.launch.base_launcher import BaseClusterLauncher

SAMPLE_APP = "launchprep_sample_app"


class RecordingLauncher(BaseClusterLauncher):
    """Keeps every request and the bytes of each dispatched local file."""

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.requests: list[LaunchRequest] = []
        self.contents: dict[str, bytes] = {}
        self._fail_with = fail_with

    @property
    def name(self) -> str:
        return "recording"

    async def launch(self, request: LaunchRequest) -> None:
        if self._fail_with is not None:
            raise self._fail_with
        self.requests.append(request)
        for launch_file in request.files:
            if launch_file.uri.startswith("file:"):
                from launchprep.storage.local_storage import uri_to_path

                self.contents[launch_file.name] = uri_to_path(launch_file.uri).read_bytes()


# === FIXTURES: Sample application ===


@pytest.fixture
def sample_app(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Importable module with a main(args) entry point; returns its name."""
    app_dir = tmp_path / "app_src"
    app_dir.mkdir()
    (app_dir / f"{SAMPLE_APP}.py").write_text(
        textwrap.dedent(
            """
            CALLS = []


            def main(args):
                CALLS.append(list(args))
                return 0
            """
        ),
        encoding="utf-8",
    )
    monkeypatch.delitem(sys.modules, SAMPLE_APP, raising=False)
    monkeypatch.syspath_prepend(str(app_dir))
    return SAMPLE_APP


@pytest.fixture
def program_spec(sample_app: str) -> ProgramSpec:
    """Single-runnable program without local files."""
    return ProgramSpec(
        name="word-count",
        runnables={
            "counter": RunnableSpec(name="counter", entry_point=f"{sample_app}:main"),
        },
    )


@pytest.fixture
def program_run() -> ProgramRun:
    return ProgramRun(
        namespace="default",
        application="analytics",
        program="counter",
        run_id="20260101_120000_abcd1234",
    )


@pytest.fixture
def cluster() -> ClusterInfo:
    return ClusterInfo(name="test-cluster", properties={"zone": "a"})


# === FIXTURES: Infrastructure ===


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings rooted in tmp_path, ignoring any .env file."""
    return Settings(
        _env_file=None,
        local_data_dir=tmp_path / "data",
        cache_root=tmp_path / "cache",
        launch_timeout_s=60.0,
    )


@pytest.fixture
def staging_root(settings: Settings) -> Path:
    return settings.staging_root


@pytest.fixture
def location_cache(tmp_path: Path) -> LocalLocationCache:
    return LocalLocationCache(cache_root=tmp_path / "cache")


@pytest.fixture
def launcher() -> RecordingLauncher:
    return RecordingLauncher()


@pytest.fixture
def launcher_factory() -> type[RecordingLauncher]:
    """RecordingLauncher class, for tests that need a failing launcher."""
    return RecordingLauncher


@pytest.fixture
def tmp_staging(tmp_path: Path) -> Path:
    """Empty staging directory."""
    staging = tmp_path / "staging"
    staging.mkdir()
    return staging
