# tests/unit/runtime/test_unit_bootstrap.py — v2
"""Tests for runtime/bootstrap.py — sys.path setup and hand-over to the agent."""

from __future__ import annotations

import logging
import subprocess
import sys
import textwrap
from pathlib import Path
from unittest.mock import MagicMock, patch

from launchprep.bundling.bundler import ApplicationBundler
from launchprep.runtime import bootstrap
from launchprep.storage import layout


class TestBootstrap:
    def test_usage(self, capsys):
        assert bootstrap.main(["only-one"]) == 2
        assert "usage" in capsys.readouterr().err

    def test_bundles_prepended_in_order(self, monkeypatch):
        monkeypatch.setattr(sys, "path", ["/existing"])
        fake_agent = MagicMock()
        fake_agent.run.return_value = 0
        with patch("importlib.import_module", return_value=fake_agent) as imp:
            code = bootstrap.main(["/cfg", "counter", "runtime.zip", "application.zip"])
        assert code == 0
        assert sys.path == ["runtime.zip", "application.zip", "/existing"]
        imp.assert_called_once_with("launchprep.runtime.agent")
        fake_agent.run.assert_called_once_with(Path("/cfg"), "counter")

    def test_end_to_end_with_agent(self, config_dir, sample_app, monkeypatch):
        monkeypatch.setattr(sys, "path", list(sys.path))
        monkeypatch.setenv("LP_TEST_ENV", "before")
        root = logging.getLogger()
        level = root.level
        try:
            assert bootstrap.main([str(config_dir), "counter"]) == 0
        finally:
            root.setLevel(level)
            logging.getLogger("app.io").setLevel(logging.NOTSET)


def _run_python(flags: list[str], code: str, cwd: Path) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, *flags, "-c", code],
        cwd=cwd, capture_output=True, text=True, timeout=60,
    )


class TestStandaloneBundles:
    """Remote side imported from the built zips, not from the installed package."""

    def test_bootstrap_imports_from_launcher_zip_alone(self, tmp_path):
        launcher_zip = tmp_path / "launcher.zip"
        ApplicationBundler().create_bundle(launcher_zip, layout.LAUNCHER_MODULES)
        code = textwrap.dedent(
            f"""
            import sys
            sys.path.insert(0, {str(launcher_zip)!r})
            import launchprep.runtime.bootstrap as bootstrap
            print(bootstrap.__file__)
            """
        )
        result = _run_python(["-I", "-S"], code, tmp_path)
        assert result.returncode == 0, result.stderr
        assert str(launcher_zip) in result.stdout

    def test_agent_runs_from_bundles(self, tmp_path, config_dir, sample_app):
        bundler = ApplicationBundler()
        launcher_zip = tmp_path / "launcher.zip"
        runtime_zip = tmp_path / "runtime.zip"
        application_zip = tmp_path / "application.zip"
        bundler.create_bundle(launcher_zip, layout.LAUNCHER_MODULES)
        bundler.create_bundle(runtime_zip, layout.RUNTIME_MODULES)
        bundler.create_bundle(application_zip, [sample_app])

        code = textwrap.dedent(
            f"""
            import sys
            sys.path.insert(0, {str(launcher_zip)!r})
            from launchprep.runtime import bootstrap
            code = bootstrap.main([
                {str(config_dir)!r}, "counter",
                {str(runtime_zip)!r}, {str(application_zip)!r},
            ])
            print(sys.modules["launchprep.runtime.agent"].__file__)
            print(sys.modules[{sample_app!r}].CALLS)
            sys.exit(code)
            """
        )
        # -I keeps PYTHONPATH out; site-packages stay for pydantic
        result = _run_python(["-I"], code, tmp_path)
        assert result.returncode == 0, result.stderr
        agent_file, calls = result.stdout.strip().splitlines()[-2:]
        assert agent_file.startswith(str(runtime_zip))
        assert calls == "[['--date', '2026-01-01', '--verbose']]"
