# src/storage/layout.py — v3
"""Staging directory structure definition.

Defines bundle names, runtime-config file names and the per-launch staging
paths. Bundle names double as the names files are localized under on the
cluster side.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from launchprep.runtime.constants import (
    APPLICATION_CLASSPATH,
    ARGUMENTS,
    CLASSPATH,
    LOGGING_TEMPLATE,
    RUNTIME_SPEC,
)

# Bundles, in dispatch order
LAUNCHER_BUNDLE = "launcher.zip"
RUNTIME_BUNDLE = "runtime.zip"
APPLICATION_BUNDLE = "application.zip"
RESOURCES_BUNDLE = "resources.zip"
RUNTIME_CONFIG_BUNDLE = "runtime-config.zip"

# Modules carried by the two fixed bundles. launchprep/__init__.py imports
# launchprep.version, so both bundles ship it. runtime.zip needs pydantic
# installed on the remote interpreter.
LAUNCHER_MODULES = ("launchprep.version", "launchprep.runtime.bootstrap")
RUNTIME_MODULES = ("launchprep.version", "launchprep.runtime", "launchprep.core")


def create_staging_dir(staging_root: Path, run_id: str) -> Path:
    """Create a fresh staging directory named after the run."""
    staging_root.mkdir(parents=True, exist_ok=True)
    return Path(tempfile.mkdtemp(prefix=f"{run_id}-", dir=staging_root))


def create_runtime_config_dir(staging_dir: Path) -> Path:
    """Create the scratch directory zipped into the runtime-config bundle."""
    return Path(tempfile.mkdtemp(prefix="runtime-config-", dir=staging_dir))


def bundle_path(staging_dir: Path, bundle_name: str) -> Path:
    return staging_dir / bundle_name


def runtime_spec_path(config_dir: Path) -> Path:
    return config_dir / RUNTIME_SPEC


def arguments_path(config_dir: Path) -> Path:
    return config_dir / ARGUMENTS


def classpath_path(config_dir: Path) -> Path:
    return config_dir / CLASSPATH


def application_classpath_path(config_dir: Path) -> Path:
    return config_dir / APPLICATION_CLASSPATH


def logging_template_path(config_dir: Path) -> Path:
    return config_dir / LOGGING_TEMPLATE
