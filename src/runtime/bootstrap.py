# src/runtime/bootstrap.py — v2
"""Container bootstrap shipped in launcher.zip.

Only the standard library is available when this runs. It puts the given
bundle paths on sys.path, then hands over to the runtime agent from
runtime.zip. The runtime bundle needs pydantic on the remote interpreter.

Usage:
    PYTHONPATH=launcher.zip python -m launchprep.runtime.bootstrap \\
        <runtime-config-dir> <runnable> <bundle-path>...
"""

import importlib
import pkgutil
import sys
from pathlib import Path

# Packages split across launcher.zip and runtime.zip, parents first
SPLIT_PACKAGES = ("launchprep", "launchprep.runtime")


def extend_split_packages():
    """Add the portions found in newly added bundles to packages already imported.

    launchprep and launchprep.runtime are imported from launcher.zip before
    the other bundles are on sys.path, so their __path__ only covers that zip.
    """
    for name in SPLIT_PACKAGES:
        module = sys.modules.get(name)
        if module is not None and hasattr(module, "__path__"):
            module.__path__ = pkgutil.extend_path(module.__path__, name)


def main(argv=None):
    args = sys.argv[1:] if argv is None else argv
    if len(args) < 2:
        print(
            "usage: bootstrap <runtime-config-dir> <runnable> <bundle-path>...",
            file=sys.stderr,
        )
        return 2

    config_dir, runnable, bundles = args[0], args[1], args[2:]
    for path in reversed(bundles):
        if path not in sys.path:
            sys.path.insert(0, path)
    extend_split_packages()

    agent = importlib.import_module("launchprep.runtime.agent")
    return agent.run(Path(config_dir), runnable)


if __name__ == "__main__":
    sys.exit(main())
