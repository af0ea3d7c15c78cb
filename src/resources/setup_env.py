"""Print shell exports for the container, derived from the runtime-config dir.

Emits PYTHONPATH built from the application-classpath and classpath files,
followed by the runnable environment recorded in spec.json.
"""

import json
import os
import shlex
import sys


def _entries(path):
    if not os.path.isfile(path):
        return []
    with open(path, encoding="utf-8") as fh:
        return [e for e in fh.read().split(":") if e.strip()]


def main(config_dir):
    paths = _entries(os.path.join(config_dir, "application-classpath"))
    paths += _entries(os.path.join(config_dir, "classpath"))
    existing = os.environ.get("PYTHONPATH")
    if existing:
        paths.append(existing)
    print("export PYTHONPATH=" + shlex.quote(":".join(paths)))

    spec_path = os.path.join(config_dir, "spec.json")
    if os.path.isfile(spec_path):
        with open(spec_path, encoding="utf-8") as fh:
            spec = json.load(fh)
        for env in spec.get("environments", {}).values():
            for key, value in env.items():
                print("export %s=%s" % (key, shlex.quote(value)))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else os.getcwd()))
