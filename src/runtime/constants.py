# src/runtime/constants.py — v1
"""File names inside the runtime-config bundle.

Shared by the launch side, which writes them, and the remote agent, which
reads them.
"""

RUNTIME_SPEC = "spec.json"
ARGUMENTS = "arguments.json"
CLASSPATH = "classpath"
APPLICATION_CLASSPATH = "application-classpath"
LOGGING_TEMPLATE = "logging.json"
SETUP_SCRIPTS = ("setup_env.sh", "setup_env.py")

CLASSPATH_SEPARATOR = ":"
