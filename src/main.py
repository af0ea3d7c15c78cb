# src/main.py — v3
"""CLI entry point: launch, fingerprint and inspect commands.

Usage:
    launchprep launch <program.json> --cluster <name> --target <dir> [options]
    launchprep fingerprint <module>...
    launchprep inspect <runtime-config.zip>
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import tempfile
import zipfile
from pathlib import Path

from launchprep.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        _setup_logging(args.verbose)
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="launchprep",
        description=f"launchprep v{__version__}: prepare and dispatch program launches",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- launch ---
    p_launch = subparsers.add_parser(
        "launch", help="Launch a program described by a JSON file",
    )
    p_launch.add_argument("program", type=Path, help="Path to program JSON")
    p_launch.add_argument(
        "--cluster", default="local",
        help="Target cluster name (default: local)",
    )
    p_launch.add_argument(
        "--target", type=Path, required=True,
        help="Directory receiving the dispatched files",
    )
    p_launch.add_argument(
        "--arg", dest="arguments", action="append", default=[],
        help="Application argument (repeatable, order kept)",
    )
    p_launch.add_argument(
        "--dependency", dest="dependencies", action="append", default=[],
        help="Module packed into the application bundle (repeatable)",
    )
    p_launch.add_argument(
        "--timeout", type=float, default=None,
        help="Launch timeout in seconds (default: LAUNCH_TIMEOUT_S)",
    )
    p_launch.add_argument(
        "--run-id", default=None,
        help="Run ID (generated if omitted)",
    )
    p_launch.add_argument(
        "--no-cluster-storage", action="store_true",
        help="Resolve cluster-scheme files as plain URLs",
    )
    p_launch.set_defaults(func=_cmd_launch)

    # --- fingerprint ---
    p_fingerprint = subparsers.add_parser(
        "fingerprint", help="Print the application bundle name for a module set",
    )
    p_fingerprint.add_argument("modules", nargs="+", help="Module names")
    p_fingerprint.set_defaults(func=_cmd_fingerprint)

    # --- inspect ---
    p_inspect = subparsers.add_parser(
        "inspect", help="Summarize a runtime-config bundle",
    )
    p_inspect.add_argument("bundle", type=Path, help="Path to runtime-config.zip")
    p_inspect.set_defaults(func=_cmd_inspect)

    return parser


async def _cmd_launch(args: argparse.Namespace) -> int:
    """Launch one program into a target directory."""
    from launchprep.config.settings import Settings
    from launchprep.core.models import ClusterInfo, ProgramRun, ProgramSpec
    from launchprep.launch.directory_launcher import DirectoryLauncher
    from launchprep.preparer.preparer import LaunchPreparer
    from launchprep.storage.run_manager import generate_run_id
    from launchprep.storage.storage_factory import create_cluster_storage

    program_file: Path = args.program
    if not program_file.is_file():
        logger.error("File not found: %s", program_file)
        return 1

    settings = Settings()
    program = ProgramSpec.model_validate_json(program_file.read_text(encoding="utf-8"))
    program_run = ProgramRun(
        application=program.name,
        program=next(iter(program.runnables), program.name),
        run_id=args.run_id or generate_run_id(),
    )
    cluster_storage = None if args.no_cluster_storage else create_cluster_storage(settings)

    preparer = LaunchPreparer(
        program,
        program_run,
        ClusterInfo(name=args.cluster),
        DirectoryLauncher(args.target, cluster_storage=cluster_storage),
        settings=settings,
        cluster_storage=cluster_storage,
    )
    controller = await (
        preparer.with_application_arguments(*args.arguments)
        .with_dependencies(*args.dependencies)
        .start(timeout=args.timeout)
    )

    print(f"\nLaunch dispatched:")
    print(f"  Run ID:   {controller.run_id}")
    print(f"  Cluster:  {controller.request.cluster_name}")
    print(f"  Files:    {len(controller.request.files)}")
    print(f"  Target:   {args.target / controller.run_id}")
    return 0


async def _cmd_fingerprint(args: argparse.Namespace) -> int:
    """Print the cache name an application bundle would get."""
    from launchprep.cache.fingerprint import application_bundle_name

    print(application_bundle_name(args.modules))
    return 0


async def _cmd_inspect(args: argparse.Namespace) -> int:
    """Display the runtime descriptor carried by a runtime-config bundle."""
    from launchprep.runtime.constants import RUNTIME_SPEC
    from launchprep.runtime.descriptor import load_descriptor

    bundle: Path = args.bundle
    if not zipfile.is_zipfile(bundle):
        logger.error("Not a zip bundle: %s", bundle)
        return 1

    with tempfile.TemporaryDirectory() as tmp:
        with zipfile.ZipFile(bundle) as zf:
            zf.extractall(tmp)
        descriptor = load_descriptor(Path(tmp) / RUNTIME_SPEC)

    name = descriptor.runnable_name
    runnable = descriptor.program.runnables[name]
    print(f"\nRuntime descriptor v{descriptor.version}:")
    print(f"  Run ID:     {descriptor.run_id}")
    print(f"  Program:    {descriptor.program_name}")
    print(f"  Runnable:   {name} ({runnable.entry_point})")
    print(f"  Files:      {len(runnable.local_files)}")
    print(f"  Arguments:  {' '.join(descriptor.arguments.for_runnable(name))}")
    if descriptor.program.event_handler is not None:
        print(f"  Handler:    {descriptor.program.event_handler.class_name}")
    return 0


def _setup_logging(verbose: bool) -> None:
    """Text logs on stderr; LOG_FILE, LOG_ROTATION and LOG_RETENTION still apply."""
    from launchprep.config.settings import Settings
    from launchprep.logging.logger import setup_logging_from_settings

    setup_logging_from_settings(
        Settings(), level="DEBUG" if verbose else None, log_format="text"
    )


if __name__ == "__main__":
    sys.exit(main())
