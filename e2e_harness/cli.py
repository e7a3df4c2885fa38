"""
Command-line interface for the E2E harness.

Operator commands for inspecting configuration and running the run-level
setup, teardown and log cleanup outside of pytest.
"""

import argparse
import asyncio
import json
import sys
from importlib.metadata import PackageNotFoundError, version as dist_version
from pathlib import Path
from typing import List, Optional

from . import __version__
from .core.config import Config, load_config
from .core.exceptions import ConfigurationError, HarnessError
from .core.logging_config import HarnessLogger
from .execution.artifacts import ArtifactManager
from .execution.session import global_setup, global_teardown

DIST_NAME = "e2e-harness"


def _project_root(args: argparse.Namespace) -> Path:
    return Path(getattr(args, "project_root", None) or Path.cwd()).resolve()


def _load(args: argparse.Namespace, validate: bool = True) -> Config:
    return load_config(_project_root(args), validate=validate)


def cmd_config(args: argparse.Namespace) -> int:
    """Print the effective configuration, optionally validating it."""
    try:
        config = _load(args, validate=False)
        print(json.dumps(config.to_dict(), indent=2))

        if args.validate:
            config.validate()
            print("✅ Configuration is valid")
        return 0

    except ConfigurationError as e:
        print(f"❌ {e}")
        for violation in e.violations:
            print(f"   • {violation}")
        return 1


def cmd_setup(args: argparse.Namespace) -> int:
    """Run global setup."""
    try:
        config = _load(args)
        summary = global_setup(config, HarnessLogger.configure(config))
        print(f"✅ Global setup completed for environment '{summary['environment']}'")
        for directory in summary["created"]:
            print(f"   ✅ Created directory: {directory}")
        return 0

    except HarnessError as e:
        print(f"❌ Global setup failed: {e}")
        return 1


def cmd_teardown(args: argparse.Namespace) -> int:
    """Run global teardown."""
    try:
        config = _load(args, validate=False)
    except ConfigurationError as e:
        print(f"❌ {e}")
        return 1

    summary = asyncio.run(global_teardown(config, HarnessLogger.configure(config)))
    if summary["report"]:
        print(f"📊 Report: {summary['report']}")
    for name, error in summary["errors"].items():
        print(f"⚠️  {name}: {error}")

    if args.verbose:
        print(json.dumps(summary, indent=2, default=str))

    print("✅ Global teardown completed")
    return 0


def cmd_cleanup_logs(args: argparse.Namespace) -> int:
    """Delete log files older than the retention window."""
    try:
        config = _load(args, validate=False)
    except ConfigurationError as e:
        print(f"❌ {e}")
        return 1

    if args.days is not None and args.days < 1:
        print("❌ --days must be at least 1")
        return 1

    manager = ArtifactManager(config, HarnessLogger.configure(config))
    summary = manager.prune_logs(retention_days=args.days, dry_run=args.dry_run)

    action = "Would delete" if args.dry_run else "Deleted"
    print(f"🧹 {action} {summary['deleted_count']} log file(s), {summary['freed_space']} bytes")
    for name in summary["deleted"]:
        print(f"   • {name}")
    for error in summary["errors"]:
        print(f"   ❌ {error}")
    return 1 if summary["errors"] else 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    try:
        current = dist_version(DIST_NAME)
    except PackageNotFoundError:
        current = __version__

    print(f"E2E Harness {current}")

    if args.verbose:
        print()
        print("System Information:")
        print(f"  Python: {sys.version}")
        print(f"  Platform: {sys.platform}")
        print(f"  Working Directory: {Path.cwd()}")

    return 0


def create_main_parser() -> argparse.ArgumentParser:
    """Create main CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="e2e-harness",
        description="E2E Harness - browser test run utilities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  e2e-harness config --validate
  ENV=qa e2e-harness setup
  e2e-harness teardown
  e2e-harness cleanup-logs --days 3
  e2e-harness version --verbose
        """,
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--project-root",
        help="Directory holding config/env and the output folders (default: cwd)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    config_parser = subparsers.add_parser("config", help="Show effective configuration")
    config_parser.add_argument(
        "--validate",
        action="store_true",
        help="Exit with an error if the configuration is invalid",
    )
    config_parser.set_defaults(func=cmd_config)

    setup_parser = subparsers.add_parser("setup", help="Run global setup")
    setup_parser.set_defaults(func=cmd_setup)

    teardown_parser = subparsers.add_parser(
        "teardown", help="Generate the report and clean up transient results"
    )
    teardown_parser.set_defaults(func=cmd_teardown)

    cleanup_parser = subparsers.add_parser(
        "cleanup-logs", help="Delete log files older than the retention window"
    )
    cleanup_parser.add_argument(
        "--days",
        type=int,
        help="Retention in days (default: HARNESS_LOG_RETENTION_DAYS)",
    )
    cleanup_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only list the files that would be deleted",
    )
    cleanup_parser.set_defaults(func=cmd_cleanup_logs)

    version_parser = subparsers.add_parser("version", help="Show version information")
    version_parser.set_defaults(func=cmd_version)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_main_parser()

    if args is None:
        args = sys.argv[1:]

    parsed_args = parser.parse_args(args)

    if not hasattr(parsed_args, "func"):
        parser.print_help()
        return 1

    return parsed_args.func(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
