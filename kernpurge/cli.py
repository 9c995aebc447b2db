"""
Command-line interface for kernpurge.

Provides argument parsing and orchestrates the unused kernel workflow.
"""

import sys
import signal
import argparse
from typing import Optional

from . import __version__
from .detector import (
    get_running_kernel,
    list_installed_packages,
    KernelIdentityError,
    PackageListError,
)
from .analyzer import (
    classify_packages,
    find_unused_kernels,
    validate_removal_safety,
    BootedKernelNotFoundError,
    UnsafeRemovalError,
    RunResult,
)
from .remover import (
    purge_packages,
    check_sudo,
    PurgeConfig,
    RemovalError,
    RemovalToolNotFoundError,
    LockWaitError,
)
from .reporter import Reporter, OutputLevel


EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE = 64
EXIT_INTERRUPTED = 130


class ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser exiting with EX_USAGE on bad command lines."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def _non_negative_int(value: str) -> int:
    try:
        seconds = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if seconds < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return seconds


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = ArgumentParser(
        prog="kernpurge",
        description="List or purge installed kernel packages other than the booted one",
        epilog="Example: sudo kernpurge --uninstall --wait 60",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-u", "--uninstall",
        action="store_true",
        help="Purge the unused kernel packages instead of listing them (requires root)",
    )

    parser.add_argument(
        "-w", "--wait",
        metavar="SECONDS",
        type=_non_negative_int,
        default=0,
        help="Wait up to SECONDS for the dpkg lock before purging",
    )

    parser.add_argument(
        "--compat-lock-wait",
        action="store_true",
        help="Wait for the dpkg lock by polling with fuser instead of using apt's lock timeout",
    )

    parser.add_argument(
        "-n", "--dry-run",
        action="store_true",
        help="Show the purge command without running it (use with --uninstall)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    return parser


def _setup_reporter(args) -> Reporter:
    """
    Set up reporter based on command-line arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        Reporter: Configured reporter instance
    """
    if args.quiet:
        output_level = OutputLevel.QUIET
    elif args.verbose:
        output_level = OutputLevel.VERBOSE
    else:
        output_level = OutputLevel.NORMAL

    return Reporter(output_level)


def _handle_interrupt(signum, frame):
    sys.exit(EXIT_INTERRUPTED)


def _detect_and_resolve(reporter: Reporter) -> RunResult:
    """
    Detect the running kernel and resolve the unused kernel packages.

    Args:
        reporter: Reporter instance for output

    Returns:
        RunResult: Result with the booted kernel identified

    Raises:
        KernelIdentityError: If the running kernel cannot be detected
        PackageListError: If the package listing is unusable
        BootedKernelNotFoundError: If no package matches the running kernel
    """
    reporter.info("Detecting running kernel...")
    running_kernel = get_running_kernel()
    reporter.info(f"Running kernel: {running_kernel}")

    reporter.info("Querying installed packages...")
    entries = list_installed_packages()
    reporter.info(f"Found {len(entries)} package(s) in the dpkg database")

    groups = classify_packages(entries, running_kernel)
    reporter.print_groups(groups)

    result = find_unused_kernels(groups, running_kernel)

    if len(result.booted_packages) > 1:
        reporter.info("Packages matching the running kernel: " + ", ".join(
            pkg.name for pkg in result.booted_packages
        ))
    reporter.info(f"Booted kernel package: {result.booted.name}")

    return result


def _handle_removal(args, reporter: Reporter, result: RunResult) -> int:
    """
    Purge the unused packages.

    Args:
        args: Parsed command-line arguments
        reporter: Reporter instance for output
        result: Resolved run result

    Returns:
        int: Exit code
    """
    names = result.unused_names
    validate_removal_safety(names, result)

    if not args.dry_run and not check_sudo():
        reporter.error("Root privileges required for package removal.")
        print("Please run with sudo:", file=sys.stderr)
        print("  sudo kernpurge --uninstall", file=sys.stderr)
        return EXIT_FAILURE

    config = PurgeConfig(
        wait_seconds=args.wait,
        compat_lock_wait=args.compat_lock_wait,
    )

    purge_packages(
        names,
        config,
        dry_run=args.dry_run,
        warn=reporter.warning,
        announce=lambda cmd: reporter.print_command(cmd, dry_run=args.dry_run),
    )

    if not args.dry_run:
        reporter.print_summary(names)

    return EXIT_SUCCESS


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        int: Exit code:
            0 = success (including nothing to do)
            1 = failure (kernel not identified, bad listing, purge failed)
            64 = usage error
            130 = interrupted
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Validate argument combinations
    if args.quiet and args.verbose:
        parser.error("--quiet and --verbose cannot be used together")

    if args.dry_run and not args.uninstall:
        parser.error("--dry-run can only be used with --uninstall")

    signal.signal(signal.SIGINT, _handle_interrupt)

    reporter = _setup_reporter(args)

    try:
        result = _detect_and_resolve(reporter)

        if not result.unused:
            reporter.info("No unused kernel packages found.")
            return EXIT_SUCCESS

        if not args.uninstall:
            reporter.print_unused(result)
            return EXIT_SUCCESS

        return _handle_removal(args, reporter, result)

    except (KernelIdentityError, PackageListError, BootedKernelNotFoundError) as e:
        # Nothing has been touched yet
        reporter.error(str(e))
        return EXIT_FAILURE
    except (UnsafeRemovalError, RemovalToolNotFoundError, LockWaitError,
            RemovalError, PermissionError) as e:
        reporter.error(str(e))
        return EXIT_FAILURE
    except Exception as e:
        reporter.error(f"Unexpected error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
