"""
Output reporting module.

Results go to stdout so they can be piped; diagnostics, warnings and
errors go to stderr.
"""

import sys
from typing import Dict, List
from enum import Enum

from .analyzer import KernelPackage, RunResult


class OutputLevel(Enum):
    """Output verbosity levels."""
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2


class Reporter:
    """
    Handles formatted output for kernpurge operations.

    Provides plain output with configurable verbosity.
    """

    def __init__(self, level: OutputLevel = OutputLevel.NORMAL):
        """
        Initialize the reporter.

        Args:
            level: Output verbosity level
        """
        self.level = level

    def info(self, message: str) -> None:
        """Print a diagnostic message in verbose mode."""
        if self.level == OutputLevel.VERBOSE:
            print(message, file=sys.stderr)

    def warning(self, message: str) -> None:
        """Print a warning unless quiet."""
        if self.level != OutputLevel.QUIET:
            print(f"Warning: {message}", file=sys.stderr)

    def error(self, message: str) -> None:
        """Errors are always shown."""
        print(f"Error: {message}", file=sys.stderr)

    def print_groups(self, groups: Dict[str, List[KernelPackage]]) -> None:
        """
        Print classified kernel packages per family (verbose only).

        Args:
            groups: Packages per name prefix
        """
        if self.level != OutputLevel.VERBOSE:
            return

        for prefix, packages in groups.items():
            print(f"{prefix}*", file=sys.stderr)
            for pkg in packages:
                marker = " (booted)" if pkg.is_booted else ""
                print(f"  {pkg.name} {pkg.version_revision}{marker}", file=sys.stderr)

    def print_unused(self, result: RunResult) -> None:
        """
        Print unused package names, one per line.

        The list is the program's result, so it is printed even when quiet.

        Args:
            result: Resolved run result
        """
        for name in result.unused_names:
            print(name)

    def print_command(self, command: List[str], dry_run: bool = False) -> None:
        """
        Print the command that will be executed.

        Args:
            command: Command as list of arguments
            dry_run: Whether this is a dry run
        """
        if self.level == OutputLevel.QUIET and not dry_run:
            return

        cmd_str = " ".join(command)
        if dry_run:
            print(f"[DRY RUN] Would execute: {cmd_str}")
        else:
            print(f"Executing: {cmd_str}", file=sys.stderr)

    def print_summary(self, removed: List[str]) -> None:
        """
        Print final summary after a successful purge.

        Args:
            removed: Package names that were purged
        """
        if self.level == OutputLevel.QUIET:
            return

        print(f"Purged {len(removed)} package(s).", file=sys.stderr)
