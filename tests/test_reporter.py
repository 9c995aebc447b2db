"""
Unit tests for the reporter module.

Tests output formatting and different verbosity levels.
"""

import unittest
from io import StringIO
from unittest.mock import patch

from kernpurge.reporter import Reporter, OutputLevel
from kernpurge.analyzer import KernelPackage, RunResult


class TestReporterOutput(unittest.TestCase):
    """Test Reporter output formatting."""

    def setUp(self):
        """Set up test fixtures."""
        self.booted = KernelPackage(
            "linux-image-5.10.0-21-amd64", "5.10.162-1", "5.10.0-21-amd64",
            "linux-image-", True,
        )
        self.unused = [
            KernelPackage("linux-image-4.19.0-17-amd64", "4.19.194-3",
                          "4.19.0-17-amd64", "linux-image-"),
            KernelPackage("linux-image-5.10.0-19-amd64", "5.10.149-2",
                          "5.10.0-19-amd64", "linux-image-"),
        ]
        self.result = RunResult(
            booted=self.booted,
            booted_packages=[self.booted],
            unused=self.unused,
        )
        self.groups = {"linux-image-": [self.unused[0], self.booted, self.unused[1]]}

    def test_print_unused(self):
        """Test unused names are printed one per line."""
        reporter = Reporter(OutputLevel.NORMAL)

        with patch('sys.stdout', new=StringIO()) as fake_out:
            reporter.print_unused(self.result)
            output = fake_out.getvalue()

        self.assertEqual(
            output,
            "linux-image-4.19.0-17-amd64\nlinux-image-5.10.0-19-amd64\n",
        )

    def test_print_unused_quiet(self):
        """Test the result list is still printed in quiet mode."""
        reporter = Reporter(OutputLevel.QUIET)

        with patch('sys.stdout', new=StringIO()) as fake_out:
            reporter.print_unused(self.result)
            output = fake_out.getvalue()

        self.assertIn("linux-image-4.19.0-17-amd64", output)

    def test_print_groups_verbose(self):
        """Test classified packages are listed in verbose mode."""
        reporter = Reporter(OutputLevel.VERBOSE)

        with patch('sys.stderr', new=StringIO()) as fake_err:
            reporter.print_groups(self.groups)
            output = fake_err.getvalue()

        self.assertIn("linux-image-*", output)
        self.assertIn("linux-image-5.10.0-21-amd64 5.10.162-1 (booted)", output)
        self.assertIn("linux-image-4.19.0-17-amd64 4.19.194-3\n", output)

    def test_print_groups_normal(self):
        """Test classified packages are not listed by default."""
        reporter = Reporter(OutputLevel.NORMAL)

        with patch('sys.stderr', new=StringIO()) as fake_err:
            reporter.print_groups(self.groups)

        self.assertEqual(fake_err.getvalue(), "")

    def test_info_only_when_verbose(self):
        """Test diagnostics depend on verbosity."""
        with patch('sys.stderr', new=StringIO()) as fake_err:
            Reporter(OutputLevel.NORMAL).info("hidden")
            Reporter(OutputLevel.VERBOSE).info("shown")

        self.assertEqual(fake_err.getvalue(), "shown\n")

    def test_warning_and_error(self):
        """Test warnings are hidden when quiet, errors never are."""
        with patch('sys.stderr', new=StringIO()) as fake_err:
            Reporter(OutputLevel.QUIET).warning("lock held")
            Reporter(OutputLevel.QUIET).error("broken")
            Reporter(OutputLevel.NORMAL).warning("lock held")
            output = fake_err.getvalue()

        self.assertEqual(output, "Error: broken\nWarning: lock held\n")


class TestReporterCommand(unittest.TestCase):
    """Test command and summary output."""

    def setUp(self):
        self.command = ["apt-get", "-y", "purge", "linux-image-5.10.0-19-amd64"]

    def test_print_command_dry_run(self):
        """Test dry-run command goes to stdout, even when quiet."""
        reporter = Reporter(OutputLevel.QUIET)

        with patch('sys.stdout', new=StringIO()) as fake_out:
            reporter.print_command(self.command, dry_run=True)
            output = fake_out.getvalue()

        self.assertIn("[DRY RUN] Would execute: apt-get -y purge", output)

    def test_print_command_real(self):
        """Test executed command goes to stderr."""
        reporter = Reporter(OutputLevel.NORMAL)

        with patch('sys.stderr', new=StringIO()) as fake_err:
            reporter.print_command(self.command)
            output = fake_err.getvalue()

        self.assertIn("Executing: apt-get -y purge linux-image-5.10.0-19-amd64", output)

    def test_print_command_quiet(self):
        """Test executed command is hidden in quiet mode."""
        reporter = Reporter(OutputLevel.QUIET)

        with patch('sys.stderr', new=StringIO()) as fake_err:
            reporter.print_command(self.command)

        self.assertEqual(fake_err.getvalue(), "")

    def test_print_summary(self):
        reporter = Reporter(OutputLevel.NORMAL)

        with patch('sys.stderr', new=StringIO()) as fake_err:
            reporter.print_summary(["a", "b"])

        self.assertIn("Purged 2 package(s).", fake_err.getvalue())


if __name__ == '__main__':
    unittest.main()
