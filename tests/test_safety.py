"""
Unit tests for safety validation functions.
"""

import unittest
from kernpurge.analyzer import (
    validate_removal_safety,
    KernelPackage,
    RunResult,
    UnsafeRemovalError,
)


class TestValidateRemovalSafety(unittest.TestCase):
    """Test safety validation logic."""

    def setUp(self):
        """Set up a resolved result."""
        self.booted = KernelPackage(
            "linux-image-5.10.0-21-amd64", "5.10.162-1", "5.10.0-21-amd64",
            "linux-image-", True,
        )
        self.unused = [
            KernelPackage(
                "linux-image-5.10.0-19-amd64", "5.10.149-2", "5.10.0-19-amd64",
                "linux-image-", False,
            ),
        ]
        self.result = RunResult(
            booted=self.booted,
            booted_packages=[self.booted],
            unused=self.unused,
        )

    def test_safe_removal(self):
        """Test that the resolved unused list passes validation."""
        validate_removal_safety(self.result.unused_names, self.result)

    def test_booted_package_protection(self):
        """Test that the booted kernel package cannot be removed."""
        with self.assertRaises(UnsafeRemovalError) as ctx:
            validate_removal_safety(
                ["linux-image-5.10.0-21-amd64", "linux-image-5.10.0-19-amd64"],
                self.result,
            )

        self.assertIn("linux-image-5.10.0-21-amd64", str(ctx.exception))

    def test_same_release_other_family_protection(self):
        """Test that any package providing the running release is refused."""
        with self.assertRaises(UnsafeRemovalError) as ctx:
            validate_removal_safety(["kfreebsd-image-5.10.0-21-amd64"], self.result)

        self.assertIn("running kernel", str(ctx.exception))

    def test_unknown_booted_kernel(self):
        """Test that nothing may be removed when the booted kernel is unknown."""
        result = RunResult(booted=None, booted_packages=[], unused=self.unused)

        with self.assertRaises(UnsafeRemovalError):
            validate_removal_safety(result.unused_names, result)

    def test_unknown_booted_kernel_empty_list(self):
        """Test that an empty list is refused too without a booted kernel."""
        result = RunResult(booted=None)

        with self.assertRaises(UnsafeRemovalError):
            validate_removal_safety([], result)


if __name__ == '__main__':
    unittest.main()
