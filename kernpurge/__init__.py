"""
KernPurge - Unused Kernel Purge Tool

A small command-line utility that lists, and optionally purges, every
installed kernel image package except the one that is currently booted.
"""

__version__ = "0.1.0"
__author__ = "KernPurge Contributors"
__license__ = "MIT"

from .cli import main

__all__ = ["main"]
