"""
Package removal module.

Provides functionality to purge kernel packages using apt-get or aptitude,
optionally waiting for the dpkg lock held by another process.
"""

import os
import re
import subprocess
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .utils import command_environment, find_executable, run_command


# In order of preference
REMOVAL_TOOLS = ("apt-get", "aptitude")

DPKG_LOCK_FILES = (
    "/var/lib/dpkg/lock-frontend",
    "/var/lib/dpkg/lock",
)

# First apt release understanding -o DPkg::Lock::Timeout
LOCK_TIMEOUT_MIN_APT = (1, 9, 11)


class RemovalToolNotFoundError(RuntimeError):
    """Raised when neither apt-get nor aptitude is installed."""


class RemovalError(RuntimeError):
    """Raised when the purge command fails."""


class LockWaitError(RuntimeError):
    """Raised when probing the dpkg lock fails unexpectedly."""


def _default_environment() -> Dict[str, str]:
    return {"DEBIAN_FRONTEND": "noninteractive"}


@dataclass
class PurgeConfig:
    """
    Settings for a purge run.

    Attributes:
        wait_seconds: How long to wait for the dpkg lock (0 = don't wait)
        compat_lock_wait: Poll the lock with fuser instead of relying on apt
        environment: Variables set for the purge command only
    """
    wait_seconds: int = 0
    compat_lock_wait: bool = False
    environment: Dict[str, str] = field(default_factory=_default_environment)


def check_sudo() -> bool:
    """
    Check if the current process has root privileges.

    Returns:
        bool: True if running as root, False otherwise
    """
    try:
        return os.geteuid() == 0
    except AttributeError:
        # os.geteuid() not available on Windows
        return False


def find_removal_tool() -> str:
    """
    Pick the package removal tool to use.

    Returns:
        str: 'apt-get' if installed, otherwise 'aptitude'

    Raises:
        RemovalToolNotFoundError: If neither is installed
    """
    tool = find_executable(REMOVAL_TOOLS)
    if tool is None:
        raise RemovalToolNotFoundError(
            "No package removal tool found (tried: {})".format(", ".join(REMOVAL_TOOLS))
        )
    return tool


def get_apt_version() -> Optional[Tuple[int, ...]]:
    """
    Get the installed apt version.

    Parses the first line of 'apt-get --version', e.g. 'apt 2.6.1 (amd64)'.

    Returns:
        Optional[Tuple[int, ...]]: Numeric version components, or None if unknown
    """
    try:
        returncode, stdout, _ = run_command(["apt-get", "--version"], check=False)
    except OSError:
        return None

    if returncode != 0:
        return None

    match = re.match(r'^apt\s+(\d+(?:\.\d+)*)', stdout)
    if not match:
        return None

    return tuple(int(part) for part in match.group(1).split("."))


def supports_lock_timeout(tool: str) -> bool:
    """
    Check whether the tool honours -o DPkg::Lock::Timeout.

    Args:
        tool: Removal tool name

    Returns:
        bool: True for apt-get from apt 1.9.11 on
    """
    if tool != "apt-get":
        return False

    version = get_apt_version()
    return version is not None and version >= LOCK_TIMEOUT_MIN_APT


def generate_purge_command(
    tool: str,
    packages: List[str],
    lock_timeout: Optional[int] = None,
) -> List[str]:
    """
    Generate the command to purge packages.

    Conffile prompts are answered with the defaults so the command never
    stops to ask.

    Args:
        tool: 'apt-get' or 'aptitude'
        packages: Package names to purge
        lock_timeout: Seconds apt should wait for the dpkg lock, if supported

    Returns:
        List[str]: Command as list of arguments

    Raises:
        ValueError: If no packages are given
    """
    if not packages:
        raise ValueError("No packages provided for removal")

    cmd = [
        tool, "-y",
        "-o", "Dpkg::Options::=--force-confdef",
        "-o", "Dpkg::Options::=--force-confold",
    ]

    if lock_timeout is not None:
        cmd.extend(["-o", f"DPkg::Lock::Timeout={lock_timeout}"])

    cmd.append("purge")
    cmd.extend(packages)

    return cmd


def is_dpkg_locked() -> bool:
    """
    Check whether another process holds the dpkg lock.

    Returns:
        bool: True if a process has one of the lock files open

    Raises:
        LockWaitError: If fuser fails or is killed by a signal
    """
    try:
        returncode, _, stderr = run_command(["fuser", *DPKG_LOCK_FILES], check=False)
    except OSError as e:
        raise LockWaitError(f"Unable to run fuser: {e}")

    # fuser: 0 = some file in use, 1 = none in use
    if returncode == 0:
        return True
    if returncode == 1:
        return False
    if returncode < 0:
        raise LockWaitError(f"fuser killed by signal {-returncode}")
    raise LockWaitError(f"fuser failed with exit code {returncode}: {stderr.strip()}")


def wait_for_dpkg_lock(seconds: int) -> bool:
    """
    Poll the dpkg lock once a second until it is free.

    Args:
        seconds: Maximum number of polls

    Returns:
        bool: True if the lock was free, False if the wait timed out

    Raises:
        LockWaitError: If the lock probe fails
    """
    for _ in range(seconds):
        if not is_dpkg_locked():
            return True
        time.sleep(1)
    return False


def _execute_purge(cmd: List[str], env: Dict[str, str]) -> None:
    """
    Execute the purge command with no usable stdin.

    Args:
        cmd: Purge command to execute
        env: Full environment for the child

    Raises:
        RemovalError: If the command fails
    """
    try:
        result = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            env=env,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as e:
        raise RemovalError(f"Failed to execute {cmd[0]}: {e}")

    if result.returncode != 0:
        raise RemovalError(
            f"{cmd[0]} purge failed with exit code {result.returncode}"
        )


def plan_purge(packages: List[str], config: PurgeConfig) -> Tuple[List[str], bool]:
    """
    Work out the purge command and whether to poll the lock first.

    Args:
        packages: Package names to purge
        config: Purge settings

    Returns:
        Tuple[List[str], bool]: (command, poll_lock_first)

    Raises:
        RemovalToolNotFoundError: If no removal tool is installed
    """
    tool = find_removal_tool()

    lock_timeout = None
    poll_lock = False
    if config.wait_seconds > 0:
        if not config.compat_lock_wait and supports_lock_timeout(tool):
            lock_timeout = config.wait_seconds
        else:
            poll_lock = True

    return generate_purge_command(tool, packages, lock_timeout), poll_lock


def purge_packages(
    packages: List[str],
    config: PurgeConfig,
    dry_run: bool = False,
    warn: Callable[[str], None] = print,
    announce: Optional[Callable[[List[str]], None]] = None,
) -> List[str]:
    """
    Purge packages.

    Args:
        packages: Package names to purge
        config: Purge settings
        dry_run: If True, only build the command
        warn: Called with a message when the lock wait times out
        announce: Called with the command before it runs

    Returns:
        List[str]: The command that was (or would have been) executed,
            empty if there was nothing to purge

    Raises:
        PermissionError: If not running with root privileges
        RemovalToolNotFoundError: If no removal tool is installed
        LockWaitError: If probing the dpkg lock fails
        RemovalError: If the purge command fails
    """
    if not packages:
        return []

    cmd, poll_lock = plan_purge(packages, config)

    if announce is not None:
        announce(cmd)

    if dry_run:
        return cmd

    if not check_sudo():
        raise PermissionError("Root privileges required. Please run with sudo.")

    if poll_lock and not wait_for_dpkg_lock(config.wait_seconds):
        warn(
            f"dpkg lock still held after {config.wait_seconds} second(s); "
            "trying anyway"
        )

    _execute_purge(cmd, command_environment(config.environment))
    return cmd
