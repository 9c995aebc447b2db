"""
Kernel detection module.

Provides functionality to detect the currently running kernel, list the
packages recorded in the dpkg database, and recognize kernel image packages
by name.
"""

import re
import subprocess
from typing import List, NamedTuple, Optional, Tuple


# Package name prefixes of the kernel image families we know about
KERNEL_IMAGE_PREFIXES = (
    "linux-image-",
    "kfreebsd-image-",
    "gnumach-image-",
)

DEBUG_SUFFIXES = ("-dbg", "-dbgsym")

# Same heuristic apt uses to tell versioned images from meta-packages
# such as linux-image-amd64.
_VERSION_START = re.compile(r'^\d+\.')

DPKG_QUERY_FORMAT = "${db:Status-Abbrev}\t${Package}\t${Version}\n"


class KernelIdentityError(RuntimeError):
    """Raised when the running kernel release cannot be determined."""


class PackageListError(RuntimeError):
    """Raised when the installed package listing is unavailable or corrupt."""


class PackageEntry(NamedTuple):
    """One line of the dpkg package listing."""
    status: str
    name: str
    version: str


def parse_package_name(package_name: str) -> Optional[Tuple[str, str]]:
    """
    Recognize a kernel image package and split its name.

    Examples:
        'linux-image-5.10.0-21-amd64' -> ('5.10.0-21-amd64', 'linux-image-')
        'linux-image-amd64' -> None (meta-package)
        'linux-image-5.10.0-21-amd64-dbg' -> None (debug symbols)

    Args:
        package_name: Package name as recorded by dpkg

    Returns:
        Optional[Tuple[str, str]]: (kernel_version, prefix), or None if the
            package is not a versioned kernel image
    """
    for prefix in KERNEL_IMAGE_PREFIXES:
        if package_name.startswith(prefix):
            version = package_name[len(prefix):]
            break
    else:
        return None

    if version.endswith(DEBUG_SUFFIXES):
        return None

    if not _VERSION_START.match(version):
        return None

    return version, prefix


def is_installed(status: str) -> bool:
    """
    Check a dpkg status abbreviation for a cleanly installed package.

    The abbreviation is desired state, current state and an optional
    error flag, e.g. 'ii ' or 'iiR'. Only 'ii' without error flag counts.

    Args:
        status: Value of ${db:Status-Abbrev}

    Returns:
        bool: True if desired=install, status=installed and no error
    """
    return status.rstrip() == "ii"


def parse_package_listing(output: str) -> List[PackageEntry]:
    """
    Parse tab separated dpkg-query output.

    Every line must have exactly three fields. A single bad line makes the
    whole listing untrustworthy, so it is rejected instead of skipped.

    Args:
        output: Output of dpkg-query using DPKG_QUERY_FORMAT

    Returns:
        List[PackageEntry]: All entries, in listing order

    Raises:
        PackageListError: If a line does not have three fields
    """
    entries = []
    for lineno, line in enumerate(output.splitlines(), start=1):
        if not line:
            continue
        fields = line.split("\t")
        if len(fields) != 3:
            raise PackageListError(
                f"Malformed dpkg-query output on line {lineno}: {line!r}"
            )
        entries.append(PackageEntry(*fields))
    return entries


def list_installed_packages() -> List[PackageEntry]:
    """
    Query the dpkg database for every known package.

    Returns:
        List[PackageEntry]: Raw (status, name, version) entries

    Raises:
        PackageListError: If dpkg-query fails or its output is corrupt
    """
    try:
        result = subprocess.run(
            ["dpkg-query", "-W", "-f", DPKG_QUERY_FORMAT],
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        raise PackageListError(f"Failed to query installed packages: {e}")
    except OSError as e:
        raise PackageListError(f"Unable to run dpkg-query: {e}")

    return parse_package_listing(result.stdout)


def get_running_kernel() -> str:
    """
    Detect the currently running kernel release.

    Returns:
        str: Running kernel release string (e.g., '5.10.0-21-amd64')

    Raises:
        KernelIdentityError: If unable to detect the running kernel
    """
    try:
        result = subprocess.run(
            ["uname", "-r"],
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        raise KernelIdentityError(f"Failed to detect running kernel: {e}")
    except OSError as e:
        raise KernelIdentityError(f"Unable to run uname: {e}")

    kernel_version = result.stdout.strip()
    if not kernel_version:
        raise KernelIdentityError("uname returned empty kernel version")

    return kernel_version
