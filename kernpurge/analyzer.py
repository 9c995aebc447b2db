"""
Kernel analysis module.

Classifies installed kernel image packages and determines which of them
are unused, i.e. everything except the kernel that is currently booted.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .detector import PackageEntry, is_installed, parse_package_name


class BootedKernelNotFoundError(ValueError):
    """Raised when no installed package matches the running kernel."""


class UnsafeRemovalError(ValueError):
    """Raised when a removal list would touch the booted kernel."""


@dataclass(frozen=True)
class KernelPackage:
    """
    An installed kernel image package.

    Attributes:
        name: Package name (e.g., 'linux-image-5.10.0-21-amd64')
        version_revision: Debian package version (e.g., '5.10.162-1')
        kernel_version: Kernel release taken from the name (e.g., '5.10.0-21-amd64')
        prefix: Name family (e.g., 'linux-image-')
        is_booted: True if this package provides the running kernel
    """
    name: str
    version_revision: str
    kernel_version: str
    prefix: str
    is_booted: bool = False


@dataclass
class RunResult:
    """
    Result of resolving the unused kernel set.

    Attributes:
        booted: The booted kernel package surfaced for display, or None
        booted_packages: Every package matching the running kernel
        unused: Packages safe to purge, sorted by name
    """
    booted: Optional[KernelPackage]
    booted_packages: List[KernelPackage] = field(default_factory=list)
    unused: List[KernelPackage] = field(default_factory=list)

    @property
    def unused_names(self) -> List[str]:
        return [pkg.name for pkg in self.unused]


def classify_packages(
    entries: Iterable[PackageEntry],
    booted_version: Optional[str],
) -> Dict[str, List[KernelPackage]]:
    """
    Group installed kernel image packages by name family.

    Entries that are not cleanly installed, or whose names are not
    versioned kernel images, are dropped. A package is marked booted when
    its kernel version equals booted_version exactly. More than one package
    may match (e.g. signed and unsigned images of the same release).

    Args:
        entries: Raw package listing
        booted_version: Running kernel release, or None if unknown

    Returns:
        Dict[str, List[KernelPackage]]: Packages per prefix, in listing order
    """
    groups: Dict[str, List[KernelPackage]] = {}

    for entry in entries:
        if not is_installed(entry.status):
            continue

        parsed = parse_package_name(entry.name)
        if parsed is None:
            continue

        kernel_version, prefix = parsed
        is_booted = booted_version is not None and kernel_version == booted_version
        groups.setdefault(prefix, []).append(KernelPackage(
            name=entry.name,
            version_revision=entry.version,
            kernel_version=kernel_version,
            prefix=prefix,
            is_booted=is_booted,
        ))

    return groups


def resolve_unused(groups: Dict[str, List[KernelPackage]]) -> RunResult:
    """
    Split classified packages into booted and unused.

    Every booted package is kept out of the unused list; the first one
    seen is reported as the booted kernel. If nothing is booted the result
    has booted=None, which callers must treat as a reason to stop.

    Args:
        groups: Output of classify_packages

    Returns:
        RunResult: Booted package(s) and the sorted unused list
    """
    booted_packages = []
    unused = []

    for packages in groups.values():
        for pkg in packages:
            if pkg.is_booted:
                booted_packages.append(pkg)
            else:
                unused.append(pkg)

    unused.sort(key=lambda pkg: pkg.name)

    return RunResult(
        booted=booted_packages[0] if booted_packages else None,
        booted_packages=booted_packages,
        unused=unused,
    )


def find_unused_kernels(
    groups: Dict[str, List[KernelPackage]],
    booted_version: Optional[str],
) -> RunResult:
    """
    Resolve the unused kernel set, refusing to go on without a booted kernel.

    Args:
        groups: Output of classify_packages
        booted_version: Running kernel release, used in the error message

    Returns:
        RunResult: Result with a booted package guaranteed to be present

    Raises:
        BootedKernelNotFoundError: If no installed package matches the
            running kernel
    """
    result = resolve_unused(groups)

    if result.booted is None:
        raise BootedKernelNotFoundError(
            f"Running kernel {booted_version} not found among installed kernel packages; "
            "refusing to continue"
        )

    return result


def validate_removal_safety(packages_to_remove: List[str], result: RunResult) -> None:
    """
    Last check before anything is handed to the package manager.

    Args:
        packages_to_remove: Package names about to be purged
        result: Resolved run result

    Raises:
        UnsafeRemovalError: If the booted kernel is unknown, or a package
            to remove provides the booted kernel release
    """
    if result.booted is None:
        raise UnsafeRemovalError("Safety check failed: booted kernel is unknown")

    booted_names = {pkg.name for pkg in result.booted_packages}
    booted_versions = {pkg.kernel_version for pkg in result.booted_packages}

    for name in packages_to_remove:
        if name in booted_names:
            raise UnsafeRemovalError(
                f"Safety check failed: booted kernel package {name} is marked for removal"
            )
        parsed = parse_package_name(name)
        if parsed is not None and parsed[0] in booted_versions:
            raise UnsafeRemovalError(
                f"Safety check failed: {name} provides the running kernel {parsed[0]}"
            )
