"""Shared type definitions for nativedeps.

This module contains enums and dataclasses shared across subpackages
to avoid circular imports.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class TargetOS(str, Enum):
    """Operating system a build targets.

    Values match Cargo's ``CARGO_CFG_TARGET_OS``.
    """

    WINDOWS = "windows"
    LINUX = "linux"
    MACOS = "macos"


class ProfileKind(str, Enum):
    """Build profile of the host build."""

    DEBUG = "debug"
    RELEASE = "release"


class LinkageKind(str, Enum):
    """How a library is incorporated at link time."""

    STATIC = "static"
    DYNAMIC = "dylib"
    FRAMEWORK = "framework"


class ProbeStrategy(str, Enum):
    """How installed libraries are discovered after a build."""

    METADATA = "metadata"
    SCAN = "scan"


class DebugLinkagePolicy(str, Enum):
    """Linkage policy applied when building the debug profile.

    DYNAMIC forces dynamic linkage for every library so independently
    compiled components never mix runtime libraries. PREFER_STATIC applies
    the release rule (static when an archive exists).
    """

    DYNAMIC = "dynamic"
    PREFER_STATIC = "prefer-static"


class PlatformErrorKind(str, Enum):
    """Which input of a platform triple was rejected."""

    OS = "os"
    ARCH = "arch"
    PROFILE = "profile"


# Static archive naming convention per target OS: (prefix, suffix)
STATIC_LIBRARY_NAMING: dict[TargetOS, tuple[str, str]] = {
    TargetOS.WINDOWS: ("", ".lib"),
    TargetOS.LINUX: ("lib", ".a"),
    TargetOS.MACOS: ("lib", ".a"),
}

# Filename suffixes recognised as linkable or loadable libraries
LIBRARY_FILENAME_PATTERN = re.compile(
    r"^(?P<base>.+?)\.(?:lib|a|so|dylib|dll)(?:\.[0-9][0-9.]*)?$", re.IGNORECASE
)

# Shared library extension per target OS
SHARED_LIBRARY_SUFFIX: dict[TargetOS, str] = {
    TargetOS.WINDOWS: ".dll",
    TargetOS.LINUX: ".so",
    TargetOS.MACOS: ".dylib",
}


def static_library_filename(name: str, target_os: TargetOS) -> str:
    """Return the static archive filename for a library on a target OS.

    Args:
        name: Library name (e.g. ``by2``).
        target_os: Target operating system.

    Returns:
        Filename such as ``by2.lib`` or ``libby2.a``.
    """
    prefix, suffix = STATIC_LIBRARY_NAMING[target_os]
    return f"{prefix}{name}{suffix}"


def library_name_from_filename(filename: str, target_os: TargetOS) -> str | None:
    """Derive a library name from a library filename.

    ``by2.lib`` -> ``by2``; ``libby2.a`` -> ``by2`` (the ``lib`` prefix is only
    stripped on non-Windows targets). Versioned shared objects such as
    ``libz.so.1`` are handled.

    Returns:
        The library name, or None if the filename is not a library.
    """
    match = LIBRARY_FILENAME_PATTERN.match(filename)
    if match is None:
        return None
    base = match.group("base")
    if target_os is not TargetOS.WINDOWS and base.startswith("lib") and len(base) > 3:
        base = base[3:]
    return base or None


@dataclass(frozen=True)
class LibraryReference:
    """A library name with its resolved linkage kind."""

    name: str
    kind: LinkageKind
    archive: Path | None = None


@dataclass(frozen=True)
class ProbeResult:
    """Link information discovered in an install tree.

    Attributes:
        search_paths: Deduplicated absolute link-search directories.
        libraries: Deduplicated library names.
        frameworks: Deduplicated macOS framework names.
    """

    search_paths: frozenset[Path] = frozenset()
    libraries: frozenset[str] = frozenset()
    frameworks: frozenset[str] = frozenset()

    def sorted_search_paths(self) -> list[Path]:
        """Return search paths in deterministic order."""
        return sorted(self.search_paths)

    def sorted_libraries(self) -> list[str]:
        """Return library names in deterministic order."""
        return sorted(self.libraries)

    def sorted_frameworks(self) -> list[str]:
        """Return framework names in deterministic order."""
        return sorted(self.frameworks)


@dataclass
class StagingReport:
    """Outcome of copying runtime dependencies."""

    copied: list[Path] = field(default_factory=list)
    failures: list[tuple[Path, str]] = field(default_factory=list)


__all__ = [
    "SHARED_LIBRARY_SUFFIX",
    "STATIC_LIBRARY_NAMING",
    "LIBRARY_FILENAME_PATTERN",
    "DebugLinkagePolicy",
    "LibraryReference",
    "LinkageKind",
    "PlatformErrorKind",
    "ProbeResult",
    "ProbeStrategy",
    "ProfileKind",
    "StagingReport",
    "TargetOS",
    "library_name_from_filename",
    "static_library_filename",
]
