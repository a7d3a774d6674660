"""Installed artifact tree layout.

Describes where the CMake install step and the nested vcpkg install place
headers, libraries, package metadata and runtime binaries for a profile.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from nativedeps.profiles.resolver import BuildProfile

DEFAULT_LIB_DIR = "lib"
DEBUG_LIB_DIR = "debug/lib"
DEFAULT_BIN_DIR = "bin"
DEBUG_BIN_DIR = "debug/bin"
INCLUDE_DIR = "include"


@dataclass(frozen=True)
class InstallLayout:
    """Filesystem layout of one install prefix.

    Attributes:
        profile: Resolved build profile.
        install_prefix: Absolute CMake install prefix.
        nested_install_dir: Absolute vcpkg installed directory, if any.
    """

    profile: BuildProfile
    install_prefix: Path
    nested_install_dir: Path | None = None

    @classmethod
    def for_profile(
        cls,
        profile: BuildProfile,
        install_prefix: Path,
        nested_install_dir: Path | None = None,
    ) -> InstallLayout:
        """Build a layout with absolute paths."""
        return cls(
            profile=profile,
            install_prefix=install_prefix.absolute(),
            nested_install_dir=(
                nested_install_dir.absolute() if nested_install_dir else None
            ),
        )

    @property
    def include_dir(self) -> Path:
        return self.install_prefix / INCLUDE_DIR

    @property
    def lib_dir(self) -> Path:
        """Profile-specific library directory."""
        return self.install_prefix / self.profile.lib_dir

    @property
    def metadata_dir(self) -> Path:
        """Profile-specific pkg-config directory."""
        return self.install_prefix / self.profile.metadata_dir

    @property
    def fallback_lib_dirs(self) -> list[Path]:
        """Conventional library directories always offered to the linker."""
        return [
            self.install_prefix / DEFAULT_LIB_DIR,
            self.install_prefix / DEBUG_LIB_DIR,
        ]

    @property
    def runtime_bin_dirs(self) -> list[Path]:
        """Candidate directories holding installed shared libraries."""
        return [
            self.install_prefix / DEFAULT_BIN_DIR,
            self.install_prefix / DEBUG_BIN_DIR,
        ]

    @property
    def nested_lib_dir(self) -> Path | None:
        """Library directory of the nested vcpkg install for this triplet."""
        if self.nested_install_dir is None:
            return None
        triplet_dir = self.nested_install_dir / self.profile.nested_triplet
        if self.profile.is_debug:
            return triplet_dir / DEBUG_LIB_DIR
        return triplet_dir / DEFAULT_LIB_DIR


__all__ = [
    "DEBUG_BIN_DIR",
    "DEBUG_LIB_DIR",
    "DEFAULT_BIN_DIR",
    "DEFAULT_LIB_DIR",
    "INCLUDE_DIR",
    "InstallLayout",
]
