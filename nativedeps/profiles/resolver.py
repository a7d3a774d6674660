"""Platform profile resolution.

Maps a (target OS, target architecture, build profile) triple to the CMake
presets and install-layout hints for that build. Resolution is a pure table
lookup: unsupported values are rejected, never defaulted.

Note on the Windows debug presets: the debug profile links against the
static MSVC runtime build (msvc-mt) so the debug C++ objects do not mix
debug and release CRTs with the host's own objects.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from nativedeps.errors import UnsupportedPlatformError
from nativedeps.profiles.schema import PresetTableSchema
from nativedeps.types import PlatformErrorKind, ProfileKind, TargetOS

DEFAULT_PRESET_TABLE = PresetTableSchema.model_validate(
    {
        "platforms": {
            "windows": {
                "architectures": {"x86_64": "x64-windows-static-md"},
                "profiles": {
                    "debug": {
                        "config_preset": "msvc-mt",
                        "build_preset": "msvc-mt-debug-install",
                        "lib_dir": "debug/lib",
                        "metadata_dir": "debug/lib/pkgconfig",
                        "bin_dir": "debug/bin",
                    },
                    "release": {
                        "config_preset": "msvc-md",
                        "build_preset": "msvc-md-release-install",
                    },
                },
            },
            "linux": {
                "architectures": {"x86_64": "x64-linux"},
                "profiles": {
                    "debug": {
                        "config_preset": "linux-debug",
                        "build_preset": "linux-debug-install",
                        "lib_dir": "debug/lib",
                        "metadata_dir": "debug/lib/pkgconfig",
                        "bin_dir": "debug/bin",
                    },
                    "release": {
                        "config_preset": "linux-release",
                        "build_preset": "linux-release-install",
                    },
                },
            },
            "macos": {
                "architectures": {"aarch64": "arm64-osx"},
                "profiles": {
                    "debug": {
                        "config_preset": "macos-debug",
                        "build_preset": "macos-debug-install",
                        "lib_dir": "debug/lib",
                        "metadata_dir": "debug/lib/pkgconfig",
                        "bin_dir": "debug/bin",
                    },
                    "release": {
                        "config_preset": "macos-release",
                        "build_preset": "macos-release-install",
                    },
                },
            },
        }
    }
)


@dataclass(frozen=True)
class BuildProfile:
    """One resolved build configuration.

    Attributes:
        target_os: Target operating system.
        target_arch: Target architecture.
        profile_kind: Debug or release.
        config_preset: CMake configure preset.
        build_preset: CMake build preset.
        workflow_preset: CMake workflow preset, if the platform uses one.
        lib_dir: Library directory relative to the install prefix.
        metadata_dir: pkg-config directory relative to the install prefix.
        bin_dir: Runtime binary directory relative to the install prefix.
        nested_triplet: vcpkg triplet for nested package installs.
        workflow_install_dir: Workflow install prefix, relative to the
            workspace root.
        workflow_nested_dir: Workflow vcpkg installed directory, relative to
            the workspace root.
        install_prefix: Absolute install prefix, once pinned for a run.
    """

    target_os: TargetOS
    target_arch: str
    profile_kind: ProfileKind
    config_preset: str
    build_preset: str
    workflow_preset: str | None
    lib_dir: str
    metadata_dir: str
    bin_dir: str
    nested_triplet: str
    workflow_install_dir: str = "installed"
    workflow_nested_dir: str = "vcpkg_installed"
    install_prefix: Path | None = None

    @property
    def is_debug(self) -> bool:
        """Whether this is the debug profile."""
        return self.profile_kind is ProfileKind.DEBUG

    def with_install_prefix(self, install_prefix: Path) -> BuildProfile:
        """Return a copy pinned to an absolute install prefix."""
        return replace(self, install_prefix=install_prefix.absolute())

    def describe(self) -> dict[str, str | None]:
        """Return a JSON-friendly description."""
        return {
            "target_os": self.target_os.value,
            "target_arch": self.target_arch,
            "profile": self.profile_kind.value,
            "config_preset": self.config_preset,
            "build_preset": self.build_preset,
            "workflow_preset": self.workflow_preset,
            "lib_dir": self.lib_dir,
            "metadata_dir": self.metadata_dir,
            "bin_dir": self.bin_dir,
            "nested_triplet": self.nested_triplet,
            "workflow_install_dir": self.workflow_install_dir,
            "workflow_nested_dir": self.workflow_nested_dir,
            "install_prefix": str(self.install_prefix) if self.install_prefix else None,
        }


def parse_target_os(value: str | TargetOS | None) -> TargetOS:
    """Parse a target OS identifier.

    Raises:
        UnsupportedPlatformError: If the value names no supported OS.
    """
    if isinstance(value, TargetOS):
        return value
    try:
        return TargetOS(str(value).strip().lower())
    except ValueError:
        raise UnsupportedPlatformError(PlatformErrorKind.OS, value) from None


def parse_profile_kind(value: str | ProfileKind | None) -> ProfileKind:
    """Parse a build profile identifier.

    Raises:
        UnsupportedPlatformError: If the value is neither debug nor release.
    """
    if isinstance(value, ProfileKind):
        return value
    try:
        return ProfileKind(str(value).strip().lower())
    except ValueError:
        raise UnsupportedPlatformError(PlatformErrorKind.PROFILE, value) from None


def resolve(
    target_os: str | TargetOS | None,
    target_arch: str | None,
    profile_kind: str | ProfileKind | None,
    table: PresetTableSchema | None = None,
    install_prefix: Path | None = None,
) -> BuildProfile:
    """Resolve a platform triple to a BuildProfile.

    Inputs are checked in order: OS, then architecture, then profile.

    Args:
        target_os: Target OS identifier.
        target_arch: Target architecture identifier.
        profile_kind: Build profile identifier.
        table: Preset table; the built-in table if not provided.
        install_prefix: Optional install prefix to pin on the result.

    Returns:
        The BuildProfile for the triple.

    Raises:
        UnsupportedPlatformError: If any input is unsupported.
    """
    if table is None:
        table = DEFAULT_PRESET_TABLE

    os_kind = parse_target_os(target_os)
    platform = table.platforms.get(os_kind)
    if platform is None:
        raise UnsupportedPlatformError(PlatformErrorKind.OS, target_os)

    if target_arch not in platform.architectures:
        raise UnsupportedPlatformError(PlatformErrorKind.ARCH, target_arch)
    triplet = platform.architectures[target_arch]

    kind = parse_profile_kind(profile_kind)
    entry = platform.profiles[kind]

    profile = BuildProfile(
        target_os=os_kind,
        target_arch=target_arch,
        profile_kind=kind,
        config_preset=entry.config_preset,
        build_preset=entry.build_preset,
        workflow_preset=entry.workflow_preset,
        lib_dir=entry.lib_dir,
        metadata_dir=entry.metadata_dir,
        bin_dir=entry.bin_dir,
        nested_triplet=triplet,
        workflow_install_dir=entry.workflow_install_dir,
        workflow_nested_dir=entry.workflow_nested_dir,
    )
    if install_prefix is not None:
        profile = profile.with_install_prefix(install_prefix)
    return profile


def supported_triples(
    table: PresetTableSchema | None = None,
) -> list[tuple[TargetOS, str, ProfileKind]]:
    """List every (OS, architecture, profile) triple a table supports."""
    if table is None:
        table = DEFAULT_PRESET_TABLE
    return [
        (os_kind, arch, kind)
        for os_kind, platform in table.platforms.items()
        for arch in platform.architectures
        for kind in ProfileKind
    ]


__all__ = [
    "DEFAULT_PRESET_TABLE",
    "BuildProfile",
    "parse_profile_kind",
    "parse_target_os",
    "resolve",
    "supported_triples",
]
