"""Pydantic models for the platform preset table.

The preset table maps every supported (OS, architecture, profile) triple to
the CMake preset identifiers and install-layout hints used for that build.
The built-in table lives in nativedeps.profiles.resolver; a replacement can
be loaded from YAML (see nativedeps.profiles.io).
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from nativedeps.types import ProfileKind, TargetOS

# Preset names are passed to cmake as --preset=<name>
PRESET_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.\-]+$")


class PresetEntrySchema(BaseModel):
    """Schema for the presets and layout of one (OS, profile) combination.

    Attributes:
        config_preset: CMake configure preset.
        build_preset: CMake build preset (runs the install target).
        workflow_preset: Optional CMake workflow preset replacing configure+build.
        lib_dir: Library directory relative to the install prefix.
        metadata_dir: pkg-config directory relative to the install prefix.
        bin_dir: Runtime binary directory relative to the install prefix.
        workflow_install_dir: Install prefix of the workflow preset, relative to
            the workspace root.
        workflow_nested_dir: vcpkg installed directory of the workflow preset,
            relative to the workspace root.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    config_preset: str = Field(description="CMake configure preset")
    build_preset: str = Field(description="CMake build preset")
    workflow_preset: str | None = Field(
        default=None, description="CMake workflow preset (replaces configure+build)"
    )
    lib_dir: str = Field(default="lib", description="Library subdirectory")
    metadata_dir: str = Field(
        default="lib/pkgconfig", description="pkg-config subdirectory"
    )
    bin_dir: str = Field(default="bin", description="Runtime binary subdirectory")
    workflow_install_dir: str = Field(
        default="installed", description="Workflow install prefix under the workspace"
    )
    workflow_nested_dir: str = Field(
        default="vcpkg_installed",
        description="Workflow vcpkg installed directory under the workspace",
    )

    @field_validator("config_preset", "build_preset", "workflow_preset")
    @classmethod
    def validate_preset_name(cls, v: str | None) -> str | None:
        """Validate preset names contain no whitespace or shell syntax."""
        if v is None:
            return v
        if not PRESET_NAME_PATTERN.match(v):
            raise ValueError(
                f"preset name must match {PRESET_NAME_PATTERN.pattern}, got '{v}'"
            )
        return v

    @field_validator(
        "lib_dir", "metadata_dir", "bin_dir", "workflow_install_dir", "workflow_nested_dir"
    )
    @classmethod
    def validate_relative(cls, v: str) -> str:
        """Validate layout hints are relative paths inside their root."""
        if v.startswith(("/", "\\")) or ".." in v.replace("\\", "/").split("/"):
            raise ValueError(f"layout directory must be relative, got '{v}'")
        return v


class PlatformSchema(BaseModel):
    """Schema for one target OS.

    Attributes:
        architectures: Supported architectures mapped to their vcpkg triplet.
        profiles: Preset entry for each build profile.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    architectures: dict[str, str] = Field(
        min_length=1, description="Supported architecture -> vcpkg triplet"
    )
    profiles: dict[ProfileKind, PresetEntrySchema]

    @model_validator(mode="after")
    def validate_profiles_total(self) -> "PlatformSchema":
        """Validate every build profile has an entry."""
        missing = [kind.value for kind in ProfileKind if kind not in self.profiles]
        if missing:
            raise ValueError(f"missing preset entries for profiles: {missing}")
        return self


class PresetTableSchema(BaseModel):
    """Schema for the complete preset table."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    platforms: dict[TargetOS, PlatformSchema] = Field(min_length=1)


__all__ = [
    "PRESET_NAME_PATTERN",
    "PlatformSchema",
    "PresetEntrySchema",
    "PresetTableSchema",
]
