"""Configuration settings for nativedeps.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.

The build inputs (target OS, architecture, profile, output directory) are
also read from the variables Cargo exports to build scripts, so the
orchestrator can run unmodified from a ``build.rs`` wrapper.
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from nativedeps.errors import ConfigurationError
from nativedeps.types import DebugLinkagePolicy, ProbeStrategy

CMAKE_INSTALLED_DIR = "installed"
VCPKG_INSTALLED_DIR = "vcpkg_installed"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the NATIVEDEPS_
    prefix. CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="NATIVEDEPS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Build inputs
    target_os: str | None = Field(
        default=None,
        validation_alias=AliasChoices("NATIVEDEPS_TARGET_OS", "CARGO_CFG_TARGET_OS"),
        description="Target operating system (windows, linux, macos)",
    )
    target_arch: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "NATIVEDEPS_TARGET_ARCH", "CARGO_CFG_TARGET_ARCH"
        ),
        description="Target architecture (e.g. x86_64)",
    )
    profile: str | None = Field(
        default=None,
        validation_alias=AliasChoices("NATIVEDEPS_PROFILE", "PROFILE"),
        description="Build profile (debug or release)",
    )
    out_dir: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("NATIVEDEPS_OUT_DIR", "OUT_DIR"),
        description="Process-assigned scratch/output directory",
    )

    # Native package
    package_name: str = Field(
        default="by2",
        description="pkg-config package name of the native library",
    )
    binding_header: str = Field(
        default="by2.h",
        description="Entry header, relative to the installed include directory",
    )
    bindings_file: str = Field(
        default="bindings.rs",
        description="Generated bindings filename, relative to the output directory",
    )
    generate_bindings: bool = Field(
        default=True,
        description="Run the binding generator after the build",
    )

    # Workspace
    workspace_depth: int = Field(
        default=2,
        ge=0,
        description="Parent-directory steps from the cwd to the workspace root",
    )

    # Discovery and linkage
    probe_strategy: ProbeStrategy = Field(
        default=ProbeStrategy.METADATA,
        description="Library discovery strategy (metadata or scan)",
    )
    debug_linkage: DebugLinkagePolicy = Field(
        default=DebugLinkagePolicy.DYNAMIC,
        description="Linkage policy for the debug profile",
    )
    preset_file: Path | None = Field(
        default=None,
        description="YAML file replacing the built-in preset table",
    )

    # Runtime staging
    runtime_dirs: list[Path] = Field(
        default_factory=list,
        description="Directories receiving shared libraries (derived from OUT_DIR if empty)",
    )

    # External tools
    cmake: str = Field(default="cmake", description="CMake executable")
    pkg_config: str = Field(default="pkg-config", description="pkg-config executable")
    bindgen: str = Field(default="bindgen", description="bindgen executable")

    # Outputs
    write_manifest: bool = Field(
        default=True,
        description="Write a JSON run manifest into the output directory",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    def install_prefix(self) -> Path:
        """Return the CMake install prefix under the output directory."""
        return self.output_dir() / CMAKE_INSTALLED_DIR

    def nested_install_dir(self) -> Path:
        """Return the vcpkg installed directory under the output directory."""
        return self.output_dir() / VCPKG_INSTALLED_DIR

    def output_dir(self) -> Path:
        """Return the absolute output directory.

        Raises:
            ConfigurationError: If no output directory is configured.
        """
        if self.out_dir is None:
            raise ConfigurationError(
                "Output directory is not set (OUT_DIR or NATIVEDEPS_OUT_DIR)"
            )
        return self.out_dir.absolute()


def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = [
    "CMAKE_INSTALLED_DIR",
    "VCPKG_INSTALLED_DIR",
    "Settings",
    "get_settings",
    "print_settings_json",
]
