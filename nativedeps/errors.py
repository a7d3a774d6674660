"""Error definitions for nativedeps.

Every fatal condition is an OrchestratorError subclass carrying a stable
code and the process exit code the CLI terminates with.
"""

from pathlib import Path

from nativedeps.types import PlatformErrorKind

# Error code constants
CONFIGURATION_ERROR = "configuration"
UNSUPPORTED_PLATFORM = "unsupported_platform"
WORKSPACE_ERROR = "workspace_error"
BUILD_ERROR = "build_failed"
METADATA_ERROR = "metadata_probe_failed"
BINDING_ERROR = "binding_generation_failed"

# Process exit codes
EXIT_CONFIGURATION = 2
EXIT_BUILD = 3
EXIT_METADATA = 4
EXIT_BINDING = 5
EXIT_WORKSPACE = 6


class OrchestratorError(Exception):
    """Base error for orchestration failures."""

    exit_code: int = 1

    def __init__(self, message: str, code: str = "orchestrator_error") -> None:
        super().__init__(message)
        self.code = code


class ConfigurationError(OrchestratorError):
    """Raised when settings or the preset table are unusable."""

    exit_code = EXIT_CONFIGURATION

    def __init__(self, message: str, code: str = CONFIGURATION_ERROR) -> None:
        super().__init__(message, code=code)


class UnsupportedPlatformError(ConfigurationError):
    """Raised when an OS, architecture or profile value is not supported."""

    def __init__(self, kind: PlatformErrorKind, value: object) -> None:
        label = {
            PlatformErrorKind.OS: "target OS",
            PlatformErrorKind.ARCH: "target architecture",
            PlatformErrorKind.PROFILE: "build profile",
        }[kind]
        super().__init__(f"Unsupported {label}: {value}", code=UNSUPPORTED_PLATFORM)
        self.kind = kind
        self.value = value


class WorkspaceError(OrchestratorError):
    """Raised when the workspace root cannot be derived."""

    exit_code = EXIT_WORKSPACE

    def __init__(self, message: str) -> None:
        super().__init__(message, code=WORKSPACE_ERROR)


class BuildError(OrchestratorError):
    """Raised when a CMake step fails to spawn or exits non-zero."""

    exit_code = EXIT_BUILD

    def __init__(
        self,
        step: str,
        message: str,
        returncode: int | None = None,
        log_path: Path | None = None,
    ) -> None:
        super().__init__(message, code=BUILD_ERROR)
        self.step = step
        self.returncode = returncode
        self.log_path = log_path


class MetadataProbeError(OrchestratorError):
    """Raised when the package metadata query fails."""

    exit_code = EXIT_METADATA

    def __init__(self, message: str, package: str | None = None) -> None:
        super().__init__(message, code=METADATA_ERROR)
        self.package = package


class BindingError(OrchestratorError):
    """Raised when binding generation fails."""

    exit_code = EXIT_BINDING

    def __init__(self, message: str) -> None:
        super().__init__(message, code=BINDING_ERROR)


__all__ = [
    "BINDING_ERROR",
    "BUILD_ERROR",
    "CONFIGURATION_ERROR",
    "METADATA_ERROR",
    "UNSUPPORTED_PLATFORM",
    "WORKSPACE_ERROR",
    "BindingError",
    "BuildError",
    "ConfigurationError",
    "MetadataProbeError",
    "OrchestratorError",
    "UnsupportedPlatformError",
    "WorkspaceError",
]
