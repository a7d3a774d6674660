"""Package metadata queries with pkg-config.

This module handles:
- Running `pkg-config --libs` against an installed metadata directory
- Parsing the returned link tokens into search paths and library names
- Substituting unresolved ${prefix}/${libdir} placeholders

The metadata search path is passed to the child process through an explicit
environment mapping; the orchestrator's own environment is never modified.
"""

from __future__ import annotations

import logging
import os
import re
import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from nativedeps.errors import MetadataProbeError
from nativedeps.types import TargetOS, library_name_from_filename

logger = logging.getLogger(__name__)

PREFIX_PLACEHOLDERS = ("${prefix}", "${exec_prefix}")
LIBDIR_PLACEHOLDER = "${libdir}"

# Windows drive-letter paths such as C:/x or C:\x
DRIVE_PATH_PATTERN = re.compile(r"^[A-Za-z]:[/\\]")

# Backslashes used as path separators, not as shell escapes
WINDOWS_SEPARATOR_PATTERN = re.compile(r"\\(?=[^\s\\\"'])")

FRAMEWORK_FLAGS = ("-framework", "-weak_framework")

# Linker flags whose value is the following word
ARGUMENT_FLAGS = ("-Xlinker", "-arch", "-isysroot", "-u")


@dataclass
class MetadataQueryResult:
    """Parsed output of a package metadata query.

    Attributes:
        package: Queried package name.
        search_paths: Link-search directories, in output order.
        libraries: Library names, in output order.
        frameworks: macOS framework names, in output order.
        raw_output: Unparsed tool output.
    """

    package: str
    search_paths: list[Path] = field(default_factory=list)
    libraries: list[str] = field(default_factory=list)
    frameworks: list[str] = field(default_factory=list)
    raw_output: str = ""


def substitute_placeholders(value: str, install_prefix: Path, lib_dir: Path) -> str:
    """Replace install-prefix and library-directory placeholders.

    Args:
        value: Token possibly containing placeholders.
        install_prefix: Absolute install prefix.
        lib_dir: Absolute profile-specific library directory.

    Returns:
        The token with placeholders substituted.
    """
    # ${libdir} first: it may itself be defined in terms of ${prefix}
    value = value.replace(LIBDIR_PLACEHOLDER, lib_dir.as_posix())
    for placeholder in PREFIX_PLACEHOLDERS:
        value = value.replace(placeholder, install_prefix.as_posix())
    return value


def is_path_like(value: str) -> bool:
    """Whether a token value names a filesystem path rather than a library."""
    return (
        "/" in value
        or "\\" in value
        or value.startswith(".")
        or bool(DRIVE_PATH_PATTERN.match(value))
    )


def _resolve_path(value: str, install_prefix: Path) -> Path:
    path = Path(value)
    if not path.is_absolute() and not DRIVE_PATH_PATTERN.match(value):
        path = install_prefix / path
    return path


def _library_name(value: str, target_os: TargetOS) -> str:
    # MSVC-style output names libraries by file (ws2_32.lib)
    return library_name_from_filename(value, target_os) or value


def _split_output(output: str) -> list[str]:
    """Split tool output into shell words.

    Windows path separators are rewritten to ``/`` first; backslashes that
    escape whitespace, quotes or another backslash are left for shlex.

    Raises:
        MetadataProbeError: If the output has unbalanced quotes.
    """
    try:
        return shlex.split(WINDOWS_SEPARATOR_PATTERN.sub("/", output))
    except ValueError as e:
        raise MetadataProbeError(f"Unparsable package metadata output: {e}") from e


def parse_libs_output(
    output: str,
    install_prefix: Path,
    lib_dir: Path,
    target_os: TargetOS,
) -> tuple[list[Path], list[str], list[str]]:
    """Parse `pkg-config --libs` output into search paths and library names.

    Recognised tokens:
    - ``-L<dir>`` or ``-L <dir>``: search path
    - ``-l<name>``: library name
    - ``-l<kind>=<value>`` or ``<kind>=<value>``: kind-qualified token
    - ``-framework <name>``: macOS framework
    - a path to a library file: its directory and library name
    Path-like values are always promoted to search paths. Other flags are
    ignored, together with the value of flags that take one
    (``-Xlinker <arg>``).

    Placeholders are substituted per token, after splitting, so install
    prefixes containing spaces stay a single path.

    Args:
        output: Raw tool output.
        install_prefix: Absolute install prefix for placeholder substitution.
        lib_dir: Absolute library directory for placeholder substitution.
        target_os: Target OS, for library filename conventions.

    Returns:
        Tuple of (search paths, library names, framework names), duplicates
        preserved.

    Raises:
        MetadataProbeError: If the output cannot be split into words.
    """
    search_paths: list[Path] = []
    libraries: list[str] = []
    frameworks: list[str] = []

    def add_value(value: str) -> None:
        if "=" in value:
            _kind, _, value = value.partition("=")
        if not value:
            return
        if is_path_like(value):
            search_paths.append(_resolve_path(value, install_prefix))
        else:
            libraries.append(_library_name(value, target_os))

    pending: str | None = None
    for word in _split_output(output):
        token = substitute_placeholders(word, install_prefix, lib_dir).replace("\\", "/")
        if pending is not None:
            if pending == "-L":
                search_paths.append(_resolve_path(token, install_prefix))
            elif pending in FRAMEWORK_FLAGS:
                frameworks.append(token)
            else:
                logger.debug("Ignoring metadata flag: %s %s", pending, token)
            pending = None
        elif token == "-L" or token in FRAMEWORK_FLAGS or token in ARGUMENT_FLAGS:
            pending = token
        elif token.startswith("-L"):
            search_paths.append(_resolve_path(token[2:], install_prefix))
        elif token.startswith("-l:"):
            name = library_name_from_filename(token[3:], target_os)
            if name:
                libraries.append(name)
        elif token.startswith("-l"):
            add_value(token[2:])
        elif token.startswith("-"):
            logger.debug("Ignoring metadata flag: %s", token)
        elif is_path_like(token) and "=" not in token:
            path = _resolve_path(token, install_prefix)
            name = library_name_from_filename(path.name, target_os)
            if name:
                search_paths.append(path.parent)
                libraries.append(name)
            else:
                search_paths.append(path)
        elif "=" in token:
            add_value(token)
        else:
            libraries.append(_library_name(token, target_os))

    if pending is not None:
        logger.debug("Metadata flag %s has no value", pending)
    return search_paths, libraries, frameworks


def query_package(
    package: str,
    metadata_dir: Path,
    install_prefix: Path,
    lib_dir: Path,
    target_os: TargetOS,
    pkg_config: str = "pkg-config",
) -> MetadataQueryResult:
    """Query link information for an installed package.

    Args:
        package: pkg-config package name.
        metadata_dir: Directory containing the package's .pc file.
        install_prefix: Absolute install prefix.
        lib_dir: Absolute profile-specific library directory.
        target_os: Target operating system.
        pkg_config: pkg-config executable.

    Returns:
        MetadataQueryResult with parsed search paths and libraries.

    Raises:
        MetadataProbeError: If the tool is missing or the package is unknown.
    """
    cmd = [pkg_config, "--libs", package]
    env = dict(os.environ)
    env["PKG_CONFIG_PATH"] = str(metadata_dir)

    logger.info("Querying package metadata: %s", shlex.join(cmd))
    logger.debug("PKG_CONFIG_PATH=%s", metadata_dir)

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            env=env,
            check=True,
        )
    except FileNotFoundError as e:
        raise MetadataProbeError(
            f"Package metadata tool not found: {pkg_config}", package=package
        ) from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise MetadataProbeError(
            f"Package metadata query for '{package}' failed "
            f"(exit code {e.returncode}) in {metadata_dir}: {stderr}",
            package=package,
        ) from e
    except OSError as e:
        raise MetadataProbeError(
            f"Failed to run {pkg_config}: {e}", package=package
        ) from e

    try:
        search_paths, libraries, frameworks = parse_libs_output(
            result.stdout, install_prefix, lib_dir, target_os
        )
    except MetadataProbeError as e:
        raise MetadataProbeError(f"{e} (package '{package}')", package=package) from e
    logger.debug(
        "Metadata for %s: %d search path(s), %d librar(y/ies), %d framework(s)",
        package,
        len(search_paths),
        len(libraries),
        len(frameworks),
    )
    return MetadataQueryResult(
        package=package,
        search_paths=search_paths,
        libraries=libraries,
        frameworks=frameworks,
        raw_output=result.stdout,
    )


__all__ = [
    "ARGUMENT_FLAGS",
    "FRAMEWORK_FLAGS",
    "LIBDIR_PLACEHOLDER",
    "PREFIX_PLACEHOLDERS",
    "MetadataQueryResult",
    "is_path_like",
    "parse_libs_output",
    "query_package",
    "substitute_placeholders",
]
