"""Artifact and metadata probing.

This module handles:
- The metadata-query strategy (pkg-config against the installed .pc files)
- The directory-scan strategy (static/import libraries found on disk)
- Adding the conventional fallback library directories

Both strategies return a ProbeResult with set semantics, so callers never
see duplicate search paths or library names.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from nativedeps.builds.layout import InstallLayout
from nativedeps.builds.metadata import query_package
from nativedeps.types import ProbeResult, ProbeStrategy, library_name_from_filename

logger = logging.getLogger(__name__)

# Extensions of static archives and import libraries
LINKABLE_SUFFIXES = {".lib", ".a"}


def _with_fallbacks(
    layout: InstallLayout,
    search_paths: Iterable[Path],
    libraries: Iterable[str],
    frameworks: Iterable[str] = (),
) -> ProbeResult:
    paths = set(search_paths)
    paths.update(layout.fallback_lib_dirs)
    return ProbeResult(
        search_paths=frozenset(paths),
        libraries=frozenset(libraries),
        frameworks=frozenset(frameworks),
    )


def probe_metadata(
    layout: InstallLayout,
    package: str,
    pkg_config: str = "pkg-config",
) -> ProbeResult:
    """Probe link information with a package metadata query.

    Args:
        layout: Install layout of the finished build.
        package: pkg-config package name.
        pkg_config: pkg-config executable.

    Returns:
        ProbeResult including the fallback library directories.

    Raises:
        MetadataProbeError: If the query fails.
    """
    result = query_package(
        package,
        metadata_dir=layout.metadata_dir,
        install_prefix=layout.install_prefix,
        lib_dir=layout.lib_dir,
        target_os=layout.profile.target_os,
        pkg_config=pkg_config,
    )
    return _with_fallbacks(
        layout, result.search_paths, result.libraries, result.frameworks
    )


def find_libraries_in_dir(lib_dir: Path, layout: InstallLayout) -> list[str]:
    """List library names of static/import libraries directly inside a directory.

    Args:
        lib_dir: Directory to scan (non-recursive).
        layout: Install layout, for the target naming convention.

    Returns:
        Library names in filename order; empty if the directory is missing.
    """
    if not lib_dir.is_dir():
        logger.debug("Library directory does not exist: %s", lib_dir)
        return []

    libraries: list[str] = []
    for path in sorted(lib_dir.iterdir()):
        if not path.is_file() or path.suffix.lower() not in LINKABLE_SUFFIXES:
            continue
        name = library_name_from_filename(path.name, layout.profile.target_os)
        if name:
            logger.debug("Found library %s in %s", name, lib_dir)
            libraries.append(name)
    return libraries


def probe_directories(layout: InstallLayout) -> ProbeResult:
    """Probe link information by scanning the installed library directories.

    Scans the profile library directory and, if configured, the nested
    vcpkg library directory. Missing directories contribute nothing.

    Args:
        layout: Install layout of the finished build.

    Returns:
        ProbeResult including the fallback library directories.
    """
    scan_dirs = [layout.lib_dir]
    if layout.nested_lib_dir is not None:
        scan_dirs.append(layout.nested_lib_dir)

    search_paths: list[Path] = []
    libraries: list[str] = []
    for lib_dir in scan_dirs:
        found = find_libraries_in_dir(lib_dir, layout)
        if lib_dir.is_dir():
            search_paths.append(lib_dir)
        libraries.extend(found)

    logger.info(
        "Directory scan found %d librar(y/ies) in %d director(y/ies)",
        len(set(libraries)),
        len(search_paths),
    )
    return _with_fallbacks(layout, search_paths, libraries)


def probe(
    layout: InstallLayout,
    strategy: ProbeStrategy = ProbeStrategy.METADATA,
    package: str = "by2",
    pkg_config: str = "pkg-config",
) -> ProbeResult:
    """Probe an install tree with the selected strategy.

    Args:
        layout: Install layout of the finished build.
        strategy: Discovery strategy.
        package: pkg-config package name (metadata strategy).
        pkg_config: pkg-config executable (metadata strategy).

    Returns:
        Deduplicated ProbeResult.
    """
    strategies: dict[ProbeStrategy, Callable[[], ProbeResult]] = {
        ProbeStrategy.METADATA: lambda: probe_metadata(layout, package, pkg_config),
        ProbeStrategy.SCAN: lambda: probe_directories(layout),
    }
    result = strategies[strategy]()
    logger.info(
        "Probe (%s): %d search path(s), libraries: %s",
        strategy.value,
        len(result.search_paths),
        ", ".join(result.sorted_libraries()) or "(none)",
    )
    if result.frameworks:
        logger.info("Frameworks: %s", ", ".join(result.sorted_frameworks()))
    return result


__all__ = [
    "LINKABLE_SUFFIXES",
    "find_libraries_in_dir",
    "probe",
    "probe_directories",
    "probe_metadata",
]
