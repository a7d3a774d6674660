"""Runtime dependency staging.

Copies shared libraries produced by the install step next to the binaries
Cargo builds (test executables in ``target/<profile>/deps`` and run binaries
in ``target/<profile>``) so the loader finds them. Copies always overwrite;
failures are reported, not raised.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from pathlib import Path

from nativedeps.builds.layout import InstallLayout
from nativedeps.types import SHARED_LIBRARY_SUFFIX, StagingReport, TargetOS

logger = logging.getLogger(__name__)

# OUT_DIR is target/<profile>/build/<crate>-<hash>/out
OUT_DIR_TO_PROFILE_DIR = 3


def default_runtime_dirs(out_dir: Path) -> list[Path]:
    """Derive the runtime search directories from Cargo's OUT_DIR.

    Args:
        out_dir: Cargo build-script output directory.

    Returns:
        ``[target/<profile>/deps, target/<profile>]``, or an empty list if
        OUT_DIR is too shallow.
    """
    out_dir = out_dir.absolute()
    if len(out_dir.parents) < OUT_DIR_TO_PROFILE_DIR:
        logger.warning("Cannot derive runtime directories from OUT_DIR=%s", out_dir)
        return []
    profile_dir = out_dir.parents[OUT_DIR_TO_PROFILE_DIR - 1]
    return [profile_dir / "deps", profile_dir]


def is_shared_library(path: Path, target_os: TargetOS) -> bool:
    """Whether a file is a shared library for the target OS.

    Versioned shared objects (``libfoo.so.1``) count on Linux.
    """
    suffix = SHARED_LIBRARY_SUFFIX[target_os]
    name = path.name.lower()
    if name.endswith(suffix):
        return True
    return target_os is TargetOS.LINUX and f"{suffix}." in name


def find_runtime_dependencies(layout: InstallLayout) -> list[Path]:
    """List shared libraries directly inside the install's binary directories.

    Args:
        layout: Install layout of the finished build.

    Returns:
        Shared library files in deterministic order.
    """
    found: list[Path] = []
    for bin_dir in layout.runtime_bin_dirs:
        if not bin_dir.is_dir():
            logger.debug("Runtime directory does not exist: %s", bin_dir)
            continue
        for path in sorted(bin_dir.iterdir()):
            if path.is_file() and is_shared_library(path, layout.profile.target_os):
                found.append(path)
    return found


def stage(layout: InstallLayout, destinations: Iterable[Path]) -> StagingReport:
    """Copy runtime dependencies into every destination directory.

    Args:
        layout: Install layout of the finished build.
        destinations: Directories a test or run binary's loader searches.

    Returns:
        StagingReport listing copied files and per-file failures.
    """
    report = StagingReport()
    dest_dirs = list(dict.fromkeys(destinations))
    sources = find_runtime_dependencies(layout)
    if not sources:
        logger.debug("No runtime dependencies to stage")
        return report

    for source in sources:
        for dest_dir in dest_dirs:
            target = dest_dir / source.name
            try:
                shutil.copy2(source, target)
            except OSError as e:
                logger.warning("Failed to copy %s to %s: %s", source, dest_dir, e)
                report.failures.append((source, f"{dest_dir}: {e}"))
                continue
            logger.info("Staged %s -> %s", source.name, dest_dir)
            report.copied.append(target)

    return report


__all__ = [
    "default_runtime_dirs",
    "find_runtime_dependencies",
    "is_shared_library",
    "stage",
]
