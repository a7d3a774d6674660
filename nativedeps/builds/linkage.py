"""Link decisions.

For each discovered library, decide static or dynamic linkage from what is
actually on disk and emit the directives:

- debug profile with the DYNAMIC policy: always dynamic
- otherwise: static if a static archive for the name exists under any
  search path, dynamic if not (system libraries ship no archives)

Absence of an archive is an expected state, never an error.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from nativedeps.builds.directives import DirectiveEmitter
from nativedeps.types import (
    DebugLinkagePolicy,
    LibraryReference,
    LinkageKind,
    ProfileKind,
    TargetOS,
    static_library_filename,
)

logger = logging.getLogger(__name__)


def find_static_archive(
    name: str,
    search_paths: Iterable[Path],
    target_os: TargetOS,
) -> Path | None:
    """Find the static archive for a library name.

    Args:
        name: Library name.
        search_paths: Directories to search, in order.
        target_os: Target OS, for the archive naming convention.

    Returns:
        Path of the first matching archive, or None.
    """
    filename = static_library_filename(name, target_os)
    for directory in search_paths:
        candidate = directory / filename
        if candidate.is_file():
            return candidate
    return None


def decide_linkage(
    name: str,
    search_paths: list[Path],
    profile_kind: ProfileKind,
    target_os: TargetOS,
    debug_policy: DebugLinkagePolicy = DebugLinkagePolicy.DYNAMIC,
) -> LibraryReference:
    """Decide the linkage kind for one library.

    Args:
        name: Library name.
        search_paths: Directories to search for a static archive, in order.
        profile_kind: Build profile.
        target_os: Target operating system.
        debug_policy: Linkage policy for the debug profile.

    Returns:
        LibraryReference with the decided kind.
    """
    if profile_kind is ProfileKind.DEBUG and debug_policy is DebugLinkagePolicy.DYNAMIC:
        return LibraryReference(name=name, kind=LinkageKind.DYNAMIC)

    archive = find_static_archive(name, search_paths, target_os)
    if archive is not None:
        return LibraryReference(name=name, kind=LinkageKind.STATIC, archive=archive)
    return LibraryReference(name=name, kind=LinkageKind.DYNAMIC)


def decide_and_emit(
    libraries: Iterable[str],
    search_paths: Iterable[Path],
    profile_kind: ProfileKind,
    target_os: TargetOS,
    emitter: DirectiveEmitter,
    debug_policy: DebugLinkagePolicy = DebugLinkagePolicy.DYNAMIC,
    frameworks: Iterable[str] = (),
) -> list[LibraryReference]:
    """Emit link-search and link-library directives.

    Search paths and library names are deduplicated and processed in sorted
    order so output is reproducible regardless of input order. Frameworks
    follow the libraries and are always linked as `framework=`.

    Args:
        libraries: Discovered library names (duplicates allowed).
        search_paths: Discovered search directories (duplicates allowed).
        profile_kind: Build profile.
        target_os: Target operating system.
        emitter: Directive destination.
        debug_policy: Linkage policy for the debug profile.
        frameworks: macOS framework names (duplicates allowed).

    Returns:
        One LibraryReference per distinct library or framework name, in
        emission order.
    """
    ordered_paths = sorted(set(search_paths))
    for path in ordered_paths:
        emitter.link_search(path)

    decisions: list[LibraryReference] = []
    for name in sorted(set(libraries)):
        reference = decide_linkage(
            name, ordered_paths, profile_kind, target_os, debug_policy
        )
        if emitter.link_lib(reference.name, reference.kind):
            if reference.archive is not None:
                logger.info("Linking %s statically (%s)", name, reference.archive)
            else:
                logger.info("Linking %s dynamically", name)
            decisions.append(reference)

    for name in sorted(set(frameworks)):
        if emitter.link_lib(name, LinkageKind.FRAMEWORK):
            logger.info("Linking framework %s", name)
            decisions.append(LibraryReference(name=name, kind=LinkageKind.FRAMEWORK))
    return decisions


__all__ = ["decide_and_emit", "decide_linkage", "find_static_archive"]
