"""Workspace root discovery.

Cargo runs build scripts with the crate directory (e.g. ``<root>/src/bridge``)
as the working directory; the CMake workspace root is a fixed number of
parent steps above it.
"""

import logging
from pathlib import Path

from nativedeps.errors import WorkspaceError

logger = logging.getLogger(__name__)

DEFAULT_WORKSPACE_DEPTH = 2


def locate(depth: int = DEFAULT_WORKSPACE_DEPTH, cwd: Path | None = None) -> Path:
    """Compute the workspace root from the current working directory.

    Args:
        depth: Number of parent-directory steps above the cwd.
        cwd: Working directory override (defaults to Path.cwd()).

    Returns:
        Absolute workspace root.

    Raises:
        WorkspaceError: If the cwd has fewer than ``depth`` ancestors.
    """
    if depth < 0:
        raise WorkspaceError(f"Workspace depth must not be negative: {depth}")

    current = (cwd if cwd is not None else Path.cwd()).absolute()
    if depth == 0:
        return current

    ancestors = current.parents
    if len(ancestors) < depth:
        raise WorkspaceError(
            f"Cannot locate workspace root {depth} levels above {current}: "
            f"only {len(ancestors)} ancestor directories"
        )

    root = ancestors[depth - 1]
    logger.debug("Workspace root: %s (cwd=%s, depth=%d)", root, current, depth)
    return root


__all__ = ["DEFAULT_WORKSPACE_DEPTH", "locate"]
