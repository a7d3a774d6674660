"""Cargo build-script directive emission.

Directives are written one per line to a text stream (stdout when running
under Cargo). The emitter enforces set semantics: each search path and each
library name is emitted at most once per run.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

from nativedeps.types import LinkageKind

logger = logging.getLogger(__name__)

DIRECTIVE_PREFIX = "cargo:"


def format_link_search(path: Path) -> str:
    """Format a native link-search directive."""
    return f"{DIRECTIVE_PREFIX}rustc-link-search=native={path.as_posix()}"


def format_link_lib(name: str, kind: LinkageKind) -> str:
    """Format a link-library directive."""
    return f"{DIRECTIVE_PREFIX}rustc-link-lib={kind.value}={name}"


def format_warning(message: str) -> str:
    """Format a warning directive (single line)."""
    return f"{DIRECTIVE_PREFIX}warning={' '.join(message.split())}"


def format_rerun_if_changed(path: Path) -> str:
    return f"{DIRECTIVE_PREFIX}rerun-if-changed={path.as_posix()}"


def format_rerun_if_env_changed(name: str) -> str:
    return f"{DIRECTIVE_PREFIX}rerun-if-env-changed={name}"


class DirectiveEmitter:
    """Writes host-build directives to a stream.

    Attributes:
        stream: Destination text stream.
        directives: Every line written so far, in order.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.directives: list[str] = []
        self._search_paths: set[Path] = set()
        self._libraries: dict[str, LinkageKind] = {}

    def _write(self, line: str) -> None:
        self.directives.append(line)
        self.stream.write(line + "\n")
        self.stream.flush()

    def link_search(self, path: Path) -> bool:
        """Emit a link-search directive unless the path was already emitted.

        Returns:
            True if a directive was written.
        """
        if path in self._search_paths:
            return False
        self._search_paths.add(path)
        self._write(format_link_search(path))
        return True

    def link_lib(self, name: str, kind: LinkageKind) -> bool:
        """Emit a link-library directive unless the name was already emitted.

        The first decision for a name wins; later calls are no-ops.

        Returns:
            True if a directive was written.
        """
        if name in self._libraries:
            if self._libraries[name] is not kind:
                logger.debug(
                    "Ignoring %s linkage for %s: already emitted as %s",
                    kind.value,
                    name,
                    self._libraries[name].value,
                )
            return False
        self._libraries[name] = kind
        self._write(format_link_lib(name, kind))
        return True

    def warning(self, message: str) -> None:
        self._write(format_warning(message))

    def rerun_if_changed(self, path: Path) -> None:
        self._write(format_rerun_if_changed(path))

    def rerun_if_env_changed(self, name: str) -> None:
        self._write(format_rerun_if_env_changed(name))

    @property
    def emitted_search_paths(self) -> set[Path]:
        return set(self._search_paths)

    @property
    def emitted_libraries(self) -> dict[str, LinkageKind]:
        return dict(self._libraries)


__all__ = [
    "DIRECTIVE_PREFIX",
    "DirectiveEmitter",
    "format_link_lib",
    "format_link_search",
    "format_rerun_if_changed",
    "format_rerun_if_env_changed",
    "format_warning",
]
