"""Run manifest generation.

This module handles:
- Describing staged runtime files (size and checksum)
- Generating the JSON run manifest (profile, link decisions, staged files)
- Writing the manifest into the build output directory
"""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from nativedeps.types import LibraryReference, LinkageKind

if TYPE_CHECKING:
    from nativedeps.profiles.resolver import BuildProfile
    from nativedeps.types import ProbeResult, StagingReport

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "nativedeps-manifest.json"
MANIFEST_VERSION = "1.0"

# Default chunk size for hashing
HASH_CHUNK_SIZE = 64 * 1024  # 64KB


def compute_file_hash(
    file_path: Path,
    chunk_size: int = HASH_CHUNK_SIZE,
) -> str:
    """Compute SHA-256 hash of a file.

    Args:
        file_path: Path to the file.
        chunk_size: Size of chunks for streaming hash.

    Returns:
        SHA-256 hex digest.
    """
    sha256 = hashlib.sha256()
    with file_path.open("rb") as f:
        while chunk := f.read(chunk_size):
            sha256.update(chunk)
    return sha256.hexdigest()


def describe_file(path: Path) -> dict[str, Any]:
    """Describe a file for the manifest (missing files are marked)."""
    if not path.is_file():
        return {"path": path.as_posix(), "exists": False}
    return {
        "path": path.as_posix(),
        "exists": True,
        "size_bytes": path.stat().st_size,
        "sha256": compute_file_hash(path),
    }


def describe_library(reference: LibraryReference) -> dict[str, Any]:
    data: dict[str, Any] = {"name": reference.name, "kind": reference.kind.value}
    if reference.archive is not None:
        data["archive"] = reference.archive.as_posix()
    return data


def generate_manifest(
    profile: BuildProfile,
    probe_result: ProbeResult,
    libraries: list[LibraryReference],
    staging: StagingReport | None = None,
    bindings_path: Path | None = None,
    directives: list[str] | None = None,
) -> dict[str, Any]:
    """Generate a run manifest.

    The manifest contains:
    - The resolved build profile
    - Search paths and link decisions
    - Staged runtime files with checksums, and copy failures
    - Emitted directives

    Args:
        profile: Resolved build profile.
        probe_result: Probe output.
        libraries: Link decisions.
        staging: Optional staging report.
        bindings_path: Optional generated bindings file.
        directives: Optional emitted directive lines.

    Returns:
        Manifest dictionary suitable for JSON serialization.
    """
    now = datetime.now(timezone.utc)

    manifest: dict[str, Any] = {
        "version": MANIFEST_VERSION,
        "generated_at": now.isoformat(),
        "profile": profile.describe(),
        "search_paths": [p.as_posix() for p in probe_result.sorted_search_paths()],
        "libraries": [describe_library(ref) for ref in libraries],
    }

    if staging is not None:
        manifest["runtime_files"] = [describe_file(p) for p in staging.copied]
        manifest["runtime_failures"] = [
            {"source": source.as_posix(), "error": error}
            for source, error in staging.failures
        ]
    if bindings_path is not None:
        manifest["bindings"] = describe_file(bindings_path)
    if directives is not None:
        manifest["directives"] = list(directives)

    manifest["summary"] = {
        "search_paths": len(probe_result.search_paths),
        "static": sum(1 for ref in libraries if ref.kind is LinkageKind.STATIC),
        "dynamic": sum(1 for ref in libraries if ref.kind is LinkageKind.DYNAMIC),
        "framework": sum(
            1 for ref in libraries if ref.kind is LinkageKind.FRAMEWORK
        ),
    }

    return manifest


def write_manifest(
    manifest: dict[str, Any],
    output_path: Path,
) -> Path:
    """Write manifest to a JSON file.

    Args:
        manifest: Manifest dictionary.
        output_path: Output file path.

    Returns:
        Path to written manifest file.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with output_path.open("w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, sort_keys=True)

    logger.info("Wrote manifest to %s", output_path)
    return output_path


__all__ = [
    "HASH_CHUNK_SIZE",
    "MANIFEST_FILENAME",
    "MANIFEST_VERSION",
    "compute_file_hash",
    "describe_file",
    "describe_library",
    "generate_manifest",
    "write_manifest",
]
