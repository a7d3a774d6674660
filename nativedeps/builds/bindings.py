"""Binding generation with bindgen.

Runs the bindgen CLI against the installed entry header and writes the
generated Rust declarations to the build output directory.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path

from nativedeps.errors import BindingError

logger = logging.getLogger(__name__)


def compose_bindgen_command(
    header_path: Path,
    output_path: Path,
    include_dirs: list[Path] | None = None,
    bindgen: str = "bindgen",
) -> list[str]:
    """Compose the bindgen command.

    Args:
        header_path: Entry header.
        output_path: Generated declarations file.
        include_dirs: Extra include directories passed to clang.
        bindgen: bindgen executable.

    Returns:
        Command as list of strings suitable for subprocess.
    """
    cmd = [bindgen, str(header_path), "-o", str(output_path)]
    if include_dirs:
        cmd.append("--")
        cmd.extend(f"-I{d}" for d in include_dirs)
    return cmd


def generate_bindings(
    header_path: Path,
    output_path: Path,
    include_dirs: list[Path] | None = None,
    bindgen: str = "bindgen",
) -> Path:
    """Generate bindings for a header.

    Args:
        header_path: Entry header under the installed include tree.
        output_path: Generated declarations file.
        include_dirs: Extra include directories passed to clang.
        bindgen: bindgen executable.

    Returns:
        Path to the written bindings file.

    Raises:
        BindingError: If the header is missing or generation fails.
    """
    if not header_path.is_file():
        raise BindingError(f"Binding header not found: {header_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    cmd = compose_bindgen_command(header_path, output_path, include_dirs, bindgen)
    logger.info("Generating bindings: %s", shlex.join(cmd))

    try:
        subprocess.run(cmd, capture_output=True, text=True, check=True)
    except FileNotFoundError as e:
        raise BindingError(f"Binding generator not found: {bindgen}") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise BindingError(
            f"Unable to generate bindings for {header_path} "
            f"(exit code {e.returncode}): {stderr}"
        ) from e
    except OSError as e:
        raise BindingError(f"Failed to run {bindgen}: {e}") from e

    if not output_path.is_file():
        raise BindingError(f"Binding generator produced no output at {output_path}")

    logger.info("Wrote bindings to %s", output_path)
    return output_path


__all__ = ["compose_bindgen_command", "generate_bindings"]
