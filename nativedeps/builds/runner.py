"""Build runner for executing CMake preset steps.

This module handles:
- Composing `cmake --preset` configure, build and workflow commands
- Executing each step synchronously with subprocess
- Capturing stdout/stderr to per-step log files

Steps have no timeout: each runs until the child exits.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from nativedeps.errors import BuildError

if TYPE_CHECKING:
    from nativedeps.profiles.resolver import BuildProfile

logger = logging.getLogger(__name__)

STEP_CONFIGURE = "configure"
STEP_BUILD = "build"
STEP_WORKFLOW = "workflow"


@dataclass
class StepResult:
    """Result of one CMake step.

    Attributes:
        step: Step name (configure, build, workflow).
        exit_code: Process exit code.
        log_path: Path to the step log file.
        started_at: Step start time.
        finished_at: Step finish time.
        command: The command that was executed.
    """

    step: str
    exit_code: int
    log_path: Path
    started_at: datetime
    finished_at: datetime
    command: str

    @property
    def duration(self) -> float:
        """Step duration in seconds."""
        return (self.finished_at - self.started_at).total_seconds()


def compose_configure_command(
    profile: BuildProfile,
    install_prefix: Path,
    nested_install_dir: Path | None = None,
    cmake: str = "cmake",
) -> list[str]:
    """Compose the configure command for a profile.

    Args:
        profile: Resolved build profile.
        install_prefix: CMake install prefix.
        nested_install_dir: Optional vcpkg installed directory.
        cmake: CMake executable.

    Returns:
        Command as list of strings suitable for subprocess.
    """
    cmd = [
        cmake,
        f"--preset={profile.config_preset}",
        f"-DCMAKE_INSTALL_PREFIX={install_prefix.as_posix()}",
    ]
    if nested_install_dir is not None:
        cmd.append(f"-DVCPKG_INSTALLED_DIR={nested_install_dir.as_posix()}")
    return cmd


def compose_build_command(profile: BuildProfile, cmake: str = "cmake") -> list[str]:
    """Compose the build (and install) command for a profile."""
    return [cmake, "--build", f"--preset={profile.build_preset}"]


def compose_workflow_command(profile: BuildProfile, cmake: str = "cmake") -> list[str]:
    """Compose the workflow command for a profile.

    Raises:
        ValueError: If the profile has no workflow preset.
    """
    if not profile.workflow_preset:
        raise ValueError(
            f"Profile {profile.target_os.value}/{profile.profile_kind.value} "
            "has no workflow preset"
        )
    return [cmake, "--workflow", f"--preset={profile.workflow_preset}"]


def run_step(
    step: str,
    cmd: list[str],
    cwd: Path,
    log_dir: Path,
) -> StepResult:
    """Execute one CMake step and wait for it to exit.

    Args:
        step: Step name, used for the log file and error messages.
        cmd: Command to execute.
        cwd: Working directory (the workspace root).
        log_dir: Directory for the step log file.

    Returns:
        StepResult for a successful step.

    Raises:
        BuildError: If the process cannot be spawned or exits non-zero.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"{step}.log"

    cmd_str = shlex.join(cmd)
    logger.info("Running %s: %s", step, cmd_str)
    logger.debug("Working directory: %s", cwd)

    started_at = datetime.now(timezone.utc)

    try:
        with log_path.open("w") as log_file:
            log_file.write(f"# Command: {cmd_str}\n")
            log_file.write(f"# Started: {started_at.isoformat()}\n")
            log_file.write(f"# CWD: {cwd}\n")
            log_file.write("# " + "=" * 70 + "\n\n")
            log_file.flush()

            result = subprocess.run(
                cmd,
                cwd=cwd,
                stdout=log_file,
                stderr=subprocess.STDOUT,
                check=False,
            )
            exit_code = result.returncode

    except OSError as e:
        message = f"cmake {step} failed to start: {e}"
        logger.error(message)
        raise BuildError(step, message, returncode=None, log_path=log_path) from e

    finished_at = datetime.now(timezone.utc)

    with log_path.open("a") as log_file:
        log_file.write(f"\n# Finished: {finished_at.isoformat()}\n")
        log_file.write(f"# Exit code: {exit_code}\n")
        duration = (finished_at - started_at).total_seconds()
        log_file.write(f"# Duration: {duration:.1f}s\n")

    if exit_code != 0:
        message = f"cmake {step} failed with exit code {exit_code}. See log: {log_path}"
        logger.error(message)
        raise BuildError(step, message, returncode=exit_code, log_path=log_path)

    return StepResult(
        step=step,
        exit_code=exit_code,
        log_path=log_path,
        started_at=started_at,
        finished_at=finished_at,
        command=cmd_str,
    )


def configure(
    profile: BuildProfile,
    workspace_root: Path,
    install_prefix: Path,
    log_dir: Path,
    nested_install_dir: Path | None = None,
    cmake: str = "cmake",
) -> StepResult:
    """Run the CMake configure step."""
    cmd = compose_configure_command(profile, install_prefix, nested_install_dir, cmake)
    return run_step(STEP_CONFIGURE, cmd, workspace_root, log_dir)


def build(
    profile: BuildProfile,
    workspace_root: Path,
    log_dir: Path,
    cmake: str = "cmake",
) -> StepResult:
    """Run the CMake build step."""
    cmd = compose_build_command(profile, cmake)
    return run_step(STEP_BUILD, cmd, workspace_root, log_dir)


def run_workflow(
    profile: BuildProfile,
    workspace_root: Path,
    log_dir: Path,
    cmake: str = "cmake",
) -> StepResult:
    """Run the CMake workflow preset in place of configure+build."""
    cmd = compose_workflow_command(profile, cmake)
    return run_step(STEP_WORKFLOW, cmd, workspace_root, log_dir)


def configure_and_build(
    profile: BuildProfile,
    workspace_root: Path,
    install_prefix: Path,
    log_dir: Path,
    nested_install_dir: Path | None = None,
    cmake: str = "cmake",
) -> list[StepResult]:
    """Run every CMake step a profile needs, stopping at the first failure.

    Returns:
        Results of the executed steps, in order.
    """
    if profile.workflow_preset:
        return [run_workflow(profile, workspace_root, log_dir, cmake)]
    return [
        configure(
            profile,
            workspace_root,
            install_prefix,
            log_dir,
            nested_install_dir=nested_install_dir,
            cmake=cmake,
        ),
        build(profile, workspace_root, log_dir, cmake),
    ]


__all__ = [
    "STEP_BUILD",
    "STEP_CONFIGURE",
    "STEP_WORKFLOW",
    "StepResult",
    "build",
    "compose_build_command",
    "compose_configure_command",
    "compose_workflow_command",
    "configure",
    "configure_and_build",
    "run_step",
    "run_workflow",
]
