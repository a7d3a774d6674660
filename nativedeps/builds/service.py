"""Orchestration service.

This module provides the high-level API:
- orchestrate(): Main entry point - one complete, sequential run
- resolve_profile(): Settings -> BuildProfile, before any subprocess
- Probe-only runs against an existing install tree

Steps run strictly in order and every fatal condition propagates as an
OrchestratorError; only runtime staging failures are downgraded to warnings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from nativedeps.builds.artifacts import (
    MANIFEST_FILENAME,
    generate_manifest,
    write_manifest,
)
from nativedeps.builds.bindings import generate_bindings
from nativedeps.builds.directives import DirectiveEmitter
from nativedeps.builds.layout import InstallLayout
from nativedeps.builds.linkage import decide_and_emit
from nativedeps.builds.probe import probe
from nativedeps.builds.runner import StepResult, configure_and_build
from nativedeps.builds.staging import default_runtime_dirs, stage
from nativedeps.config import Settings
from nativedeps.profiles.io import load_preset_table
from nativedeps.profiles.resolver import BuildProfile, resolve
from nativedeps.types import LibraryReference, ProbeResult, StagingReport
from nativedeps.workspace import locate

logger = logging.getLogger(__name__)

LOG_DIRNAME = "logs"
BUILD_SCRIPT = "build.rs"

# Settings that change the emitted directives without changing Cargo's own inputs
RERUN_ENV_VARS = (
    "NATIVEDEPS_PROBE_STRATEGY",
    "NATIVEDEPS_DEBUG_LINKAGE",
    "NATIVEDEPS_PACKAGE_NAME",
    "NATIVEDEPS_PRESET_FILE",
)


@dataclass
class OrchestrationResult:
    """Outcome of one orchestration run.

    Attributes:
        profile: Resolved build profile (install prefix pinned).
        workspace_root: CMake workspace root.
        steps: Executed CMake steps.
        probe_result: Discovered search paths and libraries.
        libraries: Link decisions, in emission order.
        staging: Runtime staging report.
        bindings_path: Generated bindings file, if generated.
        manifest_path: Written run manifest, if written.
    """

    profile: BuildProfile
    workspace_root: Path | None = None
    steps: list[StepResult] = field(default_factory=list)
    probe_result: ProbeResult = field(default_factory=ProbeResult)
    libraries: list[LibraryReference] = field(default_factory=list)
    staging: StagingReport = field(default_factory=StagingReport)
    bindings_path: Path | None = None
    manifest_path: Path | None = None


def resolve_profile(settings: Settings) -> BuildProfile:
    """Resolve the build profile from settings.

    The install prefix is pinned when an output directory is configured and
    the profile builds with configure and build presets. A workflow preset
    installs under the workspace root instead (see build_layout).

    Raises:
        UnsupportedPlatformError: If the platform triple is unsupported.
        ConfigurationError: If the preset file is unusable.
    """
    table = load_preset_table(settings.preset_file) if settings.preset_file else None
    profile = resolve(
        settings.target_os, settings.target_arch, settings.profile, table=table
    )
    if settings.out_dir and not profile.workflow_preset:
        profile = profile.with_install_prefix(settings.install_prefix())
    return profile


def build_layout(
    settings: Settings,
    profile: BuildProfile,
    workspace_root: Path | None = None,
) -> InstallLayout:
    """Describe the install tree a profile's build produces.

    Configure and build presets install under the output directory. A
    workflow preset cannot be given an install prefix, so its tree is
    expected at the profile's workflow directories under the workspace root.

    Args:
        settings: Effective settings.
        profile: Resolved build profile.
        workspace_root: Workspace root; located from the cwd if not provided.

    Returns:
        InstallLayout whose profile has the install prefix pinned.

    Raises:
        WorkspaceError: If a workflow profile's workspace root cannot be located.
    """
    if profile.workflow_preset:
        if workspace_root is None:
            workspace_root = locate(settings.workspace_depth)
        install_prefix = workspace_root / profile.workflow_install_dir
        return InstallLayout.for_profile(
            profile.with_install_prefix(install_prefix),
            install_prefix=install_prefix,
            nested_install_dir=workspace_root / profile.workflow_nested_dir,
        )
    return InstallLayout.for_profile(
        profile,
        install_prefix=settings.install_prefix(),
        nested_install_dir=settings.nested_install_dir(),
    )


def runtime_destinations(settings: Settings) -> list[Path]:
    """Directories receiving staged shared libraries."""
    if settings.runtime_dirs:
        return [p.absolute() for p in settings.runtime_dirs]
    if settings.out_dir is None:
        return []
    return default_runtime_dirs(settings.out_dir)


def probe_and_emit(
    settings: Settings,
    layout: InstallLayout,
    emitter: DirectiveEmitter,
) -> tuple[ProbeResult, list[LibraryReference]]:
    """Probe an install tree and emit link directives.

    Raises:
        MetadataProbeError: If the metadata strategy fails.
    """
    probe_result = probe(
        layout,
        strategy=settings.probe_strategy,
        package=settings.package_name,
        pkg_config=settings.pkg_config,
    )
    libraries = decide_and_emit(
        probe_result.libraries,
        probe_result.search_paths,
        layout.profile.profile_kind,
        layout.profile.target_os,
        emitter,
        debug_policy=settings.debug_linkage,
        frameworks=probe_result.frameworks,
    )
    return probe_result, libraries


def _emit_rerun_directives(
    settings: Settings, emitter: DirectiveEmitter, cwd: Path
) -> None:
    build_script = cwd / BUILD_SCRIPT
    if build_script.is_file():
        emitter.rerun_if_changed(build_script)
    if settings.preset_file is not None:
        emitter.rerun_if_changed(settings.preset_file.absolute())
    for name in RERUN_ENV_VARS:
        emitter.rerun_if_env_changed(name)


def orchestrate(
    settings: Settings,
    emitter: DirectiveEmitter,
    cwd: Path | None = None,
) -> OrchestrationResult:
    """Run the complete pipeline once.

    Steps: resolve profile, locate workspace, CMake configure+build (or
    workflow), generate bindings, probe, decide and emit link directives,
    stage runtime dependencies, write the run manifest.

    Args:
        settings: Effective settings.
        emitter: Directive destination.
        cwd: Working directory override (defaults to Path.cwd()).

    Returns:
        OrchestrationResult describing the run.

    Raises:
        OrchestratorError: On any fatal failure; nothing after the failing
            step runs.
    """
    # Configuration errors surface before any subprocess is spawned
    profile = resolve_profile(settings)
    out_dir = settings.output_dir()
    workspace_root = locate(settings.workspace_depth, cwd=cwd)
    layout = build_layout(settings, profile, workspace_root)
    profile = layout.profile
    current = (cwd if cwd is not None else Path.cwd()).absolute()

    emitter.warning(
        f"Building for OS={profile.target_os.value}, ARCH={profile.target_arch}, "
        f"PROFILE={profile.profile_kind.value}, out_dir={out_dir.as_posix()}"
    )
    _emit_rerun_directives(settings, emitter, current)

    result = OrchestrationResult(profile=profile, workspace_root=workspace_root)

    if profile.workflow_preset:
        logger.info(
            "Workflow preset %s installs to %s",
            profile.workflow_preset,
            layout.install_prefix,
        )
    else:
        logger.info("Installing CMake artifacts to %s", layout.install_prefix)
    result.steps = configure_and_build(
        profile,
        workspace_root,
        layout.install_prefix,
        out_dir / LOG_DIRNAME,
        nested_install_dir=layout.nested_install_dir,
        cmake=settings.cmake,
    )

    if settings.generate_bindings:
        result.bindings_path = generate_bindings(
            layout.include_dir / settings.binding_header,
            out_dir / settings.bindings_file,
            include_dirs=[layout.include_dir],
            bindgen=settings.bindgen,
        )

    result.probe_result, result.libraries = probe_and_emit(settings, layout, emitter)

    result.staging = stage(layout, runtime_destinations(settings))
    for source, error in result.staging.failures:
        emitter.warning(f"Failed to stage runtime dependency {source.name}: {error}")

    if settings.write_manifest:
        manifest = generate_manifest(
            profile,
            result.probe_result,
            result.libraries,
            staging=result.staging,
            bindings_path=result.bindings_path,
            directives=emitter.directives,
        )
        result.manifest_path = write_manifest(manifest, out_dir / MANIFEST_FILENAME)

    logger.info(
        "Orchestration finished: %d librar(y/ies), %d runtime file(s) staged",
        len(result.libraries),
        len(result.staging.copied),
    )
    return result


__all__ = [
    "LOG_DIRNAME",
    "RERUN_ENV_VARS",
    "OrchestrationResult",
    "build_layout",
    "orchestrate",
    "probe_and_emit",
    "resolve_profile",
    "runtime_destinations",
]
