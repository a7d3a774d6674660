"""Thin CLI wrapper for nativedeps.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.

Stdout is reserved for build directives during `run` and `probe`; human
output and logs go to stderr.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.markup import escape

from nativedeps import __version__
from nativedeps.config import Settings, get_settings, print_settings_json
from nativedeps.errors import OrchestratorError
from nativedeps.types import DebugLinkagePolicy, ProbeStrategy

app = typer.Typer(
    name="nativedeps",
    help="Native dependency orchestrator - build a CMake library and link it from Cargo",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"nativedeps version {__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Send log records to stderr at the configured level."""
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def fail(error: OrchestratorError) -> typer.Exit:
    """Report a fatal error and map it to the process exit code."""
    err_console.print(f"[red]Error ({error.code}): {escape(str(error))}[/red]")
    return typer.Exit(code=error.exit_code)


def apply_overrides(settings: Settings, **overrides: Any) -> Settings:
    """Return settings with non-None CLI overrides applied."""
    updates = {k: v for k, v in overrides.items() if v is not None}
    if not updates:
        return settings
    return settings.model_copy(update=updates)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Native dependency orchestrator - build a CMake library and link it from Cargo."""


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        typer.echo(print_settings_json(settings))
        return

    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print("[bold]Build inputs:[/bold]")
    console.print(f"  Target OS:           {settings.target_os or '(unset)'}")
    console.print(f"  Target arch:         {settings.target_arch or '(unset)'}")
    console.print(f"  Profile:             {settings.profile or '(unset)'}")
    console.print(f"  Output directory:    {settings.out_dir or '(unset)'}")
    console.print()
    console.print("[bold]Package:[/bold]")
    console.print(f"  Package name:        {settings.package_name}")
    console.print(f"  Binding header:      {settings.binding_header}")
    console.print(f"  Bindings file:       {settings.bindings_file}")
    console.print(f"  Generate bindings:   {settings.generate_bindings}")
    console.print()
    console.print("[bold]Linkage:[/bold]")
    console.print(f"  Probe strategy:      {settings.probe_strategy.value}")
    console.print(f"  Debug linkage:       {settings.debug_linkage.value}")
    console.print(f"  Preset file:         {settings.preset_file or '(built-in)'}")
    console.print(f"  Workspace depth:     {settings.workspace_depth}")
    runtime_dirs = ", ".join(str(p) for p in settings.runtime_dirs)
    console.print(f"  Runtime dirs:        {runtime_dirs or '(derived from OUT_DIR)'}")
    console.print()
    console.print("[bold]Tools:[/bold]")
    console.print(f"  CMake:               {settings.cmake}")
    console.print(f"  pkg-config:          {settings.pkg_config}")
    console.print(f"  bindgen:             {settings.bindgen}")
    console.print()
    console.print("[bold]Operational:[/bold]")
    console.print(f"  Write manifest:      {settings.write_manifest}")
    console.print(f"  Log level:           {settings.log_level}")


@app.command()
def resolve(
    target_os: Annotated[
        str | None, typer.Option("--target-os", help="Target OS override")
    ] = None,
    target_arch: Annotated[
        str | None, typer.Option("--target-arch", help="Target architecture override")
    ] = None,
    profile: Annotated[
        str | None, typer.Option("--profile", help="Build profile override")
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Resolve and show the build profile for a platform."""
    from nativedeps.builds.service import resolve_profile

    settings = apply_overrides(
        get_settings(), target_os=target_os, target_arch=target_arch, profile=profile
    )
    try:
        build_profile = resolve_profile(settings)
    except OrchestratorError as e:
        raise fail(e) from None

    description = build_profile.describe()
    if json_output:
        typer.echo(json.dumps(description, indent=2))
        return

    console.print("[bold]Build profile:[/bold]")
    for key, value in description.items():
        console.print(f"  {key + ':':<20} {value if value is not None else '-'}")


@app.command()
def run(
    target_os: Annotated[
        str | None, typer.Option("--target-os", help="Target OS override")
    ] = None,
    target_arch: Annotated[
        str | None, typer.Option("--target-arch", help="Target architecture override")
    ] = None,
    profile: Annotated[
        str | None, typer.Option("--profile", help="Build profile override")
    ] = None,
    out_dir: Annotated[
        Path | None, typer.Option("--out-dir", help="Output directory override")
    ] = None,
    strategy: Annotated[
        ProbeStrategy | None,
        typer.Option("--strategy", help="Library discovery strategy"),
    ] = None,
    debug_linkage: Annotated[
        DebugLinkagePolicy | None,
        typer.Option("--debug-linkage", help="Linkage policy for debug builds"),
    ] = None,
    no_bindings: Annotated[
        bool,
        typer.Option("--no-bindings", help="Skip binding generation"),
    ] = False,
) -> None:
    """Build, install and link the native library (prints Cargo directives)."""
    from nativedeps.builds.directives import DirectiveEmitter
    from nativedeps.builds.service import orchestrate

    settings = apply_overrides(
        get_settings(),
        target_os=target_os,
        target_arch=target_arch,
        profile=profile,
        out_dir=out_dir,
        probe_strategy=strategy,
        debug_linkage=debug_linkage,
        generate_bindings=False if no_bindings else None,
    )
    configure_logging(settings.log_level)

    emitter = DirectiveEmitter(sys.stdout)
    try:
        result = orchestrate(settings, emitter)
    except OrchestratorError as e:
        raise fail(e) from None

    for source, error in result.staging.failures:
        err_console.print(
            f"[yellow]Warning: could not stage {source.name}: {escape(error)}[/yellow]"
        )


@app.command()
def probe(
    target_os: Annotated[
        str | None, typer.Option("--target-os", help="Target OS override")
    ] = None,
    target_arch: Annotated[
        str | None, typer.Option("--target-arch", help="Target architecture override")
    ] = None,
    profile: Annotated[
        str | None, typer.Option("--profile", help="Build profile override")
    ] = None,
    out_dir: Annotated[
        Path | None, typer.Option("--out-dir", help="Output directory override")
    ] = None,
    strategy: Annotated[
        ProbeStrategy | None,
        typer.Option("--strategy", help="Library discovery strategy"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output link decisions as JSON"),
    ] = False,
) -> None:
    """Probe an existing install tree without building."""
    from io import StringIO

    from nativedeps.builds.artifacts import describe_library
    from nativedeps.builds.directives import DirectiveEmitter
    from nativedeps.builds.service import build_layout, probe_and_emit, resolve_profile

    settings = apply_overrides(
        get_settings(),
        target_os=target_os,
        target_arch=target_arch,
        profile=profile,
        out_dir=out_dir,
        probe_strategy=strategy,
    )
    configure_logging(settings.log_level)

    emitter = DirectiveEmitter(StringIO() if json_output else sys.stdout)
    try:
        build_profile = resolve_profile(settings)
        layout = build_layout(settings, build_profile)
        probe_result, libraries = probe_and_emit(settings, layout, emitter)
    except OrchestratorError as e:
        raise fail(e) from None

    if json_output:
        output = {
            "search_paths": [p.as_posix() for p in probe_result.sorted_search_paths()],
            "libraries": [describe_library(ref) for ref in libraries],
        }
        typer.echo(json.dumps(output, indent=2))


if __name__ == "__main__":
    app()
