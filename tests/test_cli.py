"""Smoke tests for the CLI.

These tests verify CLI behavior without running CMake, pkg-config or
bindgen.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from nativedeps import __version__
from nativedeps.cli import app
from nativedeps.errors import BuildError
from nativedeps.types import ProbeStrategy, StagingReport

runner = CliRunner()

pytestmark = pytest.mark.usefixtures("isolated_env")


class TestCLIHelp:
    """Test CLI help and version commands."""

    def test_help_returns_zero(self) -> None:
        """CLI --help should return exit code 0."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Native dependency orchestrator" in result.stdout

    def test_version_flag(self) -> None:
        """CLI --version should print version and exit 0."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_no_args_shows_help(self) -> None:
        """CLI with no args should show help."""
        result = runner.invoke(app, [])
        assert "Usage:" in result.output


class TestCLIConfig:
    """Test CLI config command."""

    def test_config_command(self) -> None:
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "Effective Configuration" in result.stdout
        assert "(unset)" in result.stdout

    def test_config_json(self, monkeypatch) -> None:
        """--json should print parseable settings."""
        monkeypatch.setenv("CARGO_CFG_TARGET_OS", "windows")
        result = runner.invoke(app, ["config", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["target_os"] == "windows"
        assert data["package_name"] == "by2"


class TestCLIResolve:
    """Test CLI resolve command."""

    def test_resolve_json(self) -> None:
        result = runner.invoke(
            app,
            [
                "resolve",
                "--target-os",
                "windows",
                "--target-arch",
                "x86_64",
                "--profile",
                "debug",
                "--json",
            ],
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["config_preset"] == "msvc-mt"
        assert data["build_preset"] == "msvc-mt-debug-install"
        assert data["install_prefix"] is None

    def test_resolve_from_cargo_env(self, monkeypatch) -> None:
        """Cargo's variables should be honoured."""
        monkeypatch.setenv("CARGO_CFG_TARGET_OS", "macos")
        monkeypatch.setenv("CARGO_CFG_TARGET_ARCH", "aarch64")
        monkeypatch.setenv("PROFILE", "release")
        result = runner.invoke(app, ["resolve"])
        assert result.exit_code == 0
        assert "macos-release" in result.stdout

    def test_resolve_unsupported(self) -> None:
        """Unsupported platforms exit with the configuration code."""
        result = runner.invoke(
            app,
            ["resolve", "--target-os", "windows", "--target-arch", "arm64", "--profile", "release"],
        )
        assert result.exit_code == 2


class TestCLIRun:
    """Test CLI run command."""

    def test_run_passes_overrides(self, tmp_path) -> None:
        with (
            patch("nativedeps.builds.service.orchestrate") as mock_orchestrate,
            patch("nativedeps.cli.configure_logging"),
        ):
            mock_orchestrate.return_value = MagicMock(staging=StagingReport())
            result = runner.invoke(
                app,
                [
                    "run",
                    "--target-os",
                    "linux",
                    "--target-arch",
                    "x86_64",
                    "--profile",
                    "release",
                    "--out-dir",
                    str(tmp_path),
                    "--strategy",
                    "scan",
                    "--no-bindings",
                ],
            )

        assert result.exit_code == 0
        settings = mock_orchestrate.call_args[0][0]
        assert settings.target_os == "linux"
        assert settings.out_dir == tmp_path
        assert settings.probe_strategy is ProbeStrategy.SCAN
        assert settings.generate_bindings is False

    def test_run_build_failure(self, tmp_path) -> None:
        """Build failures exit with the build code."""
        with (
            patch(
                "nativedeps.builds.service.orchestrate",
                side_effect=BuildError("build", "cmake build failed with exit code 1"),
            ),
            patch("nativedeps.cli.configure_logging"),
        ):
            result = runner.invoke(app, ["run", "--out-dir", str(tmp_path)])

        assert result.exit_code == 3


class TestCLIProbe:
    """Test CLI probe command."""

    def test_probe_json(self, tmp_path) -> None:
        """Should report link decisions for an existing install tree."""
        lib_dir = tmp_path / "installed" / "lib"
        lib_dir.mkdir(parents=True)
        (lib_dir / "libby2.a").write_bytes(b"!<arch>\n")

        with patch("nativedeps.cli.configure_logging"):
            result = runner.invoke(
                app,
                [
                    "probe",
                    "--target-os",
                    "linux",
                    "--target-arch",
                    "x86_64",
                    "--profile",
                    "release",
                    "--out-dir",
                    str(tmp_path),
                    "--strategy",
                    "scan",
                    "--json",
                ],
            )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["libraries"] == [
            {"name": "by2", "kind": "static", "archive": (lib_dir / "libby2.a").as_posix()}
        ]
        assert lib_dir.as_posix() in data["search_paths"]

    def test_probe_without_out_dir(self) -> None:
        with patch("nativedeps.cli.configure_logging"):
            result = runner.invoke(
                app,
                ["probe", "--target-os", "linux", "--target-arch", "x86_64", "--profile", "release"],
            )
        assert result.exit_code == 2
