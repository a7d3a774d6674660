"""Tests for builds/metadata.py module.

Tests pkg-config output parsing and the metadata query.
Uses mocked subprocess for query tests.
"""

import os
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from nativedeps.builds.metadata import (
    is_path_like,
    parse_libs_output,
    query_package,
    substitute_placeholders,
)
from nativedeps.errors import MetadataProbeError
from nativedeps.types import TargetOS

PREFIX = Path("/out/installed")
LIB_DIR = Path("/out/installed/debug/lib")


def parse(output: str, target_os: TargetOS = TargetOS.LINUX):
    """Return (search paths, libraries) for output parsed under PREFIX."""
    paths, libs, _frameworks = parse_libs_output(output, PREFIX, LIB_DIR, target_os)
    return paths, libs


class TestSubstitutePlaceholders:
    """Tests for substitute_placeholders function."""

    def test_prefix(self):
        """${prefix} and ${exec_prefix} should become the install prefix."""
        assert substitute_placeholders("-L${prefix}/lib", PREFIX, LIB_DIR) == (
            "-L/out/installed/lib"
        )
        assert substitute_placeholders("${exec_prefix}", PREFIX, LIB_DIR) == (
            "/out/installed"
        )

    def test_libdir(self):
        """${libdir} should become the profile library directory."""
        assert substitute_placeholders("-L${libdir}", PREFIX, LIB_DIR) == (
            "-L/out/installed/debug/lib"
        )


class TestIsPathLike:
    """Tests for is_path_like function."""

    @pytest.mark.parametrize("value", ["/usr/lib", "C:/lib", "C:\\lib", "./lib"])
    def test_paths(self, value):
        assert is_path_like(value)

    @pytest.mark.parametrize("value", ["by2", "stdc++", "ws2_32"])
    def test_names(self, value):
        assert not is_path_like(value)


class TestParseLibsOutput:
    """Tests for parse_libs_output function."""

    def test_typical_output(self):
        """Should split -L and -l tokens."""
        paths, libs = parse("-L/out/installed/lib -lby2 -lstdc++\n")
        assert paths == [Path("/out/installed/lib")]
        assert libs == ["by2", "stdc++"]

    def test_separate_search_path_argument(self):
        """-L followed by a separate directory token."""
        paths, libs = parse("-L /opt/lib -lfoo")
        assert paths == [Path("/opt/lib")]
        assert libs == ["foo"]

    def test_unresolved_placeholders(self):
        """Unresolved placeholders should be substituted."""
        paths, libs = parse("-L${libdir} -L${prefix}/lib -lby2")
        assert paths == [LIB_DIR, PREFIX / "lib"]
        assert libs == ["by2"]

    def test_relative_search_path(self):
        """Relative search paths are anchored at the install prefix."""
        paths, _ = parse("-Llib")
        assert paths == [PREFIX / "lib"]

    def test_kind_qualified_tokens(self):
        """kind=value tokens resolve to names or search paths."""
        paths, libs = parse("-lstatic=by2 dylib=ssl -lnative=/opt/native")
        assert libs == ["by2", "ssl"]
        assert paths == [Path("/opt/native")]

    def test_path_library_file(self):
        """A bare path to a library file yields its directory and name."""
        paths, libs = parse("/out/installed/lib/libfmt.a")
        assert paths == [Path("/out/installed/lib")]
        assert libs == ["fmt"]

    def test_windows_backslash_path(self):
        """Windows paths with backslashes are normalised."""
        paths, libs = parse("C:\\install\\lib\\by2.lib", TargetOS.WINDOWS)
        assert paths == [Path("C:/install/lib")]
        assert libs == ["by2"]

    def test_bare_directory_path(self):
        """A bare non-library path becomes a search path."""
        paths, libs = parse("/opt/vendor/lib")
        assert paths == [Path("/opt/vendor/lib")]
        assert libs == []

    def test_colon_form(self):
        """-l:<file> names a library file."""
        _, libs = parse("-l:libz.a")
        assert libs == ["z"]

    def test_other_flags_ignored(self):
        """Unrecognised flags are ignored."""
        paths, libs = parse("-pthread -Wl,--as-needed -lby2")
        assert paths == []
        assert libs == ["by2"]

    def test_bare_library_name(self):
        """Bare words are library names."""
        _, libs = parse("kernel32 by2", TargetOS.WINDOWS)
        assert libs == ["kernel32", "by2"]

    def test_duplicates_preserved(self):
        """Parsing does not deduplicate."""
        _, libs = parse("-lby2 -lby2")
        assert libs == ["by2", "by2"]

    def test_empty_output(self):
        """Empty output yields nothing."""
        assert parse_libs_output("", PREFIX, LIB_DIR, TargetOS.LINUX) == ([], [], [])

    def test_escaped_space_in_search_path(self):
        """A backslash-escaped space stays inside one search path."""
        prefix = Path("/home/a b/out/installed")
        paths, libs, _ = parse_libs_output(
            "-L/home/a\\ b/out/installed/lib -lby2\n",
            prefix,
            prefix / "lib",
            TargetOS.LINUX,
        )
        assert paths == [Path("/home/a b/out/installed/lib")]
        assert libs == ["by2"]

    def test_quoted_search_path(self):
        """A quoted directory containing spaces is one search path."""
        paths, libs = parse('-L"/opt/my libs/lib" -lby2')
        assert paths == [Path("/opt/my libs/lib")]
        assert libs == ["by2"]

    def test_placeholder_prefix_with_spaces(self):
        """Placeholders expanding to a spaced prefix stay one token."""
        prefix = Path("/home/a b/out/installed")
        paths, libs, _ = parse_libs_output(
            "-L${libdir} -L${prefix}/lib -lby2",
            prefix,
            prefix / "debug" / "lib",
            TargetOS.LINUX,
        )
        assert paths == [prefix / "debug" / "lib", prefix / "lib"]
        assert libs == ["by2"]

    def test_unbalanced_quote(self):
        """Output that cannot be split raises MetadataProbeError."""
        with pytest.raises(MetadataProbeError, match="Unparsable"):
            parse('-L"/opt/lib -lby2')

    def test_msvc_library_files(self):
        """MSVC-style bare library files are reduced to library names."""
        paths, libs = parse("ws2_32.lib by2.lib -lbcrypt.lib", TargetOS.WINDOWS)
        assert paths == []
        assert libs == ["ws2_32", "by2", "bcrypt"]

    def test_frameworks(self):
        """-framework takes the next word as a framework name."""
        paths, libs, frameworks = parse_libs_output(
            "-L/out/installed/lib -lby2 -framework CoreFoundation "
            "-weak_framework Security",
            PREFIX,
            LIB_DIR,
            TargetOS.MACOS,
        )
        assert paths == [Path("/out/installed/lib")]
        assert libs == ["by2"]
        assert frameworks == ["CoreFoundation", "Security"]

    def test_flag_arguments_ignored(self):
        """Values of flags such as -Xlinker are not library names."""
        paths, libs = parse("-Xlinker --no-undefined -arch arm64 -lby2")
        assert paths == []
        assert libs == ["by2"]


class TestQueryPackage:
    """Tests for query_package function."""

    def test_success(self, tmp_path):
        """Should run pkg-config with the metadata dir in the child env only."""
        metadata_dir = tmp_path / "lib" / "pkgconfig"
        before = os.environ.get("PKG_CONFIG_PATH")

        with patch("nativedeps.builds.metadata.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(
                args=[], returncode=0, stdout="-L/x/lib -lby2\n", stderr=""
            )
            result = query_package(
                "by2", metadata_dir, PREFIX, LIB_DIR, TargetOS.LINUX
            )

        args, kwargs = mock_run.call_args
        assert args[0] == ["pkg-config", "--libs", "by2"]
        assert kwargs["env"]["PKG_CONFIG_PATH"] == str(metadata_dir)
        assert os.environ.get("PKG_CONFIG_PATH") == before
        assert result.search_paths == [Path("/x/lib")]
        assert result.libraries == ["by2"]
        assert result.raw_output == "-L/x/lib -lby2\n"

    def test_frameworks_reported(self, tmp_path):
        """Frameworks from the output are part of the result."""
        with patch("nativedeps.builds.metadata.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(
                args=[], returncode=0, stdout="-lby2 -framework Foundation\n", stderr=""
            )
            result = query_package("by2", tmp_path, PREFIX, LIB_DIR, TargetOS.MACOS)

        assert result.libraries == ["by2"]
        assert result.frameworks == ["Foundation"]

    def test_unparsable_output(self, tmp_path):
        """Unsplittable output is a metadata error naming the package."""
        with patch("nativedeps.builds.metadata.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(
                args=[], returncode=0, stdout="-L'/x/lib -lby2\n", stderr=""
            )
            with pytest.raises(MetadataProbeError) as exc_info:
                query_package("by2", tmp_path, PREFIX, LIB_DIR, TargetOS.LINUX)

        assert exc_info.value.package == "by2"
        assert "by2" in str(exc_info.value)

    def test_unknown_package(self, tmp_path):
        """A failing query should raise MetadataProbeError."""
        error = subprocess.CalledProcessError(
            1, ["pkg-config"], output="", stderr="Package by2 was not found"
        )
        with patch("nativedeps.builds.metadata.subprocess.run", side_effect=error):
            with pytest.raises(MetadataProbeError) as exc_info:
                query_package("by2", tmp_path, PREFIX, LIB_DIR, TargetOS.LINUX)

        assert exc_info.value.package == "by2"
        assert exc_info.value.exit_code == 4
        assert "was not found" in str(exc_info.value)

    def test_tool_missing(self, tmp_path):
        """A missing tool should raise MetadataProbeError."""
        with patch(
            "nativedeps.builds.metadata.subprocess.run",
            side_effect=FileNotFoundError("pkg-config"),
        ):
            with pytest.raises(MetadataProbeError, match="tool not found"):
                query_package(
                    "by2",
                    tmp_path,
                    PREFIX,
                    LIB_DIR,
                    TargetOS.LINUX,
                    pkg_config="pkgconf",
                )
