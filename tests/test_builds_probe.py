"""Tests for builds/layout.py and builds/probe.py modules.

Tests install layout derivation and both discovery strategies.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from nativedeps.builds.layout import InstallLayout
from nativedeps.builds.metadata import MetadataQueryResult
from nativedeps.builds.probe import find_libraries_in_dir, probe
from nativedeps.errors import MetadataProbeError
from nativedeps.profiles.resolver import resolve
from nativedeps.types import ProbeStrategy


def make_layout(tmp_path: Path, target_os="linux", arch="x86_64", kind="release"):
    profile = resolve(target_os, arch, kind)
    return InstallLayout.for_profile(
        profile,
        install_prefix=tmp_path / "installed",
        nested_install_dir=tmp_path / "vcpkg_installed",
    )


def touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    return path


class TestInstallLayout:
    """Tests for InstallLayout."""

    def test_release_dirs(self, tmp_path):
        """Release layout uses lib and lib/pkgconfig."""
        layout = make_layout(tmp_path)
        prefix = tmp_path / "installed"
        assert layout.include_dir == prefix / "include"
        assert layout.lib_dir == prefix / "lib"
        assert layout.metadata_dir == prefix / "lib" / "pkgconfig"
        assert layout.nested_lib_dir == tmp_path / "vcpkg_installed" / "x64-linux" / "lib"

    def test_debug_dirs(self, tmp_path):
        """Debug layout uses the debug subtree."""
        layout = make_layout(tmp_path, "windows", "x86_64", "debug")
        prefix = tmp_path / "installed"
        assert layout.lib_dir == prefix / "debug" / "lib"
        assert layout.metadata_dir == prefix / "debug" / "lib" / "pkgconfig"
        assert layout.nested_lib_dir == (
            tmp_path / "vcpkg_installed" / "x64-windows-static-md" / "debug" / "lib"
        )

    def test_fallbacks(self, tmp_path):
        """Fallback and runtime dirs cover both subtrees."""
        layout = make_layout(tmp_path)
        prefix = tmp_path / "installed"
        assert layout.fallback_lib_dirs == [prefix / "lib", prefix / "debug" / "lib"]
        assert layout.runtime_bin_dirs == [prefix / "bin", prefix / "debug" / "bin"]

    def test_no_nested_dir(self, tmp_path):
        """Nested library dir is None without a nested install."""
        layout = InstallLayout.for_profile(
            resolve("linux", "x86_64", "release"), tmp_path
        )
        assert layout.nested_lib_dir is None


class TestFindLibrariesInDir:
    """Tests for find_libraries_in_dir function."""

    def test_static_archives_only(self, tmp_path):
        """Only static and import libraries count."""
        layout = make_layout(tmp_path)
        lib_dir = tmp_path / "installed" / "lib"
        touch(lib_dir / "libby2.a")
        touch(lib_dir / "libccore.a")
        touch(lib_dir / "libby2.so")
        touch(lib_dir / "by2.pc")
        (lib_dir / "cmake.a").mkdir()

        assert find_libraries_in_dir(lib_dir, layout) == ["by2", "ccore"]

    def test_windows_names(self, tmp_path):
        """Windows import libraries keep their full stem."""
        layout = make_layout(tmp_path, "windows")
        lib_dir = tmp_path / "installed" / "lib"
        touch(lib_dir / "by2.lib")
        touch(lib_dir / "libfoo.lib")

        assert find_libraries_in_dir(lib_dir, layout) == ["by2", "libfoo"]

    def test_non_recursive(self, tmp_path):
        """Subdirectories are not scanned."""
        layout = make_layout(tmp_path)
        touch(tmp_path / "installed" / "lib" / "sub" / "libdeep.a")
        assert find_libraries_in_dir(tmp_path / "installed" / "lib", layout) == []

    def test_missing_dir(self, tmp_path):
        """Missing directories yield no libraries."""
        layout = make_layout(tmp_path)
        assert find_libraries_in_dir(tmp_path / "nope", layout) == []


class TestProbeScan:
    """Tests for the directory-scan strategy."""

    def test_scan_with_nested_install(self, tmp_path):
        """Should find libraries in the install and nested trees."""
        layout = make_layout(tmp_path)
        touch(tmp_path / "installed" / "lib" / "libby2.a")
        nested = tmp_path / "vcpkg_installed" / "x64-linux" / "lib"
        touch(nested / "libfmt.a")
        touch(nested / "libby2.a")

        result = probe(layout, strategy=ProbeStrategy.SCAN)

        assert result.sorted_libraries() == ["by2", "fmt"]
        assert nested in result.search_paths
        assert set(layout.fallback_lib_dirs) <= result.search_paths

    def test_scan_empty_tree(self, tmp_path):
        """An empty tree yields only the fallback directories."""
        layout = make_layout(tmp_path)
        result = probe(layout, strategy=ProbeStrategy.SCAN)
        assert result.libraries == frozenset()
        assert result.search_paths == frozenset(layout.fallback_lib_dirs)


class TestProbeMetadata:
    """Tests for the metadata strategy."""

    def test_metadata_deduplicated(self, tmp_path):
        """Duplicate query results collapse and fallbacks are added."""
        layout = make_layout(tmp_path)
        lib_dir = tmp_path / "installed" / "lib"
        query_result = MetadataQueryResult(
            package="by2",
            search_paths=[lib_dir, lib_dir],
            libraries=["by2", "stdc++", "by2"],
        )
        with patch(
            "nativedeps.builds.probe.query_package", return_value=query_result
        ) as mock_query:
            result = probe(layout, package="by2")

        assert result.sorted_libraries() == ["by2", "stdc++"]
        assert result.search_paths == {lib_dir, tmp_path / "installed" / "debug" / "lib"}
        _, kwargs = mock_query.call_args
        assert kwargs["metadata_dir"] == layout.metadata_dir

    def test_metadata_failure_propagates(self, tmp_path):
        """Metadata failures are fatal."""
        layout = make_layout(tmp_path)
        with patch(
            "nativedeps.builds.probe.query_package",
            side_effect=MetadataProbeError("not found", package="by2"),
        ):
            with pytest.raises(MetadataProbeError):
                probe(layout, strategy=ProbeStrategy.METADATA)

    def test_metadata_frameworks(self, tmp_path):
        """Frameworks reported by the query are kept apart from libraries."""
        layout = make_layout(tmp_path, target_os="macos", arch="aarch64")
        query_result = MetadataQueryResult(
            package="by2",
            libraries=["by2"],
            frameworks=["CoreFoundation", "CoreFoundation"],
        )
        with patch("nativedeps.builds.probe.query_package", return_value=query_result):
            result = probe(layout, package="by2")

        assert result.sorted_libraries() == ["by2"]
        assert result.sorted_frameworks() == ["CoreFoundation"]
