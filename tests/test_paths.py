"""
Path resolution tests for dep-licenses.
"""

from pathlib import Path

import pytest

from dep_licenses.error_handling import InvalidDependencyPathError
from dep_licenses.paths import search_directories, source_identifier, validate_dependency_path


class TestValidateDependencyPath:
    """Test dependency path validation."""

    @pytest.mark.parametrize("path", [None, ""])
    def test_missing_path(self, path):
        assert validate_dependency_path(path) is None

    @pytest.mark.parametrize("path", [".", "vendor/dep", "../dep"])
    def test_relative_path_raises(self, path):
        with pytest.raises(InvalidDependencyPathError, match="must be absolute"):
            validate_dependency_path(path)

    def test_normalizes_absolute_path(self, tmp_path):
        assert validate_dependency_path(str(tmp_path / "a" / ".." / "b")) == tmp_path / "b"


class TestSearchDirectories:
    """Test the upward walk bounded by the search root."""

    def test_defaults_to_path(self, tmp_path):
        assert search_directories(tmp_path, None) == [tmp_path]
        assert search_directories(tmp_path, tmp_path) == [tmp_path]

    def test_walks_up_to_search_root(self, tmp_path):
        path = tmp_path / "a" / "b" / "c"
        assert search_directories(path, tmp_path / "a") == [
            path,
            tmp_path / "a" / "b",
            tmp_path / "a",
        ]

    def test_unrelated_search_root(self, tmp_path):
        path = tmp_path / "a" / "b"
        assert search_directories(path, tmp_path / "other") == [path]

    def test_search_root_below_path(self, tmp_path):
        assert search_directories(tmp_path, tmp_path / "child") == [tmp_path]


class TestSourceIdentifier:
    """Test source identifier formatting."""

    def test_file_in_dependency(self, tmp_path):
        assert source_identifier(tmp_path / "LICENSE", tmp_path, tmp_path) == "LICENSE"

    def test_nested_file_uses_forward_slashes(self, tmp_path):
        assert source_identifier(tmp_path / "docs" / "LICENSE", tmp_path, None) == "docs/LICENSE"

    def test_file_above_dependency(self, tmp_path):
        root = tmp_path / "workspace"
        path = root / "packages" / "dep"
        assert source_identifier(root / "LICENSE", path, root) == "workspace/LICENSE"

    def test_file_outside_search_root(self):
        assert source_identifier(Path("/elsewhere/LICENSE"), Path("/dep"), Path("/dep")) == "/elsewhere/LICENSE"
