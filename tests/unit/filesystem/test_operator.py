"""Unit tests for FilesystemOperator.

Tests directory creation, recursive removal with and without keeping
the root, rename and chmod failure reporting, and recursive copy.
"""

import logging
import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest
from dbafs.filesystem.operator import FilesystemOperator


class TestMkdir:
    """Tests for FilesystemOperator.mkdir."""

    def test_creates_directory(self, operator: FilesystemOperator, root: Path) -> None:
        operator.mkdir("a")
        assert (root / "a").is_dir()

    def test_existing_directory_is_noop(self, operator: FilesystemOperator, root: Path) -> None:
        (root / "a").mkdir()
        operator.mkdir("a")
        assert (root / "a").is_dir()

    def test_missing_parent_raises(self, operator: FilesystemOperator) -> None:
        with pytest.raises(FileNotFoundError):
            operator.mkdir("missing/child")


class TestRemoveTree:
    """Tests for FilesystemOperator.remove_tree."""

    def test_removes_directory(self, operator: FilesystemOperator, root: Path) -> None:
        (root / "a" / "b").mkdir(parents=True)
        (root / "a" / "b" / "file.txt").write_text("content")

        operator.remove_tree("a")

        assert not (root / "a").exists()

    def test_keep_root(self, operator: FilesystemOperator, root: Path) -> None:
        (root / "a" / "b").mkdir(parents=True)
        (root / "a" / "file.txt").write_text("content")
        (root / "a" / ".hidden").write_text("content")

        operator.remove_tree("a", keep_root=True)

        assert (root / "a").is_dir()
        assert list((root / "a").iterdir()) == []

    def test_keep_root_unlinks_symlinks(
        self, operator: FilesystemOperator, root: Path, tmp_path: Path
    ) -> None:
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "keep.txt").write_text("keep")
        (root / "a").mkdir()
        (root / "a" / "link").symlink_to(outside)

        operator.remove_tree("a", keep_root=True)

        assert not (root / "a" / "link").is_symlink()
        assert (outside / "keep.txt").exists()

    def test_missing_directory_raises(self, operator: FilesystemOperator) -> None:
        with pytest.raises(FileNotFoundError):
            operator.remove_tree("missing")


class TestRename:
    """Tests for FilesystemOperator.rename."""

    def test_rename_success(self, operator: FilesystemOperator, root: Path) -> None:
        (root / "a").mkdir()
        (root / "a" / "file.txt").write_text("content")

        assert operator.rename("a", "b") is True

        assert not (root / "a").exists()
        assert (root / "b" / "file.txt").read_text() == "content"

    def test_rename_missing_source_returns_false(
        self, operator: FilesystemOperator, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="dbafs.filesystem.operator"):
            assert operator.rename("missing", "b") is False

        assert "Cannot rename missing to b" in caplog.text

    def test_rename_onto_non_empty_directory_fails(
        self, operator: FilesystemOperator, root: Path
    ) -> None:
        (root / "a").mkdir()
        (root / "b").mkdir()
        (root / "b" / "file.txt").write_text("content")

        assert operator.rename("a", "b") is False
        assert (root / "a").is_dir()

    def test_rename_same_path(self, operator: FilesystemOperator, root: Path) -> None:
        (root / "a").mkdir()
        assert operator.rename("a", "a") is True


class TestCopyTree:
    """Tests for FilesystemOperator.copy_tree."""

    def test_copies_recursively(self, operator: FilesystemOperator, root: Path) -> None:
        (root / "a" / "b").mkdir(parents=True)
        (root / "a" / "b" / "file.txt").write_text("content")

        operator.copy_tree("a", "c")

        assert (root / "c" / "b" / "file.txt").read_text() == "content"
        assert (root / "a" / "b" / "file.txt").exists()

    def test_merges_into_existing_target(self, operator: FilesystemOperator, root: Path) -> None:
        (root / "a").mkdir()
        (root / "a" / "new.txt").write_text("new")
        (root / "c").mkdir()
        (root / "c" / "old.txt").write_text("old")

        operator.copy_tree("a", "c")

        assert sorted(p.name for p in (root / "c").iterdir()) == ["new.txt", "old.txt"]

    def test_missing_source_raises(self, operator: FilesystemOperator) -> None:
        with pytest.raises(OSError):
            operator.copy_tree("missing", "c")


class TestChmod:
    """Tests for FilesystemOperator.chmod."""

    def test_chmod_success(self, operator: FilesystemOperator, root: Path) -> None:
        (root / "a").mkdir()

        assert operator.chmod("a", 0o750) is True

        assert stat.S_IMODE(os.stat(root / "a").st_mode) == 0o750

    def test_chmod_missing_returns_false(self, operator: FilesystemOperator) -> None:
        assert operator.chmod("missing", 0o755) is False

    def test_chmod_oserror_returns_false(self, operator: FilesystemOperator, root: Path) -> None:
        (root / "a").mkdir()

        with patch("dbafs.filesystem.operator.os.chmod", side_effect=PermissionError("denied")):
            assert operator.chmod("a", 0o755) is False
