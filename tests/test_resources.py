"""Tests for the os-backed stat provider and directory lister."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from altermon.resources import FilesystemLister, OsStatProvider, StatError


def test_stat_file(tmp_path: Path) -> None:
    target = tmp_path / "report.txt"
    target.write_text("data")
    os.chmod(target, 0o640)
    os.utime(target, (1000, 1000))

    result = OsStatProvider().stat(str(target))

    assert result.permissions == 0o640
    assert result.is_directory is False
    assert result.modified_time == 1000


def test_stat_directory_has_no_mtime(tmp_path: Path) -> None:
    result = OsStatProvider().stat(str(tmp_path))

    assert result.is_directory is True
    assert result.modified_time is None


def test_stat_missing_path_raises(tmp_path: Path) -> None:
    missing = str(tmp_path / "missing.txt")

    with pytest.raises(StatError) as excinfo:
        OsStatProvider().stat(missing)

    assert excinfo.value.path == missing
    assert isinstance(excinfo.value.__cause__, OSError)


def test_stat_reads_fresh_metadata(tmp_path: Path) -> None:
    target = tmp_path / "a.txt"
    target.write_text("one")
    os.utime(target, (1000, 1000))
    provider = OsStatProvider()

    assert provider.stat(str(target)).modified_time == 1000
    os.utime(target, (2000, 2000))
    assert provider.stat(str(target)).modified_time == 2000


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.md").write_text("x")
    (tmp_path / "docs" / "guide.tmp").write_text("x")
    (tmp_path / "notes.txt").write_text("x")
    return tmp_path


def test_lister_recursive_yields_files_and_directories(tree: Path) -> None:
    listed = set(FilesystemLister().list(str(tree)))

    assert listed == {
        str(tree / "docs"),
        str(tree / "docs" / "guide.md"),
        str(tree / "docs" / "guide.tmp"),
        str(tree / "notes.txt"),
    }


def test_lister_top_level_only(tree: Path) -> None:
    listed = set(FilesystemLister(recursive=False).list(str(tree)))

    assert listed == {str(tree / "docs"), str(tree / "notes.txt")}


def test_lister_patterns(tree: Path) -> None:
    lister = FilesystemLister(include_patterns=["*.md", "*.tmp"], exclude_patterns=["*.tmp"])

    assert list(lister.list(str(tree))) == [str(tree / "docs" / "guide.md")]


def test_lister_skips_dangling_symlinks(tree: Path) -> None:
    (tree / "stale").symlink_to(tree / "nowhere")
    (tree / "live").symlink_to(tree / "notes.txt")
    provider = OsStatProvider()

    listed = set(FilesystemLister(recursive=False).list(str(tree)))

    assert str(tree / "stale") not in listed
    assert str(tree / "live") in listed
    for path in listed:
        provider.stat(path)


def test_lister_missing_directory_yields_nothing(tmp_path: Path) -> None:
    assert list(FilesystemLister().list(str(tmp_path / "absent"))) == []


def test_lister_is_restartable(tree: Path) -> None:
    lister = FilesystemLister()
    first = set(lister.list(str(tree)))
    (tree / "new.txt").write_text("x")
    second = set(lister.list(str(tree)))

    assert second - first == {str(tree / "new.txt")}
