"""Tests for file utility functions."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from codecrawler.utils.files import iter_regular_files, read_legacy_text, split_filename


class TestSplitFilename:
    """Test split_filename extension rule."""

    def test_simple_extension(self) -> None:
        assert split_filename("Main.java") == ("Main", "java")

    def test_extension_is_lower_cased(self) -> None:
        assert split_filename("README.TXT") == ("README", "txt")

    def test_last_dot_wins(self) -> None:
        assert split_filename("archive.tar.gz") == ("archive.tar", "gz")

    def test_no_dot(self) -> None:
        """A name without a dot has no extension and keeps the full name."""
        assert split_filename("Makefile") == ("Makefile", "")

    def test_leading_dot_only(self) -> None:
        """A dot in first position does not start an extension."""
        assert split_filename(".project") == (".project", "")

    def test_hidden_file_with_extension(self) -> None:
        assert split_filename(".eslintrc.json") == (".eslintrc", "json")

    def test_trailing_dot(self) -> None:
        assert split_filename("weird.") == ("weird", "")


class TestIterRegularFiles:
    """Test iter_regular_files walk."""

    def test_nested_directories(self, tmp_path: Path) -> None:
        """Should find files in nested directories."""
        subdir = tmp_path / "a" / "b"
        subdir.mkdir(parents=True)
        (tmp_path / "root.txt").write_text("root")
        (subdir / "nested.txt").write_text("nested")

        names = {p.name for p in iter_regular_files(tmp_path)}

        assert names == {"root.txt", "nested.txt"}

    def test_directories_are_not_yielded(self, tmp_path: Path) -> None:
        (tmp_path / "empty").mkdir()

        assert list(iter_regular_files(tmp_path)) == []

    def test_missing_root_raises(self, tmp_path: Path) -> None:
        """Enumeration errors are not swallowed."""
        with pytest.raises(OSError):
            list(iter_regular_files(tmp_path / "missing"))

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_broken_symlink_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "real.txt").write_text("x")
        os.symlink(tmp_path / "gone.txt", tmp_path / "dangling.txt")

        names = [p.name for p in iter_regular_files(tmp_path)]

        assert names == ["real.txt"]


class TestReadLegacyText:
    """Test read_legacy_text decoding."""

    def test_latin1_bytes(self, tmp_path: Path) -> None:
        path = tmp_path / "latin.txt"
        path.write_bytes("café".encode("iso-8859-1"))

        assert read_legacy_text(path) == "café"

    def test_utf8_is_mis_decoded_not_rejected(self, tmp_path: Path) -> None:
        """Non-latin input decodes without error, just not faithfully."""
        path = tmp_path / "utf8.txt"
        path.write_bytes("café".encode("utf-8"))

        assert read_legacy_text(path) == "cafÃ©"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            read_legacy_text(tmp_path / "missing.txt")
