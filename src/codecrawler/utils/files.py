"""Utility helpers for working with files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

LEGACY_ENCODING = "iso-8859-1"


def split_filename(file_name: str) -> tuple[str, str]:
    """Split a file name into ``(name, extension)``.

    The extension is the lower-cased text after the last dot. A name without
    a dot, or whose only dot is the first character (``.project``), has no
    extension and keeps the full file name as its name.
    """
    position = file_name.rfind(".")
    if position > 0:
        return file_name[:position], file_name[position + 1 :].lower()
    return file_name, ""


def _raise_walk_error(error: OSError) -> None:
    raise error


def iter_regular_files(root: Path) -> Iterator[Path]:
    """Yield every regular file below ``root``, depth first.

    Errors while listing a directory are raised rather than skipped.
    Symlinked directories are not followed.
    """
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        dirnames.sort()
        base = Path(dirpath)
        for file_name in sorted(filenames):
            candidate = base / file_name
            if candidate.is_file():
                yield candidate


def read_legacy_text(path: Path) -> str:
    """Read a whole file and decode it as ISO-8859-1.

    Every byte maps to a character, so decoding never fails; text in other
    encodings comes out mis-decoded.
    """
    return path.read_bytes().decode(LEGACY_ENCODING)
