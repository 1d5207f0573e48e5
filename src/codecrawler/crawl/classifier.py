"""Decide which discovered files become documents."""

from __future__ import annotations

from pathlib import Path

from codecrawler.config import CrawlerConfig
from codecrawler.utils.files import split_filename

BACKUP_SUFFIX = "~"


def accepts(path: Path, config: CrawlerConfig) -> bool:
    """Return True when ``path`` should be indexed.

    A file listed in ``files_to_include`` is always accepted. Otherwise it is
    rejected when the full path contains an excluded directory token, the file
    name is excluded, it is an editor backup or its extension is excluded.
    """
    file_name = path.name
    if file_name in config.files_to_include:
        return True

    full_path = str(path)
    if any(token in full_path for token in config.directories_to_exclude):
        return False
    if file_name in config.files_to_exclude:
        return False
    if file_name.endswith(BACKUP_SUFFIX):
        return False

    _, extension = split_filename(file_name)
    return extension not in config.extensions_to_exclude
