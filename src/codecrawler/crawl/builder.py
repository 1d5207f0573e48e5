"""Turn accepted files into document records."""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

from codecrawler.config import CrawlerConfig
from codecrawler.crawl.identity import resolve_identity
from codecrawler.models import DocumentRecord
from codecrawler.utils.files import read_legacy_text, split_filename

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Built:
    document: DocumentRecord


@dataclass(frozen=True, slots=True)
class Skipped:
    path: Path
    reason: str


BuildResult = Union[Built, Skipped]


def _timestamp(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def _creation_time(stat: os.stat_result) -> float:
    # st_birthtime is only reported on macOS/BSD and recent Windows builds
    return getattr(stat, "st_birthtime", stat.st_ctime)


def is_content_eligible(extension: str, size: int, config: CrawlerConfig) -> bool:
    return extension in config.extensions_to_read and size <= config.max_content_bytes


def build_document(path: Path, config: CrawlerConfig) -> DocumentRecord:
    """Read metadata and, when eligible, content of ``path``.

    Raises:
        OSError: if the metadata or the content cannot be read.
    """
    stat = path.stat()
    name, extension = split_filename(path.name)
    identity = resolve_identity(str(path))

    content = None
    if is_content_eligible(extension, stat.st_size, config):
        content = read_legacy_text(path)
    else:
        LOGGER.debug("Indexing only the name of %s", path)

    return DocumentRecord(
        id=uuid.uuid4().hex,
        name=name,
        extension=extension,
        path=str(path),
        size=stat.st_size,
        created_at=_timestamp(_creation_time(stat)),
        modified_at=_timestamp(stat.st_mtime),
        content=content,
        project=identity.project,
        version=identity.version,
    )


def try_build(path: Path, config: CrawlerConfig) -> BuildResult:
    """Build a document, turning any failure into a ``Skipped`` result."""
    try:
        return Built(build_document(path, config))
    except OSError as exc:
        LOGGER.error("Exception while reading file %s: %s", path, exc)
        return Skipped(path, str(exc))
    except Exception as exc:
        LOGGER.exception("Unexpected error while building document for %s", path)
        return Skipped(path, f"{type(exc).__name__}: {exc}")
