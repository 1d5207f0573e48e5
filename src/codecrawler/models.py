"""Core codecrawler data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List

DEFAULT_VERSION = "trunk"


@dataclass(frozen=True, slots=True)
class DocumentRecord:
    """One crawled file, ready to be written to the search backend.

    ``content`` is only set for files with a readable extension whose size
    does not exceed the configured ceiling.
    """

    id: str
    name: str
    extension: str
    path: str
    size: int
    created_at: datetime
    modified_at: datetime
    content: str | None = None
    project: str | None = None
    version: str = DEFAULT_VERSION


@dataclass(slots=True)
class BulkResult:
    """Outcome reported by the backend for one bulk write."""

    succeeded: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed
