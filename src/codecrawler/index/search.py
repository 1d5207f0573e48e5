"""Search interface over indexed documents."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from codecrawler.index.storage import SQLiteDocumentStore

SNIPPET_CHARS = 180


@dataclass(slots=True)
class SearchResult:
    path: Path
    name: str
    extension: str
    project: Optional[str]
    version: str
    size: int
    snippet: str


def make_snippet(content: str | None, query: str, *, width: int = SNIPPET_CHARS) -> str:
    """Return the part of ``content`` around the first match of ``query``."""
    if not content:
        return ""
    position = content.lower().find(query.lower())
    start = max(position - width // 3, 0) if position >= 0 else 0
    return content[start : start + width].replace("\n", " ")


class Searcher:
    """High-level API to query the document store."""

    def __init__(self, store: SQLiteDocumentStore) -> None:
        self.store = store

    def search(
        self,
        query: str,
        *,
        project: str | None = None,
        version: str | None = None,
        top_k: int = 10,
    ) -> List[SearchResult]:
        rows = self.store.search(query, project=project, version=version, top_k=top_k)
        return [
            SearchResult(
                path=Path(row["path"]),
                name=row["name"],
                extension=row["extension"],
                project=row["project"],
                version=row["version"],
                size=row["size"],
                snippet=make_snippet(row["content"], query),
            )
            for row in rows
        ]
