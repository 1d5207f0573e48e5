"""SQLite-backed document store used as the search backend."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, List, Protocol

from codecrawler.exceptions import BackendUnavailableError
from codecrawler.models import BulkResult, DocumentRecord


class SearchBackend(Protocol):
    """Capabilities the crawler needs from a search backend."""

    def bulk_save(self, documents: Iterable[DocumentRecord]) -> BulkResult:
        ...

    def reset(self) -> None:
        ...


# Errors that reject a single row without compromising the transaction
_ROW_ERRORS = (sqlite3.IntegrityError, sqlite3.InterfaceError, sqlite3.DataError)


class SQLiteDocumentStore:
    """Persistence layer for crawled documents."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        try:
            self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL;")
            self._conn.execute("PRAGMA synchronous=NORMAL;")
            self._ensure_schema()
        except sqlite3.Error as exc:
            raise BackendUnavailableError(f"Cannot open database {self.db_path}: {exc}") from exc

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    extension TEXT NOT NULL,
                    path TEXT NOT NULL,
                    content TEXT,
                    project TEXT,
                    version TEXT NOT NULL,
                    size INTEGER NOT NULL CHECK (size >= 0),
                    created_at TEXT NOT NULL,
                    modified_at TEXT NOT NULL,
                    indexed_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_documents_path ON documents(path)")
            conn.execute(
                """CREATE INDEX IF NOT EXISTS idx_documents_project_version
                    ON documents(project, version)
                """
            )

    def bulk_save(self, documents: Iterable[DocumentRecord]) -> BulkResult:
        """Insert or replace documents in a single transaction.

        Rows rejected by the database are reported in ``BulkResult.failed``
        keyed by document id; the remaining rows are still committed.

        Raises:
            BackendUnavailableError: if the database cannot be written at all.
        """
        result = BulkResult()
        try:
            with self.transaction() as conn:
                for document in documents:
                    try:
                        conn.execute(
                            """
                            INSERT OR REPLACE INTO documents(
                                id, name, extension, path, content, project,
                                version, size, created_at, modified_at
                            )
                            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                            """,
                            (
                                document.id,
                                document.name,
                                document.extension,
                                document.path,
                                document.content,
                                document.project,
                                document.version,
                                document.size,
                                _isoformat(document.created_at),
                                _isoformat(document.modified_at),
                            ),
                        )
                    except _ROW_ERRORS as exc:
                        result.failed[document.id] = str(exc)
                    else:
                        result.succeeded.append(document.id)
        except sqlite3.Error as exc:
            raise BackendUnavailableError(str(exc)) from exc
        return result

    def reset(self) -> None:
        """Drop every document and recreate the schema."""
        try:
            with self.transaction() as conn:
                conn.execute("DROP TABLE IF EXISTS documents")
            self._ensure_schema()
        except sqlite3.Error as exc:
            raise BackendUnavailableError(str(exc)) from exc

    def count(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0]

    def get_stats(self) -> dict:
        row = self._conn.execute(
            """
            SELECT
                COUNT(*) AS document_count,
                COUNT(content) AS content_count,
                COUNT(DISTINCT project) AS project_count,
                COALESCE(SUM(size), 0) AS total_size_bytes
            FROM documents
            """
        ).fetchone()
        return dict(row)

    def search(
        self,
        text: str,
        *,
        project: str | None = None,
        version: str | None = None,
        top_k: int = 10,
    ) -> List[dict]:
        """Case-insensitive substring search over file names and content."""
        pattern = f"%{_escape_like(text)}%"
        clauses = ["(name LIKE ? ESCAPE '\\' OR content LIKE ? ESCAPE '\\')"]
        params: list = [pattern, pattern]
        if project is not None:
            clauses.append("project = ?")
            params.append(project)
        if version is not None:
            clauses.append("version = ?")
            params.append(version)
        params.append(top_k)
        where = " AND ".join(clauses)

        rows = self._conn.execute(
            f"""
            SELECT id, name, extension, path, content, project, version, size
            FROM documents
            WHERE {where}
            ORDER BY path
            LIMIT ?
            """,
            params,
        ).fetchall()
        return [dict(row) for row in rows]


def _isoformat(value: datetime) -> str:
    return value.isoformat()


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
