"""FastAPI application exposing crawl, reset and search over HTTP."""

from __future__ import annotations

import asyncio
import logging
import threading
from pathlib import Path
from typing import Any, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from codecrawler.config import AppConfig, CrawlerConfig
from codecrawler.crawl.crawler import Crawler
from codecrawler.exceptions import BackendUnavailableError
from codecrawler.index.search import Searcher, SearchResult
from codecrawler.index.storage import SQLiteDocumentStore

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="codecrawler API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# One crawl at a time per process
_CRAWL_LOCK = threading.Lock()


class CrawlPayload(BaseModel):
    path: str
    db: Path | None = None
    clear: bool = False
    batch_size: int | None = None


class SearchPayload(BaseModel):
    query: str
    db: Path | None = None
    project: str | None = None
    version: str | None = None
    top_k: int = 10


def _resolve_db_path(db: Path | None) -> Path:
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    return config.resolve_db_path(Path.cwd())


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _open_store(db_path: Path) -> SQLiteDocumentStore:
    try:
        return SQLiteDocumentStore(db_path)
    except BackendUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _run_crawl_job(root: Path, payload: CrawlPayload, resolved_db: Path) -> dict[str, Any]:
    config = CrawlerConfig().with_overrides(batch_size=payload.batch_size)
    store = _open_store(resolved_db)
    try:
        crawler = Crawler(store, lambda: config)
        if payload.clear:
            crawler.clear_index()
        crawler.crawl(root)
        return {"documents": store.count()}
    finally:
        store.close()


@app.post("/crawler")
async def start_crawl(payload: CrawlPayload) -> dict[str, Any]:
    clean_path = payload.path.strip().replace("\r", "").replace("\n", "")
    if not clean_path or "\0" in clean_path:
        raise HTTPException(status_code=400, detail="Invalid path")
    if payload.batch_size is not None and payload.batch_size < 1:
        raise HTTPException(status_code=400, detail="batch_size must be at least 1")

    root = Path(clean_path).expanduser()
    if not root.exists():
        raise HTTPException(status_code=404, detail=f"Path not found: {clean_path}")
    if not root.is_dir():
        raise HTTPException(status_code=400, detail=f"Path must be a directory: {clean_path}")

    resolved_db = _resolve_db_path(payload.db)
    _ensure_db_parent(resolved_db)

    if not _CRAWL_LOCK.acquire(blocking=False):
        raise HTTPException(status_code=409, detail="A crawl is already running")
    try:
        stats = await asyncio.to_thread(_run_crawl_job, root, payload, resolved_db)
    finally:
        _CRAWL_LOCK.release()

    return {"status": "ok", "db": str(resolved_db), "stats": stats}


@app.delete("/index")
async def clear_index(db: Path | None = None) -> dict[str, str]:
    resolved_db = _resolve_db_path(db)
    if not resolved_db.exists():
        raise HTTPException(status_code=404, detail="Database not found")

    store = _open_store(resolved_db)
    try:
        Crawler(store).clear_index()
    except BackendUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    finally:
        store.close()
    return {"status": "ok"}


@app.post("/search")
async def search_documents(payload: SearchPayload) -> dict[str, List[SearchResult]]:
    query = payload.query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Empty query")

    top_k = max(1, min(payload.top_k, 100))

    resolved_db = _resolve_db_path(payload.db)
    if not resolved_db.exists():
        raise HTTPException(
            status_code=404,
            detail=f"Database not found at {resolved_db}. Crawl a directory first.",
        )

    store = _open_store(resolved_db)
    try:
        results = Searcher(store).search(
            query, project=payload.project, version=payload.version, top_k=top_k
        )
    finally:
        store.close()
    return {"results": results}


@app.get("/documents/stats")
async def document_stats(db: Path | None = None) -> dict[str, Any]:
    resolved_db = _resolve_db_path(db)
    if not resolved_db.exists():
        return {
            "stats": {
                "document_count": 0,
                "content_count": 0,
                "project_count": 0,
                "total_size_bytes": 0,
            }
        }

    store = _open_store(resolved_db)
    try:
        stats = store.get_stats()
    finally:
        store.close()
    return {"stats": stats}
