"""Command line interface for codecrawler."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.table import Table

from codecrawler.config import AppConfig, CrawlerConfig, load_crawler_config
from codecrawler.crawl.crawler import Crawler
from codecrawler.exceptions import BackendUnavailableError, ConfigError
from codecrawler.index.search import Searcher
from codecrawler.index.storage import SQLiteDocumentStore


console = Console()
app = typer.Typer(help="codecrawler - crawl source trees into a searchable index")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _resolve_db(db: Optional[Path]) -> Path:
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    return config.resolve_db_path(Path.cwd())


def _config_provider(
    config_file: Optional[Path], batch_size: Optional[int]
) -> Callable[[], CrawlerConfig]:
    """Build a provider that re-reads the settings file on every call."""

    def provide() -> CrawlerConfig:
        base = load_crawler_config(config_file) if config_file is not None else CrawlerConfig()
        return base.with_overrides(batch_size=batch_size)

    return provide


def _open_store(db_path: Path) -> SQLiteDocumentStore:
    try:
        return SQLiteDocumentStore(db_path)
    except BackendUnavailableError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc


def _clear(crawler: Crawler) -> None:
    try:
        crawler.clear_index()
    except BackendUnavailableError as exc:
        console.print(f"[red]Could not clear the index: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    console.print("Index cleared.")


@app.command()
def crawl(
    root: Path = typer.Argument(
        ..., help="Root directory to crawl.", exists=True, file_okay=False, resolve_path=True
    ),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="TOML file with a [crawler] table"
    ),
    batch_size: Optional[int] = typer.Option(None, help="Documents per bulk write"),
    clear: bool = typer.Option(False, "--clear", help="Reset the index before crawling"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Crawl a directory tree and index its files."""
    _setup_logging(verbose)
    provider = _config_provider(config_file, batch_size)
    try:
        provider()
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc

    resolved_db = _resolve_db(db)
    _ensure_db_parent(resolved_db)
    store = _open_store(resolved_db)
    crawler = Crawler(store, provider)
    try:
        if clear:
            _clear(crawler)
        console.print(f"Crawling [bold]{root}[/bold] into [bold]{resolved_db}[/bold]...")
        crawler.crawl(root)
        console.print(f"Documents in index: {store.count()}")
    finally:
        store.close()


@app.command()
def clear(
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Drop every document from the index."""
    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        console.print("[yellow]Database not found, nothing to clear.[/yellow]")
        return

    store = _open_store(resolved_db)
    try:
        _clear(Crawler(store))
    finally:
        store.close()


@app.command()
def search(
    query: str = typer.Argument(..., help="Text to look for in file names and content"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    project: Optional[str] = typer.Option(None, help="Only match this project"),
    version: Optional[str] = typer.Option(None, help="Only match this version"),
    top_k: int = typer.Option(10, help="Number of results to display"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Search indexed files."""
    _setup_logging(verbose)
    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        raise typer.BadParameter(f"Database not found: {resolved_db}")

    store = _open_store(resolved_db)
    try:
        results = Searcher(store).search(query, project=project, version=version, top_k=top_k)
    finally:
        store.close()

    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Project")
    table.add_column("Version")
    table.add_column("Path")
    table.add_column("Snippet")

    for result in results:
        table.add_row(result.project or "-", result.version, str(result.path), result.snippet)

    console.print(table)


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Start the HTTP API."""
    try:
        import uvicorn

        from codecrawler.web.app import app as web_app
    except ImportError as exc:  # pragma: no cover - optional extra
        raise typer.BadParameter(
            "The web extras are not installed. Install them with \"python -m pip install '.[web]'\""
        ) from exc

    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        console.print("[yellow]Warning: database not found, searches might fail.[/yellow]")

    console.print(f"Starting web API on http://{host}:{port} (database: {resolved_db})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
