"""Walk a source tree and feed accepted files to the search backend."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from codecrawler.config import CrawlerConfig
from codecrawler.crawl.builder import Built, try_build
from codecrawler.crawl.classifier import accepts
from codecrawler.exceptions import CrawlInProgressError
from codecrawler.index.batch import BatchAccumulator
from codecrawler.index.storage import SearchBackend
from codecrawler.index.writer import IndexWriter, PartialFailure, WriteOutcome
from codecrawler.utils.files import iter_regular_files

LOGGER = logging.getLogger(__name__)


class CrawlState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(slots=True)
class CrawlSession:
    """Working state of a single crawl invocation."""

    config: CrawlerConfig
    batch: BatchAccumulator
    failed_documents: int = 0
    skipped_files: int = 0

    def record(self, outcome: WriteOutcome | None) -> None:
        if isinstance(outcome, PartialFailure):
            self.failed_documents += len(outcome.failed)


class Crawler:
    """Coordinates classification, document building and bulk indexing.

    ``config_provider`` is called at the start of every crawl so settings are
    read fresh for each run. A crawler runs one crawl at a time.
    """

    def __init__(
        self,
        backend: SearchBackend,
        config_provider: Callable[[], CrawlerConfig] = CrawlerConfig,
        *,
        writer: IndexWriter | None = None,
    ) -> None:
        self.backend = backend
        self.config_provider = config_provider
        self.writer = writer or IndexWriter(backend)
        self._lock = threading.Lock()
        self._state = CrawlState.IDLE

    @property
    def state(self) -> CrawlState:
        return self._state

    def crawl(self, root: str | Path) -> None:
        """Index every accepted file under ``root``.

        Failures are only reported through the log.
        """
        if not self._lock.acquire(blocking=False):
            raise CrawlInProgressError("A crawl is already running")
        try:
            self._state = CrawlState.RUNNING
            try:
                session = self._new_session()
            except Exception:
                LOGGER.exception("Could not load crawler settings, crawl of %s skipped", root)
                return
            self._run(session, Path(root).expanduser().absolute())
        finally:
            self._state = CrawlState.IDLE
            self._lock.release()

    def clear_index(self) -> None:
        """Drop and recreate the backend index."""
        LOGGER.info("Clearing the search index")
        self.backend.reset()

    def _new_session(self) -> CrawlSession:
        config = self.config_provider()
        LOGGER.debug("exclude directories %s", sorted(config.directories_to_exclude))
        LOGGER.debug("exclude files : %s", sorted(config.files_to_exclude))
        LOGGER.debug("include files : %s", sorted(config.files_to_include))
        LOGGER.debug("exclude extensions : %s", sorted(config.extensions_to_exclude))
        LOGGER.debug("readable extensions : %s", sorted(config.extensions_to_read))
        batch = BatchAccumulator(config.batch_size, self.writer.write)
        return CrawlSession(config=config, batch=batch)

    def _run(self, session: CrawlSession, root: Path) -> None:
        LOGGER.debug("Start parsing files in %s", root)
        try:
            for path in iter_regular_files(root):
                if accepts(path, session.config):
                    self._add_file(session, path)
            # index whatever is left in the queue
            session.record(session.batch.flush())
        except OSError:
            LOGGER.exception("I/O error while crawling %s", root)
            self._log_abandoned(session)
        except Exception:
            LOGGER.exception("Unexpected error while crawling %s", root)
            self._log_abandoned(session)

        if session.skipped_files:
            LOGGER.warning("%d files could not be read", session.skipped_files)
        if session.failed_documents:
            LOGGER.error("%d files with indexing errors", session.failed_documents)
        LOGGER.debug("Finish parsing files in %s", root)

    def _add_file(self, session: CrawlSession, path: Path) -> None:
        LOGGER.debug("Parsing file : %s", path)
        result = try_build(path, session.config)
        if isinstance(result, Built):
            session.record(session.batch.add(result.document))
        else:
            session.skipped_files += 1

    @staticmethod
    def _log_abandoned(session: CrawlSession) -> None:
        if len(session.batch):
            LOGGER.error("Crawl aborted, %d documents were not indexed", len(session.batch))
