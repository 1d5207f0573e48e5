"""Bulk writes to the search backend with failure isolation."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Collection, Dict, List, Union

from codecrawler.index.storage import SearchBackend
from codecrawler.models import DocumentRecord

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """How long to wait, and how often to retry, when the backend is down.

    The default makes a single attempt and then waits a fixed ten seconds
    before the crawl moves on.
    """

    max_attempts: int = 1
    delay: float = 10.0
    multiplier: float = 1.0
    max_delay: float = 300.0
    jitter: float = 0.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0 or self.jitter < 0 or self.max_delay < 0:
            raise ValueError("delay, max_delay and jitter must not be negative")
        if self.multiplier <= 0:
            raise ValueError("multiplier must be positive")

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        wait = min(self.delay * self.multiplier ** (attempt - 1), self.max_delay)
        if self.jitter:
            wait += random.uniform(0, self.jitter)
        return wait


@dataclass(frozen=True, slots=True)
class Written:
    count: int


@dataclass(frozen=True, slots=True)
class PartialFailure:
    written: int
    failed: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ResourceExhausted:
    paths: List[str]


@dataclass(frozen=True, slots=True)
class Unavailable:
    reason: str
    attempts: int
    dropped: int


WriteOutcome = Union[Written, PartialFailure, ResourceExhausted, Unavailable]


class IndexWriter:
    """Submits batches to a backend and classifies what happened."""

    def __init__(
        self,
        backend: SearchBackend,
        *,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.backend = backend
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep

    def write(self, batch: Collection[DocumentRecord]) -> WriteOutcome:
        documents = list(batch)
        LOGGER.debug("Indexing bulk of %d files", len(documents))

        attempt = 0
        while True:
            attempt += 1
            try:
                result = self.backend.bulk_save(documents)
            except MemoryError:
                paths = [document.path for document in documents]
                LOGGER.error("Out of memory while indexing one file of the following files:")
                LOGGER.error("%s", ",".join(paths))
                return ResourceExhausted(paths)
            except Exception as exc:
                wait = self.retry_policy.delay_for(attempt)
                LOGGER.error(
                    "Search backend is not available (attempt %d/%d), waiting %.1fs: %s",
                    attempt,
                    self.retry_policy.max_attempts,
                    wait,
                    exc,
                )
                self._sleep(wait)
                if attempt < self.retry_policy.max_attempts:
                    continue
                LOGGER.error("Dropping %d documents that could not be indexed", len(documents))
                return Unavailable(reason=str(exc), attempts=attempt, dropped=len(documents))

            if result.ok:
                return Written(len(result.succeeded))
            return self._report_failures(documents, result.failed, len(result.succeeded))

    def _report_failures(
        self, documents: List[DocumentRecord], failed: Dict[str, str], written: int
    ) -> PartialFailure:
        LOGGER.error("Exception while indexing files -- getting file's list...")
        for document in documents:
            if document.id in failed:
                LOGGER.error(
                    "Exception while indexing file %s, %s", document.path, failed[document.id]
                )
        return PartialFailure(written=written, failed=dict(failed))
