"""Buffer documents between the crawl and the index writer."""

from __future__ import annotations

from typing import Callable, Dict, List

from codecrawler.index.writer import WriteOutcome
from codecrawler.models import DocumentRecord


class BatchAccumulator:
    """Collects documents and hands them to ``sink`` in bulks of ``batch_size``.

    The buffer is keyed by document id, so adding the same record twice keeps
    a single copy. It is always emptied after a flush, whatever the outcome.
    """

    def __init__(
        self, batch_size: int, sink: Callable[[List[DocumentRecord]], WriteOutcome]
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.batch_size = batch_size
        self._sink = sink
        self._documents: Dict[str, DocumentRecord] = {}

    def __len__(self) -> int:
        return len(self._documents)

    @property
    def documents(self) -> List[DocumentRecord]:
        return list(self._documents.values())

    def should_flush(self) -> bool:
        return len(self._documents) >= self.batch_size

    def add(self, document: DocumentRecord) -> WriteOutcome | None:
        """Add a document, flushing first when the buffer is full.

        Returns the outcome of the triggered flush, if any.
        """
        outcome = self.flush() if self.should_flush() else None
        self._documents[document.id] = document
        return outcome

    def flush(self) -> WriteOutcome | None:
        if not self._documents:
            return None
        documents = list(self._documents.values())
        self._documents.clear()
        return self._sink(documents)
