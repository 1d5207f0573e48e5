"""Tests for BatchAccumulator."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from codecrawler.index.batch import BatchAccumulator
from codecrawler.index.writer import Written


@pytest.fixture
def sink() -> Mock:
    mock = Mock()
    mock.side_effect = lambda documents: Written(len(documents))
    return mock


class TestBatchAccumulator:
    """Test threshold-triggered and final flushes."""

    def test_rejects_invalid_batch_size(self, sink: Mock) -> None:
        with pytest.raises(ValueError):
            BatchAccumulator(0, sink)

    def test_add_below_threshold_does_not_flush(self, sink: Mock, make_document) -> None:
        batch = BatchAccumulator(3, sink)

        for _ in range(3):
            assert batch.add(make_document()) is None

        sink.assert_not_called()
        assert len(batch) == 3
        assert batch.should_flush()

    def test_add_flushes_full_batch_first(self, sink: Mock, make_document) -> None:
        batch = BatchAccumulator(2, sink)
        first, second, third = make_document(), make_document(), make_document()

        batch.add(first)
        batch.add(second)
        outcome = batch.add(third)

        assert outcome == Written(2)
        sink.assert_called_once()
        assert {d.id for d in sink.call_args[0][0]} == {first.id, second.id}
        assert batch.documents == [third]

    def test_flush_clears_buffer(self, sink: Mock, make_document) -> None:
        batch = BatchAccumulator(10, sink)
        batch.add(make_document())

        outcome = batch.flush()

        assert outcome == Written(1)
        assert len(batch) == 0

    def test_flush_empty_is_noop(self, sink: Mock) -> None:
        batch = BatchAccumulator(10, sink)

        assert batch.flush() is None
        sink.assert_not_called()

    def test_same_document_kept_once(self, sink: Mock, make_document) -> None:
        batch = BatchAccumulator(10, sink)
        document = make_document()

        batch.add(document)
        batch.add(document)

        assert len(batch) == 1

    def test_buffer_cleared_even_when_sink_reports_failure(self, make_document) -> None:
        failing_sink = Mock(return_value=None)
        batch = BatchAccumulator(1, failing_sink)
        batch.add(make_document())

        batch.flush()

        assert len(batch) == 0

    def test_150_documents_with_threshold_100(self, sink: Mock, make_document) -> None:
        """Two bulk writes of 100 and 50 documents, empty buffer afterwards."""
        batch = BatchAccumulator(100, sink)

        for _ in range(150):
            batch.add(make_document())
        batch.flush()

        sizes = [len(call.args[0]) for call in sink.call_args_list]
        assert sizes == [100, 50]
        assert len(batch) == 0
