"""Shared fixtures for codecrawler tests."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest

from codecrawler.models import DocumentRecord


@pytest.fixture
def make_document():
    """Factory for DocumentRecord instances with sensible defaults."""

    def factory(path: str = "/src/proj/trunk/Main.java", **overrides) -> DocumentRecord:
        values = {
            "id": uuid.uuid4().hex,
            "name": "Main",
            "extension": "java",
            "path": path,
            "size": 42,
            "created_at": datetime(2016, 4, 30, tzinfo=timezone.utc),
            "modified_at": datetime(2016, 5, 1, tzinfo=timezone.utc),
            "content": "class Main {}",
            "project": "proj",
            "version": "trunk",
        }
        values.update(overrides)
        return DocumentRecord(**values)

    return factory
