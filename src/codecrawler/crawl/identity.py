"""Infer project and version from trunk/branches directory layouts."""

from __future__ import annotations

import os
from typing import NamedTuple, Optional

from codecrawler.models import DEFAULT_VERSION

BRANCHES_MARKER = "/branches/"
TRUNK_MARKER = "/trunk/"


class Identity(NamedTuple):
    project: Optional[str]
    version: str


def _segment_before(path: str, position: int) -> str:
    return path[path.rfind("/", 0, position) + 1 : position]


def resolve_identity(path: str | os.PathLike[str]) -> Identity:
    """Resolve ``(project, version)`` from the textual layout of ``path``.

    ``.../proj/branches/v2/...`` gives ``("proj", "v2")`` and
    ``.../proj/trunk/...`` gives ``("proj", "trunk")``. Anything else is
    ``(None, "trunk")``. Only the first marker found is considered.
    """
    text = os.fspath(path)
    project = None
    version = DEFAULT_VERSION

    position = text.find(BRANCHES_MARKER)
    if position >= 0:
        start = position + len(BRANCHES_MARKER)
        end = text.find("/", start)
        version = text[start:] if end < 0 else text[start:end]
        if position > 1:
            project = _segment_before(text, position)
    elif "trunk" in text:
        position = text.find(TRUNK_MARKER)
        if position > 1:
            project = _segment_before(text, position)

    return Identity(project=project, version=version)
