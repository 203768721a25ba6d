from __future__ import annotations

import logging
from pathlib import Path

import pytest

from jsdocmd.parsing.source import Comment
from tests._fixtures.source_tree import SourceTree


@pytest.fixture
def source_tree(tmp_path: Path) -> SourceTree:
    """Provide a source tree rooted at the pytest tmp_path."""
    return SourceTree(tmp_path)


@pytest.fixture
def make_comment():
    """Build a Comment from raw comment text."""

    def _make(text: str, line: int = 1) -> Comment:
        return Comment(text=text, start_byte=0, end_byte=len(text.encode("utf-8")), line=line)

    return _make


@pytest.fixture
def restore_logger():
    """Undo configure_logging so later tests see propagating records again."""
    logger = logging.getLogger("jsdocmd")
    level, propagate = logger.level, logger.propagate
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)
    logger.propagate = propagate
