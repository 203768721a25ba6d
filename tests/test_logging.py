from __future__ import annotations

import logging
from pathlib import Path

from jsdocmd.logging import configure_logging, get_logger


def test_get_logger_is_namespaced() -> None:
    assert get_logger().name == "jsdocmd"
    assert get_logger("pipeline").name == "jsdocmd.pipeline"


def test_configure_logging_does_not_duplicate_handlers(restore_logger) -> None:
    configure_logging()
    logger = configure_logging(verbose=True)

    assert logger is restore_logger
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_configure_logging_writes_log_file(restore_logger, tmp_path: Path) -> None:
    log_file = tmp_path / "jsdocmd.log"
    configure_logging(log_file=log_file)

    get_logger("pipeline").info("Rendered doc:pkg")
    for handler in restore_logger.handlers:
        handler.flush()

    assert "jsdocmd.pipeline: Rendered doc:pkg" in log_file.read_text(encoding="utf-8")
