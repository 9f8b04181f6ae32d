"""Tests for logging configuration."""

from __future__ import annotations

import logging

import pytest

from pebbles.core.utils import logging as pebbles_logging
from pebbles.core.utils.logging import get_log_file_path, get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for h in root.handlers[:]:
        if h not in handlers:
            h.close()
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


def test_setup_logging_writes_rotating_file(tmp_path, restore_root_logger) -> None:
    setup_logging(level="warning", log_dir=tmp_path)
    root = restore_root_logger

    assert get_log_file_path() == tmp_path / "pebbles.log"
    assert len(root.handlers) == 2
    console = next(h for h in root.handlers if not isinstance(h, logging.handlers.RotatingFileHandler))
    assert console.level == logging.WARNING

    get_logger("pebbles.test").debug("debug goes to the file only")
    for h in root.handlers:
        h.flush()
    assert "debug goes to the file only" in (tmp_path / "pebbles.log").read_text(encoding="utf-8")


def test_setup_logging_twice_does_not_duplicate_handlers(tmp_path, restore_root_logger) -> None:
    setup_logging(log_dir=tmp_path)
    setup_logging(log_dir=tmp_path)
    assert len(restore_root_logger.handlers) == 2


def test_get_logger_default_name() -> None:
    assert get_logger().name == "pebbles"
    assert get_logger("x.y").name == "x.y"
    assert pebbles_logging.get_logger is get_logger
