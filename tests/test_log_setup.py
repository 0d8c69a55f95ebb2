"""Tests for logging configuration."""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from log_setup import LOG_FILENAME, configure_logging


@pytest.fixture
def root_logger(monkeypatch):
    root = logging.getLogger()
    level = root.level
    monkeypatch.setattr(root, "handlers", [])
    yield root
    for h in list(root.handlers):
        h.close()
    root.setLevel(level)


def test_console_and_rotating_file(tmp_path, root_logger):
    configure_logging("debug", tmp_path / "logs")

    assert root_logger.level == logging.DEBUG
    files = [h for h in root_logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(files) == 1
    assert files[0].maxBytes == 1024 * 1024

    logging.getLogger("supervisor").info("hello")
    files[0].flush()
    assert "supervisor: hello" in (tmp_path / "logs" / LOG_FILENAME).read_text(encoding="utf-8")


def test_unknown_level_defaults_to_info(root_logger):
    configure_logging("chatty")

    assert root_logger.level == logging.INFO
    assert len(root_logger.handlers) == 1
