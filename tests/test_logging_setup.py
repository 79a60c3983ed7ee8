"""
Tests for the service logging setup.
"""
import logging
from logging.handlers import RotatingFileHandler

from reel_analyzer.logging_setup import setup_logging


def test_writes_rotating_log_file(tmp_path):
    logger = setup_logging("debug", str(tmp_path / "logs"))

    file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
    assert logger.level == logging.DEBUG
    assert len(file_handlers) == 1
    assert file_handlers[0].maxBytes == 5 * 1024 * 1024
    assert file_handlers[0].backupCount == 3

    file_handlers[0].flush()
    assert "Logging initialized" in (tmp_path / "logs" / "analyzer.log").read_text()


def test_repeated_setup_does_not_stack_handlers(tmp_path):
    setup_logging("INFO", str(tmp_path))
    logger = setup_logging("INFO", str(tmp_path))

    assert len(logger.handlers) == 2
