"""
Tests for logging configuration.

setup_logging() replaces the root logger's handlers, so every test restores
the previous handlers and level afterwards.
"""
import logging
from logging.handlers import RotatingFileHandler

import pytest

from julius_client.LoggingSetup import LOG_FILE_NAME, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if handler not in handlers and type(handler) in (RotatingFileHandler, logging.StreamHandler):
            handler.close()
            root_logger.removeHandler(handler)
    root_logger.setLevel(level)


class TestLoggingConfiguration:
    """Test suite for logging configuration."""

    def test_log_directory_created(self, tmp_path):
        logs_dir = tmp_path / "nested" / "logs"

        setup_logging(logs_dir)

        assert logs_dir.is_dir()

    def test_log_file_receives_messages(self, tmp_path):
        logs_dir = tmp_path / "logs"
        setup_logging(logs_dir, verbose=True)

        logging.getLogger("julius_client.test").warning("Test log message")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = (logs_dir / LOG_FILE_NAME).read_text(encoding="utf-8")
        assert "Test log message" in content
        assert "[WARNING]" in content
        assert "julius_client.test" in content

    def test_console_handler_present_in_terminal(self, tmp_path):
        setup_logging(tmp_path, is_frozen=False)

        handler_types = [type(h) for h in logging.getLogger().handlers]
        assert RotatingFileHandler in handler_types
        assert logging.StreamHandler in handler_types

    def test_console_handler_absent_in_frozen_app(self, tmp_path):
        setup_logging(tmp_path, is_frozen=True)

        handler_types = [type(h) for h in logging.getLogger().handlers]
        assert handler_types == [RotatingFileHandler]

    def test_verbose_mode_sets_debug_level(self, tmp_path):
        setup_logging(tmp_path, verbose=True)
        assert logging.getLogger().level == logging.DEBUG

    def test_normal_mode_sets_warning_level(self, tmp_path):
        setup_logging(tmp_path, verbose=False)
        assert logging.getLogger().level == logging.WARNING

    def test_file_handler_rotates_at_10mb(self, tmp_path):
        setup_logging(tmp_path, is_frozen=True)

        file_handler = logging.getLogger().handlers[0]
        assert file_handler.maxBytes == 10 * 1024 * 1024
        assert file_handler.backupCount == 5

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path):
        setup_logging(tmp_path)
        setup_logging(tmp_path)

        assert len(logging.getLogger().handlers) == 2
