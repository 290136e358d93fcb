"""Tests for logging configuration."""
import logging
import pytest
from logging_setup import LOG_FILE_NAME, _ConsoleNoiseFilter, setup_logging


@pytest.fixture
def restore_root_logger():
    """Put the root logger's handlers back after the test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def make_record(name, level):
    return logging.LogRecord(name, level, __file__, 1, "message", None, None)


class TestSetupLogging:
    """Test setup_logging()."""

    def test_writes_log_file(self, tmp_path, restore_root_logger):
        log_file = setup_logging(tmp_path / "logs")
        logging.getLogger("task_storage").info("hello from storage")
        for h in logging.getLogger().handlers:
            h.flush()
        assert log_file == tmp_path / "logs" / LOG_FILE_NAME
        assert "hello from storage" in log_file.read_text(encoding="utf-8")

    def test_no_console_handler_by_default(self, tmp_path, restore_root_logger):
        setup_logging(tmp_path)
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.FileHandler)

    def test_console_handler_when_requested(self, tmp_path, restore_root_logger):
        setup_logging(tmp_path, console_level=logging.WARNING)
        assert len(logging.getLogger().handlers) == 2

    def test_repeated_setup_does_not_duplicate(self, tmp_path, restore_root_logger):
        setup_logging(tmp_path)
        setup_logging(tmp_path)
        assert len(logging.getLogger().handlers) == 1


class TestConsoleNoiseFilter:
    """Test the console filter."""

    def test_app_loggers_pass(self):
        noise_filter = _ConsoleNoiseFilter()
        assert noise_filter.filter(make_record("business_logic.task_registry", logging.DEBUG))
        assert noise_filter.filter(make_record("task_codec", logging.INFO))

    def test_third_party_only_errors(self):
        noise_filter = _ConsoleNoiseFilter()
        assert not noise_filter.filter(make_record("textual", logging.WARNING))
        assert noise_filter.filter(make_record("textual", logging.ERROR))
