# tests/test_utils_logger.py
"""Unit tests for the logger utility."""

import logging
import pytest
from pathlib import Path

from feature_effects.utils.logger import (
    get_logger,
    configure_logging,
    set_log_level,
    temporary_log_level,
    FeatureEffectsFormatter,
    FeatureEffectsLogger,
)

MODULE_LOGGER_NAME = f"feature_effects.{__name__.split('.')[-1]}"


def _reset():
    logging.getLogger("feature_effects").handlers.clear()
    logging.getLogger("feature_effects").filters.clear()
    logging.getLogger("feature_effects").setLevel(logging.NOTSET)
    FeatureEffectsLogger._configured = False
    FeatureEffectsLogger._loggers = {}


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before and after each test."""
    _reset()
    yield
    _reset()
    configure_logging()


class TestLogger:
    """Test cases for the logger utility."""

    def test_get_logger(self):
        """Test that get_logger returns a namespaced logger instance."""
        logger = get_logger(__name__)
        assert isinstance(logger, logging.Logger)
        assert logger.name == MODULE_LOGGER_NAME

    def test_get_logger_package_name_unchanged(self):
        assert get_logger("feature_effects.effects.engine").name == "feature_effects.effects.engine"
        assert get_logger("__main__").name == "feature_effects.main"

    def test_get_logger_is_cached(self):
        assert get_logger("feature_effects.grid") is get_logger("feature_effects.grid")

    def test_configure_logging_level(self):
        """Test that configure_logging sets the logging level."""
        configure_logging(level="DEBUG")
        assert logging.getLogger("feature_effects").level == logging.DEBUG

    def test_configure_only_once(self):
        configure_logging(level="DEBUG")
        configure_logging(level="ERROR")
        assert logging.getLogger("feature_effects").level == logging.DEBUG

    def test_configure_logging_file(self, tmp_path: Path):
        """Test that configure_logging sets up a file handler."""
        log_file = tmp_path / "logs" / "test.log"
        configure_logging(log_file=log_file)

        logger = get_logger(__name__)
        logger.warning("This is a test.")

        assert log_file.exists()
        with open(log_file, "r") as f:
            content = f.read()
            assert "This is a test." in content
            assert "WARNING" in content

    def test_temporary_log_level(self):
        """Test the temporary_log_level context manager."""
        configure_logging(level="INFO")
        assert logging.getLogger("feature_effects").level == logging.INFO

        with temporary_log_level("DEBUG"):
            assert logging.getLogger("feature_effects").level == logging.DEBUG

        assert logging.getLogger("feature_effects").level == logging.INFO

    def test_set_log_level(self):
        """Test that set_log_level changes the logging level."""
        configure_logging(level="INFO")
        assert logging.getLogger("feature_effects").level == logging.INFO

        set_log_level("WARNING")
        assert logging.getLogger("feature_effects").level == logging.WARNING
        for handler in logging.getLogger("feature_effects").handlers:
            assert handler.level == logging.WARNING

    def test_log_record(self, caplog):
        """Test that records reach handlers with the namespaced name."""
        configure_logging(level="INFO")
        logger = get_logger(__name__)
        logger.info("Test message")

        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.levelname == "INFO"
        assert record.name == MODULE_LOGGER_NAME
        assert record.getMessage() == "Test message"


class TestFormatter:
    """Test cases for FeatureEffectsFormatter."""

    def _record(self, **extra) -> logging.LogRecord:
        record = logging.LogRecord(
            "feature_effects.engine", logging.INFO, __file__, 1, "Sweeping %d points", (3,), None
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_basic_format(self):
        line = FeatureEffectsFormatter().format(self._record())
        assert "INFO" in line
        assert "feature_effects.engine" in line
        assert line.endswith("Sweeping 3 points")

    def test_context_and_duration(self):
        line = FeatureEffectsFormatter().format(self._record(context={'feature': 'age'}, duration=1.5))
        assert 'Context: {"feature": "age"}' in line
        assert "Duration: 1.500s" in line

    def test_simple_style_drops_context(self):
        line = FeatureEffectsFormatter(include_context=False).format(self._record(context={'feature': 'age'}))
        assert "Context" not in line


if __name__ == "__main__":
    pytest.main([__file__])
