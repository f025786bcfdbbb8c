"""Unit tests for logging setup."""

import logging

import pytest

from poller.src.errors import LoggingSetupError
from poller.src.logging_setup import NOISY_LOGGERS, configure_logging

TEST_LOGGER = "poller.tests.logging"


@pytest.fixture
def isolated_logger():
    """Yield a logger name and strip its handlers afterwards."""
    noisy_levels = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    yield TEST_LOGGER
    logger = logging.getLogger(TEST_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    for name, level in noisy_levels.items():
        logging.getLogger(name).setLevel(level)


class TestConfigureLogging:
    """Test configure_logging."""

    def test_sets_level(self, isolated_logger) -> None:
        """The requested level should be applied."""
        logger = configure_logging("debug", logger_name=isolated_logger)
        assert logger.name == isolated_logger
        assert logger.level == logging.DEBUG

    def test_numeric_level(self, isolated_logger) -> None:
        """Numeric levels should be accepted as-is."""
        logger = configure_logging(logging.WARNING, logger_name=isolated_logger)
        assert logger.level == logging.WARNING

    def test_unknown_level(self, isolated_logger) -> None:
        """Unknown level names should raise LoggingSetupError."""
        with pytest.raises(LoggingSetupError, match="Unknown log level 'LOUD'"):
            configure_logging("LOUD", logger_name=isolated_logger)

    def test_repeated_calls_do_not_stack(self, isolated_logger) -> None:
        """Configuring twice should replace, not duplicate, handlers."""
        configure_logging("INFO", logger_name=isolated_logger)
        logger = configure_logging("INFO", logger_name=isolated_logger)
        assert len(logger.handlers) == 1

    def test_log_file(self, isolated_logger, tmp_path) -> None:
        """Records should be appended to the log file."""
        path = tmp_path / "poller.log"
        logger = configure_logging("INFO", log_file=path, logger_name=isolated_logger)
        assert len(logger.handlers) == 2

        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()

        assert "INFO - hello" in path.read_text()

    def test_unopenable_log_file(self, isolated_logger, tmp_path) -> None:
        """A log file in a missing directory should raise LoggingSetupError."""
        with pytest.raises(LoggingSetupError, match="Cannot open log file"):
            configure_logging(
                "INFO",
                log_file=tmp_path / "missing" / "poller.log",
                logger_name=isolated_logger,
            )

    def test_quiets_noisy_loggers(self, isolated_logger) -> None:
        """Third-party loggers should not go below WARNING."""
        configure_logging("DEBUG", logger_name=isolated_logger)
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
