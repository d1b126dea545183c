"""
Unit tests for the module logging layer.
"""

import logging
from unittest.mock import Mock

import pytest

from hosthttp.logging import (
    ContextLogger, LoggerFactory, LoggingConfig, LoggingTimer, LogLevel, configure_logging, get_logger
)


@pytest.fixture
def restore_logging():
    yield
    configure_logging(LoggingConfig(environment="test", min_level="WARNING"))


class TestLogLevel:

    def test_parse(self):
        assert LogLevel.parse("warning") is LogLevel.WARNING
        assert LogLevel.parse(logging.ERROR) is LogLevel.ERROR

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            LogLevel.parse("loud")


class TestContextLogger:

    def test_context_rendered(self, caplog):
        logger = ContextLogger("hosthttp.test.render", LoggingConfig(min_level="DEBUG"))
        logger.set_context(component="session")

        with caplog.at_level(logging.DEBUG, logger="hosthttp.test.render"):
            logger.info("Request completed", status=200)

        assert caplog.records[-1].getMessage() == "Request completed | component=session status=200"

    def test_min_level_filters(self, caplog):
        logger = ContextLogger("hosthttp.test.filter", LoggingConfig(min_level="WARNING"))

        with caplog.at_level(logging.DEBUG, logger="hosthttp.test.filter"):
            logger.info("dropped")
            logger.warning("kept")

        assert [record.getMessage() for record in caplog.records] == ["kept"]
        assert not logger.isEnabledFor(logging.INFO)

    def test_truncation(self, caplog):
        config = LoggingConfig(min_level="DEBUG", include_context=False, max_message_length=5)
        logger = ContextLogger("hosthttp.test.truncate", config)

        with caplog.at_level(logging.DEBUG, logger="hosthttp.test.truncate"):
            logger.error("abcdefgh", ignored=True)

        assert caplog.records[-1].getMessage() == "abcde..."

    def test_latency_is_debug_metric(self, caplog):
        logger = ContextLogger("hosthttp.test.metric", LoggingConfig(min_level="DEBUG"))

        with caplog.at_level(logging.DEBUG, logger="hosthttp.test.metric"):
            logger.latency("request", 1.23456, method="GET")

        record = caplog.records[-1]
        assert record.levelno == logging.DEBUG
        assert record.getMessage() == "metric request_latency_ms=1.235 | method=GET"

    def test_counter_is_debug_metric(self, caplog):
        logger = ContextLogger("hosthttp.test.counter", LoggingConfig(min_level="DEBUG"))

        with caplog.at_level(logging.DEBUG, logger="hosthttp.test.counter"):
            logger.counter("batch_failures", 2)

        assert caplog.records[-1].levelno == logging.DEBUG
        assert caplog.records[-1].getMessage() == "metric batch_failures_count=2.0"

    def test_rejects_foreign_config(self):
        with pytest.raises(TypeError):
            ContextLogger("hosthttp.test.bad", {"min_level": "DEBUG"})


class TestLoggerFactory:

    def test_loggers_are_cached(self):
        assert get_logger("hosthttp.test.cached") is get_logger("hosthttp.test.cached")

    def test_configure_replaces_cache(self, restore_logging):
        before = get_logger("hosthttp.test.configure")
        configure_logging(LoggingConfig(environment="test", min_level="DEBUG"))
        after = get_logger("hosthttp.test.configure")

        assert before is not after
        assert after.min_level is LogLevel.DEBUG

    def test_configure_validates(self):
        with pytest.raises(ValueError):
            configure_logging(LoggingConfig(environment="moon"))

    def test_explicit_config_not_cached(self):
        config = LoggingConfig(min_level="ERROR")
        logger = LoggerFactory.create_logger("hosthttp.test.explicit", config)

        assert logger.config is config
        assert get_logger("hosthttp.test.explicit") is not logger


class TestLoggingTimer:

    def test_records_latency(self):
        logger = Mock()

        with LoggingTimer(logger, "fetch", url="http://x/") as timer:
            pass

        assert timer.elapsed_ms >= 0
        logger.latency.assert_called_once()
        assert logger.latency.call_args.args[0] == "fetch"
        logger.error.assert_not_called()

    def test_logs_failure(self):
        logger = Mock()

        with pytest.raises(KeyError):
            with LoggingTimer(logger, "fetch"):
                raise KeyError("x")

        logger.error.assert_called_once_with("fetch failed", error_type="KeyError")
