"""
Context Logger Implementation

Logger with persistent keyword context and metric helpers, emitting through
the stdlib logger of the same name so host applications keep control of
handlers and formatting.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional

from .interfaces import LoggerInterface, LogLevel
from .structs import LoggingConfig


class ContextLogger(LoggerInterface):
    """
    Named logger with keyword context.

    Records below the configured minimum level are dropped before any
    formatting happens. Metrics are DEBUG records tagged ``metric``.
    """

    def __init__(self, name: str, config: LoggingConfig):
        if not isinstance(config, LoggingConfig):
            raise TypeError(f"Expected LoggingConfig, got {type(config)}")

        self.name = name
        self.config = config
        self.min_level = LogLevel.parse(config.min_level)
        self.context: Dict[str, Any] = dict(config.default_context or {})
        self._py_logger = logging.getLogger(name)

    def _render(self, msg: str, context: Dict[str, Any]) -> str:
        if self.config.include_context and context:
            pairs = " ".join(f"{key}={value}" for key, value in context.items())
            msg = f"{msg} | {pairs}"
        if len(msg) > self.config.max_message_length:
            msg = msg[:self.config.max_message_length] + "..."
        return msg

    def _log(self, level: LogLevel, msg: str, **context) -> None:
        if level < self.min_level or not self._py_logger.isEnabledFor(level):
            return
        full_context = {**self.context, **context}
        self._py_logger.log(int(level), self._render(str(msg), full_context))

    def debug(self, msg: str, **context) -> None:
        self._log(LogLevel.DEBUG, msg, **context)

    def info(self, msg: str, **context) -> None:
        self._log(LogLevel.INFO, msg, **context)

    def warning(self, msg: str, **context) -> None:
        self._log(LogLevel.WARNING, msg, **context)

    def error(self, msg: str, **context) -> None:
        self._log(LogLevel.ERROR, msg, **context)

    def critical(self, msg: str, **context) -> None:
        self._log(LogLevel.CRITICAL, msg, **context)

    def metric(self, name: str, value: float, **tags) -> None:
        self._log(LogLevel.DEBUG, f"metric {name}={value}", **tags)

    def latency(self, operation: str, duration_ms: float, **tags) -> None:
        self.metric(f"{operation}_latency_ms", round(duration_ms, 3), **tags)

    def counter(self, name: str, value: int = 1, **tags) -> None:
        self.metric(f"{name}_count", float(value), **tags)

    def set_context(self, **context) -> None:
        self.context.update(context)

    def isEnabledFor(self, level: int) -> bool:
        return level >= self.min_level and self._py_logger.isEnabledFor(level)


class LoggingTimer:
    """Context manager for timing operations with automatic logging."""

    def __init__(self, logger: LoggerInterface, operation: str, **tags):
        self.logger = logger
        self.operation = operation
        self.tags = tags
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.perf_counter()
        self.logger.latency(self.operation, self.elapsed_ms, **self.tags)

        if exc_type is not None and not issubclass(exc_type, asyncio.CancelledError):
            self.logger.error(f"{self.operation} failed", error_type=exc_type.__name__, **self.tags)

    @property
    def elapsed_ms(self) -> float:
        if self.start_time is None:
            return 0.0
        end_time = self.end_time or time.perf_counter()
        return (end_time - self.start_time) * 1000
