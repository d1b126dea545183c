"""
Core Logging Interfaces

Lightweight logger interface with keyword context, metric helpers and
Python logging compatibility.
"""

import logging
from abc import ABC, abstractmethod
from enum import IntEnum


class LogLevel(IntEnum):
    """Log levels with numeric values matching the stdlib."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def parse(cls, value) -> "LogLevel":
        """Accept a level name ("warning") or a numeric level."""
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {value}") from None
        return cls(int(value))


class LoggerInterface(ABC):
    """
    Interface for module loggers.

    Components receive one of these as ``self.logger`` and pass structured
    context as keyword arguments instead of formatting it into the message.
    """

    @abstractmethod
    def debug(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def info(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def warning(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def error(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def critical(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def metric(self, name: str, value: float, **tags) -> None:
        """Log a numeric metric value."""
        pass

    @abstractmethod
    def latency(self, operation: str, duration_ms: float, **tags) -> None:
        """Convenience metric for timings."""
        pass

    @abstractmethod
    def counter(self, name: str, value: int = 1, **tags) -> None:
        pass

    @abstractmethod
    def set_context(self, **context) -> None:
        """Set persistent context for all records from this logger."""
        pass

    @abstractmethod
    def isEnabledFor(self, level: int) -> bool:
        """Python logging compatibility."""
        pass
