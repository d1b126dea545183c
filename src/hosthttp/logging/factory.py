"""
Logging Factory

Creates and caches named loggers from a LoggingConfig. Components call
``get_logger(__name__)`` and keep the result as ``self.logger``.
"""

import os
from typing import Dict, Optional

from .interfaces import LoggerInterface
from .logger import ContextLogger
from .structs import LoggingConfig


class LoggerFactory:
    """Logging factory - trust config, fail fast."""

    _cached_loggers: Dict[str, LoggerInterface] = {}
    _default_config: Optional[LoggingConfig] = None

    @classmethod
    def create_logger(cls, name: str, config: Optional[LoggingConfig] = None) -> LoggerInterface:
        if config is None and name in cls._cached_loggers:
            return cls._cached_loggers[name]

        logger = ContextLogger(name, config or cls.get_default_config())
        if config is None:
            cls._cached_loggers[name] = logger
        return logger

    @classmethod
    def get_default_config(cls) -> LoggingConfig:
        if cls._default_config is None:
            environment = os.getenv('ENVIRONMENT', 'dev')
            if environment == 'prod':
                cls._default_config = LoggingConfig.default_production()
            elif environment in ('test', 'staging'):
                cls._default_config = LoggingConfig(environment=environment)
            else:
                cls._default_config = LoggingConfig()
        return cls._default_config

    @classmethod
    def configure(cls, config: LoggingConfig) -> None:
        """Install a new default config; loggers created earlier are dropped from the cache."""
        config.validate()
        cls._cached_loggers.clear()
        cls._default_config = config

    @classmethod
    def clear_cache(cls) -> None:
        cls._cached_loggers.clear()
        cls._default_config = None


def get_logger(name: str) -> LoggerInterface:
    """Get cached logger instance."""
    return LoggerFactory.create_logger(name)


def configure_logging(config: LoggingConfig) -> None:
    LoggerFactory.configure(config)
