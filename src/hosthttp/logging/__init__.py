"""
Logging for the HTTP module.

Usage:
    from hosthttp.logging import get_logger

    logger = get_logger('hosthttp.session')
    logger.debug("Request completed", method="GET", status=200)
    logger.latency("request", 12.5, method="GET")
"""

from .interfaces import LogLevel, LoggerInterface
from .logger import ContextLogger, LoggingTimer
from .factory import LoggerFactory, get_logger, configure_logging
from .structs import LoggingConfig

__all__ = [
    'LogLevel',
    'LoggerInterface',
    'ContextLogger',
    'LoggingTimer',
    'LoggerFactory',
    'get_logger',
    'configure_logging',
    'LoggingConfig',
]
