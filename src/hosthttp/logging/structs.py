"""
Logging Configuration Structures

Structured logging configuration using msgspec.Struct.
"""

from typing import Any, Dict, Optional

from msgspec import Struct

VALID_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
VALID_ENVIRONMENTS = frozenset({"dev", "prod", "test", "staging"})


class LoggingConfig(Struct, frozen=True):
    """
    Logging configuration.

    Attributes:
        environment: Environment name (dev, prod, test, staging)
        min_level: Records below this level are dropped
        include_context: Append keyword context to messages as key=value pairs
        max_message_length: Truncate rendered messages beyond this length
        default_context: Context attached to every record
    """
    environment: str = "dev"
    min_level: str = "INFO"
    include_context: bool = True
    max_message_length: int = 1000
    default_context: Optional[Dict[str, Any]] = None

    def validate(self) -> None:
        if self.environment not in VALID_ENVIRONMENTS:
            raise ValueError(f"Invalid environment: {self.environment}")
        if self.min_level.upper() not in VALID_LEVELS:
            raise ValueError(f"Invalid log level: {self.min_level}")
        if self.max_message_length <= 0:
            raise ValueError("max_message_length must be positive")

    @classmethod
    def default_production(cls) -> "LoggingConfig":
        return cls(environment="prod", min_level="WARNING", include_context=True)
