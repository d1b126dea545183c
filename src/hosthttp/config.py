"""
HTTP Module Configuration

YAML-based configuration with environment variable substitution, converted
into frozen msgspec structs.

Example hosthttp.yaml:

    http:
      max_concurrent: 32
      max_redirects: 10
      user_agent: "${HOSTHTTP_USER_AGENT:hosthttp/1.0}"
    logging:
      min_level: INFO

Usage:
    from hosthttp.config import load_config

    config = load_config()                  # first hosthttp.yaml found, else defaults
    config = load_config("conf/http.yaml")  # explicit file, must exist
    module = HttpModule(config.http)
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import msgspec
import yaml
from msgspec import Struct

from .exceptions import ConfigurationError
from .logging import LoggingConfig, get_logger

CONFIG_FILE_NAME = "hosthttp.yaml"

_ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')


class HttpModuleConfig(Struct, frozen=True):
    """
    Per-module HTTP settings.

    Attributes:
        max_concurrent: Upper bound on batch items in flight at once
        follow_redirects: Follow redirects automatically
        max_redirects: Redirect hops before the request fails
        persist_cookies: Keep a cookie jar for the module lifetime
        unsafe_cookies: Accept cookies from IP-address hosts
        expose_headers_all: Add a headers_all name -> list table to responses
        default_headers: Headers sent with every request unless overridden
        user_agent: User-Agent sent with every request unless overridden
    """
    max_concurrent: int = 50
    follow_redirects: bool = True
    max_redirects: int = 10
    persist_cookies: bool = True
    unsafe_cookies: bool = True
    expose_headers_all: bool = False
    default_headers: Optional[Dict[str, str]] = None
    user_agent: Optional[str] = None

    def validate(self) -> None:
        if self.max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        if self.max_redirects < 0:
            raise ValueError("max_redirects cannot be negative")


class ModuleConfig(Struct, frozen=True):
    """Complete configuration file contents."""
    http: HttpModuleConfig = msgspec.field(default_factory=HttpModuleConfig)
    logging: LoggingConfig = msgspec.field(default_factory=LoggingConfig)

    def validate(self) -> None:
        self.http.validate()
        self.logging.validate()


def substitute_env_vars(content: str) -> str:
    """
    Substitute environment variables in configuration content.

    Supports:
    - ${VAR_NAME} - environment variable, empty when unset
    - ${VAR_NAME:default} - environment variable with default value
    """
    def replace_var(match):
        var_expr = match.group(1)
        if ':' in var_expr:
            var_name, default_value = var_expr.split(':', 1)
            env_value = os.getenv(var_name.strip())
            return default_value if env_value is None else env_value

        var_name = var_expr.strip()
        env_value = os.getenv(var_name)
        if env_value is None:
            get_logger(__name__).warning(f"Environment variable {var_name} not set - using empty value")
            return ""
        return env_value

    return _ENV_VAR_PATTERN.sub(replace_var, content)


def candidate_paths() -> List[Path]:
    return [
        Path.cwd() / CONFIG_FILE_NAME,
        Path(__file__).parent.parent.parent / CONFIG_FILE_NAME,  # Project root
    ]


def parse_config(data: Any) -> ModuleConfig:
    """Convert already-loaded YAML data into a validated ModuleConfig."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration root must be a mapping")
    try:
        config = msgspec.convert(data, ModuleConfig)
        config.validate()
    except (msgspec.ValidationError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
    return config


def load_config(path: Optional[Union[str, Path]] = None) -> ModuleConfig:
    """
    Load configuration from YAML.

    An explicit path must exist. Without one, the first hosthttp.yaml found
    is used, and defaults apply when there is none.
    """
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")
    else:
        config_path = next((p for p in candidate_paths() if p.exists()), None)
        if config_path is None:
            get_logger(__name__).debug("No configuration file found - using defaults")
            return ModuleConfig()

    try:
        raw_content = config_path.read_text()
        data = yaml.safe_load(substitute_env_vars(raw_content))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load config from {config_path}: {e}") from e

    config = parse_config(data)
    get_logger(__name__).info(f"Configuration loaded from: {config_path}")
    return config
