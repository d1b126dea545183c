"""
hosthttp - HTTP client module for embedded scripting hosts.

Usage:
    from hosthttp import HttpModule, TableHost

    host = TableHost()
    host.preload_module("http", HttpModule().loader)
    http = host.require("http")
"""

from .config import HttpModuleConfig, ModuleConfig, load_config
from .exceptions import (
    HttpModuleError, ConfigurationError, DecodeError, MalformedUrlError, TransportError,
    UnsupportedSchemeError, MissingHostError, BodyReadError, UrlError, BatchItemShapeError
)
from .host import Host, HostTable, TableHost, host_string, to_string_arg
from .module import HttpModule, LegacyHttpModule, response_to_host
from .transport import Response, Session

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "HttpModuleConfig", "ModuleConfig", "load_config",
    # Errors
    "HttpModuleError", "ConfigurationError", "DecodeError", "MalformedUrlError", "TransportError",
    "UnsupportedSchemeError", "MissingHostError", "BodyReadError", "UrlError", "BatchItemShapeError",
    # Host model
    "Host", "HostTable", "TableHost", "host_string", "to_string_arg",
    # Module surface
    "HttpModule", "LegacyHttpModule", "response_to_host",
    "Response", "Session",
]
