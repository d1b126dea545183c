"""
HTTP Module Exceptions

Every failure a host script can observe is one of these. Components raise them;
only the dispatcher and batch boundary turn them into the plain strings that
are handed back to the host.
"""


class HttpModuleError(Exception):
    """Base exception for all HTTP module errors."""
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self):
        return self.message


class ConfigurationError(HttpModuleError):
    """Configuration file missing required structure or holding invalid values."""
    pass


# Option decoding

class DecodeError(HttpModuleError):
    """Options argument present but not a mapping (strict decoding only)."""
    pass


# URL and transport errors

class MalformedUrlError(HttpModuleError):
    """URL could not be parsed at all."""
    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"parse {url}: {reason}")


class TransportError(HttpModuleError):
    """Transport refused the request or failed while performing it."""
    pass


class UnsupportedSchemeError(TransportError):
    """URL scheme is not one the transport speaks."""
    def __init__(self, scheme: str) -> None:
        self.scheme = scheme
        super().__init__(f'unsupported protocol scheme "{scheme}"')


class MissingHostError(TransportError):
    """URL has a supported scheme but no host."""
    def __init__(self) -> None:
        super().__init__("http: no Host in request URL")


class BodyReadError(HttpModuleError):
    """Status line was received but the body could not be read."""
    pass


class UrlError(HttpModuleError):
    """Transport error annotated with the operation and URL that caused it."""
    def __init__(self, op: str, url: str, error: Exception) -> None:
        self.op = op
        self.url = url
        self.error = error
        super().__init__(f"{op} {url}: {error}")


# Batch errors

class BatchItemShapeError(HttpModuleError):
    """Batch entry is not a table."""
    def __init__(self) -> None:
        super().__init__("Request must be a table")
