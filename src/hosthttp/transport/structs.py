from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

import msgspec
from yarl import URL


class HTTPMethod(Enum):
    """HTTP methods published as host shortcuts."""
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class RequestDirectives(msgspec.Struct):
    """
    Validated request options.

    Attributes:
        headers: Canonical header name -> single value, later set wins
        cookies: Request cookie name -> value
        raw_query: Replaces the URL query string verbatim when set
        form_body: Raw form-encoded body; implies the form Content-Type
    """
    headers: Dict[str, str] = msgspec.field(default_factory=dict)
    cookies: Dict[str, str] = msgspec.field(default_factory=dict)
    raw_query: Optional[str] = None
    form_body: Optional[str] = None


@dataclass(frozen=True)
class PreparedRequest:
    """Ready-to-send request produced by the request builder."""
    method: str
    url: URL
    headers: Dict[str, str]
    cookies: Dict[str, str]
    body: Optional[bytes] = None


class Response(msgspec.Struct, frozen=True):
    """
    Plain response value computed off the host.

    Attributes:
        body: Full response body
        status_code: HTTP status
        headers: Header name -> first value reported by the transport
        cookies: Response cookie name -> value, last Set-Cookie wins
        url: Final URL after redirects
        headers_all: Header name -> every value in transport order
    """
    body: bytes
    status_code: int
    headers: Dict[str, str]
    cookies: Dict[str, str]
    url: str
    headers_all: Dict[str, List[str]] = msgspec.field(default_factory=dict)


@dataclass
class BatchOutcome:
    """Parallel result slots of one batch, in input order."""
    responses: List[Optional[Response]]
    errors: List[Optional[str]]

    @property
    def failed(self) -> bool:
        return any(error is not None for error in self.errors)


@dataclass
class SessionMetrics:
    """Request counters and latency summary for one session."""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    batches_executed: int = 0
    avg_latency_ms: float = 0.0
    p95_latency_ms: float = 0.0
