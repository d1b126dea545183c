from .structs import (
    HTTPMethod, RequestDirectives, PreparedRequest, Response, BatchOutcome, SessionMetrics,
    FORM_CONTENT_TYPE
)
from .options import decode_options, canonical_header_key
from .request_builder import build_request, parse_url
from .response_encoder import encode_response
from .session import Session
from .dispatcher import Dispatcher, perform_request
from .batch import BatchExecutor, BatchRequest, parse_batch, execute_batch

__all__ = [
    # Data structures
    "HTTPMethod", "RequestDirectives", "PreparedRequest", "Response", "BatchOutcome", "SessionMetrics",
    "FORM_CONTENT_TYPE",
    # Pipeline stages
    "decode_options", "canonical_header_key",
    "build_request", "parse_url",
    "encode_response",
    # Transport
    "Session", "Dispatcher", "perform_request",
    "BatchExecutor", "BatchRequest", "parse_batch", "execute_batch",
]
