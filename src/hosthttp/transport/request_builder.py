"""
Request Builder

Combines a method, a URL and decoded directives into a PreparedRequest.
The URL is checked the way the transport would check it, so scheme and host
problems surface before any connection is attempted.
"""

from typing import Dict

from yarl import URL

from ..exceptions import MalformedUrlError, MissingHostError, UnsupportedSchemeError
from .structs import FORM_CONTENT_TYPE, PreparedRequest, RequestDirectives

SUPPORTED_SCHEMES = frozenset({"http", "https"})


def parse_url(url: str) -> URL:
    """Parse and validate a request URL."""
    try:
        parsed = URL(url)
        scheme = parsed.scheme
        host = parsed.raw_host
        # Accessing the port validates it
        parsed.port
    except (ValueError, TypeError) as e:
        raise MalformedUrlError(url, str(e)) from e

    if scheme not in SUPPORTED_SCHEMES:
        raise UnsupportedSchemeError(scheme)
    if not host:
        raise MissingHostError()
    return parsed


def replace_query(url: URL, raw_query: str) -> URL:
    """Swap the query string for ``raw_query`` without re-encoding it."""
    return URL.build(
        scheme=url.scheme,
        authority=url.raw_authority,
        path=url.raw_path,
        query_string=raw_query,
        fragment=url.raw_fragment,
        encoded=True,
    )


def build_request(method: str, url: str, directives: RequestDirectives) -> PreparedRequest:
    """
    Build a ready-to-send request.

    Args:
        method: HTTP verb in any case; empty means GET
        url: Absolute http(s) URL
        directives: Decoded request options

    Returns:
        PreparedRequest with upper-cased method

    Raises:
        MalformedUrlError: URL cannot be parsed
        UnsupportedSchemeError: URL scheme is not http or https
        MissingHostError: URL has no host
    """
    parsed = parse_url(url)
    if directives.raw_query is not None:
        parsed = replace_query(parsed, directives.raw_query)

    headers: Dict[str, str] = {}
    body = None
    if directives.form_body is not None:
        headers["Content-Type"] = FORM_CONTENT_TYPE
        body = directives.form_body.encode("utf-8", errors="surrogateescape")

    # Caller headers go last so an explicit Content-Type beats the form default
    headers.update(directives.headers)

    return PreparedRequest(
        method=method.upper() or "GET",
        url=parsed,
        headers=headers,
        cookies=dict(directives.cookies),
        body=body,
    )
