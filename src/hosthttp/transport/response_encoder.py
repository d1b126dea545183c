"""
Response Encoder

Flattens what the transport reports about a served response into a plain
``Response``. Runs on worker tasks, so it must not touch host values.
"""

from http.cookies import Morsel
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from .structs import Response


def encode_headers(header_items: Iterable[Tuple[str, str]]) -> Tuple[Dict[str, str], Dict[str, List[str]]]:
    """
    Single-valued and multi-valued header maps.

    The first value reported for a name wins in the single-valued map; name
    case is kept exactly as the transport presents it.
    """
    first: Dict[str, str] = {}
    every: Dict[str, List[str]] = {}
    # Names compare case-insensitively; the spelling seen first is kept
    seen: Dict[str, str] = {}
    for name, value in header_items:
        name = str(name)
        key = seen.setdefault(name.lower(), name)
        if key not in every:
            first[key] = value
            every[key] = []
        every[key].append(value)
    return first, every


def encode_cookies(cookies: Mapping[str, Any]) -> Dict[str, str]:
    """Response cookie name -> value; a later cookie with the same name replaces an earlier one."""
    result: Dict[str, str] = {}
    for name, cookie in cookies.items():
        result[name] = cookie.value if isinstance(cookie, Morsel) else str(cookie)
    return result


def encode_response(
    status: int,
    url: str,
    header_items: Iterable[Tuple[str, str]],
    cookies: Mapping[str, Any],
    body: bytes,
) -> Response:
    headers, headers_all = encode_headers(header_items)
    return Response(
        body=bytes(body),
        status_code=int(status),
        headers=headers,
        cookies=encode_cookies(cookies),
        url=str(url),
        headers_all=headers_all,
    )
