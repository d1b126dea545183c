"""
Option Decoder

Turns the option bundle a host script passes (``{headers=..., cookies=...,
query=..., form=...}``) into ``RequestDirectives``. Decoding is lenient:
unknown keys and values of the wrong shape are dropped rather than rejected.
"""

from typing import Any, Dict, Optional

from ..exceptions import DecodeError
from ..host import HostTable, host_string, is_mapping, mapping_items
from .structs import RequestDirectives

_TOKEN_CHARS = frozenset(
    "!#$%&'*+-.^_`|~0123456789"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
)


def canonical_header_key(name: str) -> str:
    """
    Canonical MIME form of a header name: ``content-type`` -> ``Content-Type``.

    Names containing characters outside the HTTP token set are returned as-is.
    """
    if not name or any(ch not in _TOKEN_CHARS for ch in name):
        return name
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


def _get(options: Any, key: str) -> Any:
    if isinstance(options, HostTable):
        return options.raw_get(key)
    return options.get(key)


def _string_value(value: Any) -> Optional[str]:
    # Only genuine host strings are honoured; numbers and tables are not strings here
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return host_string(value)
    return None


def _string_map(value: Any, canonical: bool = False) -> Dict[str, str]:
    result: Dict[str, str] = {}
    if not is_mapping(value):
        return result
    for key, item in mapping_items(value):
        name = host_string(key)
        if canonical:
            name = canonical_header_key(name)
        result[name] = host_string(item)
    return result


def decode_options(options: Any = None, strict: bool = False) -> RequestDirectives:
    """
    Decode a host option bundle.

    Args:
        options: Host table, Python mapping or None
        strict: Raise DecodeError instead of ignoring a non-mapping bundle

    Returns:
        RequestDirectives with empty header/cookie maps when nothing was given
    """
    if options is None:
        return RequestDirectives()
    if not is_mapping(options):
        if strict:
            raise DecodeError(f"options must be a table, got {type(options).__name__}")
        return RequestDirectives()

    return RequestDirectives(
        headers=_string_map(_get(options, "headers"), canonical=True),
        cookies=_string_map(_get(options, "cookies")),
        raw_query=_string_value(_get(options, "query")),
        form_body=_string_value(_get(options, "form")),
    )
