"""HTTP header value validation shared by the fetcher and the backends."""

from __future__ import annotations

from typing import Callable

from ..errors import InvalidHeaderValue

HeaderValidator = Callable[[str, str], str]


def validate_header_value(name: str, value: str) -> str:
    """Return ``value`` unchanged if it can be sent as an HTTP header value.

    Rejects control characters (CR, LF, NUL and the rest of C0 except
    horizontal tab, plus DEL) and anything outside ASCII, which httpx
    would otherwise only reject once the request is on its way out.

    Raises:
        InvalidHeaderValue: If the value cannot be sent
    """
    if not isinstance(value, str):
        raise InvalidHeaderValue(name, f"expected str, got {type(value).__name__}")
    for idx, char in enumerate(value):
        code = ord(char)
        if (code < 0x20 and char != "\t") or code == 0x7F:
            raise InvalidHeaderValue(name, f"control character {code:#04x} at position {idx}")
        if code > 0x7F:
            raise InvalidHeaderValue(name, f"non-ASCII character at position {idx}")
    return value


def validate_non_empty_header_value(name: str, value: str) -> str:
    """Like validate_header_value, but an empty value is also rejected."""
    if not value or not value.strip():
        raise InvalidHeaderValue(name, "value is empty")
    return validate_header_value(name, value)


def build_headers(headers: dict[str, str], validator: HeaderValidator = validate_header_value) -> dict[str, str]:
    """Validate every header in ``headers`` and return a new mapping."""
    return {name: validator(name, value) for name, value in headers.items()}
