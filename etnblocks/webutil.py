"""Helpers for request bodies, string cleanup, chunking and medians."""

from __future__ import annotations

import re
import string
from collections.abc import Iterable, Iterator, Sequence
from typing import TypeVar

T = TypeVar("T")
S = TypeVar("S", bound=Sequence)

DEFAULT_BAD_CHARS = "[^a-zA-Z0-9+/=]"

_HEX_DIGITS = set(string.hexdigits)


def _parse_hex_prefix(text: str) -> int | None:
    """Read a hexadecimal integer from the start of text, as a stream would."""
    text = text.lstrip()
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    digits = ""
    for char in text:
        if char not in _HEX_DIGITS:
            break
        digits += char
    if not digits:
        return None
    return sign * int(digits, 16)


def url_decode(text: str) -> str:
    """Decode percent escapes and '+' in form data.

    Raises ValueError on a truncated or malformed escape.
    """
    out = bytearray()
    chars = iter(enumerate(text))
    for index, char in chars:
        if char == "%":
            if index + 3 > len(text):
                raise ValueError(f"truncated escape at position {index}")
            value = _parse_hex_prefix(text[index + 1 : index + 3])
            if value is None:
                raise ValueError(f"malformed escape at position {index}")
            out.append(value & 0xFF)
            next(chars, None)
            next(chars, None)
        elif char == "+":
            out.append(ord(" "))
        else:
            out.extend(char.encode("utf-8"))
    return out.decode("utf-8", errors="replace")


def parse_post_data(body: str) -> dict[str, str]:
    """Parse a url-encoded request body into a dict.

    Parsing stops at the first field without '='; a body that cannot be
    decoded gives an empty dict.
    """
    try:
        decoded = url_decode(body)
    except ValueError:
        return {}

    fields: dict[str, str] = {}
    for part in decoded.split("&"):
        key, sep, value = part.partition("=")
        if not sep:
            break
        fields[key] = value
    return fields


def remove_bad_chars(text: str, pattern: str | re.Pattern[str] = DEFAULT_BAD_CHARS) -> str:
    """Remove every character that matches the pattern."""
    return re.sub(pattern, "", text)


def chunks(seq: S, size: int) -> Iterator[S]:
    """Yield consecutive slices of at most ``size`` items.

    An empty sequence yields one empty slice.
    """
    if size <= 0:
        raise ValueError("chunk size must be positive")
    if not seq:
        yield seq[0:0]
        return
    for start in range(0, len(seq), size):
        yield seq[start : start + size]


def calc_median(values: Iterable[T]) -> T:
    """Return the upper median of the values without changing them."""
    ordered = sorted(values)
    if not ordered:
        raise ValueError("median of an empty collection")
    return ordered[len(ordered) // 2]