"""Route pattern parameter tags and base64 encoding helpers."""

from __future__ import annotations

STANDARD_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
URLSAFE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"

# Tag digits for each kind of route parameter, in base 6.
_TAG_DIGITS = (
    ("<int>", 1),
    ("<uint>", 2),
    ("<float>", 3),
    ("<double>", 3),
    ("<str>", 4),
    ("<string>", 4),
    ("<path>", 5),
)

_DIGIT_TYPES: dict[int, type] = {1: int, 2: int, 3: float, 4: str, 5: str}


def base64encode(data: bytes | str, alphabet: str = STANDARD_ALPHABET) -> str:
    """Encode data as base64 with the given 64-character alphabet, padded with '='."""
    if len(alphabet) != 64:
        raise ValueError("alphabet must have exactly 64 characters")
    raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)

    parts = []
    for start in range(0, len(raw), 3):
        group = raw[start : start + 3]
        value = int.from_bytes(group.ljust(3, b"\0"), "big")
        indices = [(value >> shift) & 0x3F for shift in (18, 12, 6, 0)]
        kept = len(group) + 1
        parts.append("".join(alphabet[i] for i in indices[:kept]) + "=" * (4 - kept))
    return "".join(parts)


def base64encode_urlsafe(data: bytes | str) -> str:
    """Encode data as base64 with the URL-safe alphabet, still padded with '='."""
    return base64encode(data, URLSAFE_ALPHABET)


def get_parameter_tag(pattern: str) -> int:
    """Compute the parameter tag of a route pattern such as "/user/<int>/<str>".

    Each parameter adds one base-6 digit; the first parameter is the least
    significant digit. Raises ValueError for an unknown parameter type.
    """
    digits: list[int] = []
    position = 0
    while position < len(pattern):
        if pattern[position] == "<":
            for marker, digit in _TAG_DIGITS:
                if pattern.startswith(marker, position):
                    digits.append(digit)
                    position += len(marker)
                    break
            else:
                raise ValueError(f"invalid parameter type at position {position}")
        else:
            position += 1

    tag = 0
    for digit in reversed(digits):
        tag = tag * 6 + digit
    return tag


def _digits(tag: int) -> list[int]:
    result = []
    while tag:
        tag, digit = divmod(tag, 6)
        result.append(digit)
    return result


def is_parameter_tag_compatible(a: int, b: int) -> bool:
    """Tell whether two tags are compatible: they carry the same number of parameters."""
    if a < 0 or b < 0:
        raise ValueError("parameter tags must not be negative")
    return len(_digits(a)) == len(_digits(b))


def parameter_types(tag: int) -> tuple[type, ...]:
    """Return the Python types of the parameters a tag describes, in route order.

    Raises ValueError when a digit of the tag names no parameter type.
    """
    if tag < 0:
        raise ValueError("parameter tag must not be negative")
    types = []
    for digit in _digits(tag):
        if digit not in _DIGIT_TYPES:
            raise ValueError(f"tag {tag} holds no parameter type for digit {digit}")
        types.append(_DIGIT_TYPES[digit])
    return tuple(types)