"""Formatting helpers for amounts, timestamps, difficulties and raw strings."""

from __future__ import annotations

import time
from collections.abc import Iterable

DEFAULT_AMOUNT_FORMAT = "{:0.2f}"
DEFAULT_TIME_FORMAT = "%F %T"
SECOND_BLOCK_TIMESTAMP = 1397818193
MIN_READABLE_TIMESTAMP = 1234567890

_STRFTIME_BUFFER = 60
_UINT64_MASK = 0xFFFFFFFFFFFFFFFF
_METRIC_PREFIXES = "kMGT"

_SECONDS_PER_YEAR = 31536000
_SECONDS_PER_DAY = 86400
_SECONDS_PER_HOUR = 3600
_SECONDS_PER_MINUTE = 60


def get_etn(amount: int) -> float:
    """Convert an amount in atomic units into whole coins."""
    return amount / 1e2


def etn_amount_to_str(
    amount: int,
    fmt: str = DEFAULT_AMOUNT_FORMAT,
    zero_to_question_mark: bool = True,
) -> str:
    """Format an atomic amount; a zero amount becomes "?" unless disabled."""
    if zero_to_question_mark and amount == 0:
        return "?"
    return fmt.format(get_etn(amount))


def etn_amount_to_str_formatted(
    amount: int,
    fmt: str = DEFAULT_AMOUNT_FORMAT,
    zero_to_question_mark: bool = True,
) -> str:
    """Like :func:`etn_amount_to_str`, with thousands separated by commas."""
    text = etn_amount_to_str(amount, fmt, zero_to_question_mark)
    position = len(text) - (6 if "." in text else 3)
    while position > 0:
        text = text[:position] + "," + text[position:]
        position -= 3
    return text


def _expand_format(fmt: str) -> str:
    return fmt.replace("%F", "%Y-%m-%d").replace("%T", "%H:%M:%S")


def timestamp_to_str_gm(timestamp: int, fmt: str = DEFAULT_TIME_FORMAT) -> str:
    """Format a Unix timestamp in UTC; results that do not fit the buffer are empty."""
    text = time.strftime(_expand_format(fmt), time.gmtime(timestamp))
    if len(text) >= _STRFTIME_BUFFER:
        return ""
    return text


def get_human_readable_timestamp(ts: int) -> str:
    """Format a timestamp as UTC with a 12-hour clock, or "<unknown>" if too old."""
    if ts < MIN_READABLE_TIMESTAMP:
        return "<unknown>"
    return time.strftime("%Y-%m-%d %I:%M:%S", time.gmtime(ts))


def timestamp_difference(t1: int, t2: int) -> tuple[int, int, int, int, int]:
    """Split the absolute difference of two timestamps into years, days, hours, minutes, seconds."""
    remaining = abs(t1 - t2)
    years, remaining = divmod(remaining, _SECONDS_PER_YEAR)
    days, remaining = divmod(remaining, _SECONDS_PER_DAY)
    hours, remaining = divmod(remaining, _SECONDS_PER_HOUR)
    minutes, seconds = divmod(remaining, _SECONDS_PER_MINUTE)
    return years, days, hours, minutes, seconds


def timestamps_time_scale(
    timestamps: Iterable[int],
    time_n: int,
    resolution: int = 80,
    time0: int = SECOND_BLOCK_TIMESTAMP,
) -> tuple[str, float]:
    """Draw timestamps on a text axis of ``resolution`` characters.

    Returns the axis, where '*' marks a timestamp, and the number of seconds
    each character stands for. Timestamps outside [time0, time_n] are skipped.
    """
    if time_n <= time0:
        raise ValueError("time_n must be later than time0")
    if resolution <= 0:
        raise ValueError("resolution must be positive")

    axis = ["_"] * resolution
    interval = time_n - time0
    scale = interval / resolution

    for timestamp in timestamps:
        if timestamp < time0 or timestamp > time_n:
            continue
        place = int((timestamp - time0) / interval * (resolution - 1))
        if place + 1 < resolution:
            axis[place + 1] = "*"

    return "".join(axis), scale


_CONTROL_ESCAPES = {code: f"\\00{code}" for code in range(8)}


def make_printable(text: str | bytes) -> str:
    """Escape non-printable bytes so the result is safe to show."""
    data = text.encode("utf-8") if isinstance(text, str) else bytes(text)
    parts = []
    for byte in data:
        if 0x20 <= byte <= 0x7E:
            parts.append(chr(byte))
        elif byte in _CONTROL_ESCAPES:
            parts.append(_CONTROL_ESCAPES[byte])
        else:
            # bytes are treated as signed chars widened to int
            signed = byte - 256 if byte >= 0x80 else byte
            parts.append("0x" + format(signed & 0xFFFFFFFF, "x"))
    return "".join(parts)


def get_metric_prefix(hash_rate: int) -> tuple[float, str]:
    """Scale a hash rate to a metric prefix (k, M, G or T).

    Returns the scaled value and the prefix. Rates below 1000 or beyond
    the largest prefix come back unscaled with an empty prefix.
    """
    if hash_rate < 1000:
        return float(hash_rate), ""
    value = hash_rate
    for prefix in _METRIC_PREFIXES:
        if value < 1_000_000:
            return value / 1000, prefix
        value //= 1000
    return float(hash_rate), ""


def _check_uint64(value: int, name: str) -> None:
    if not 0 <= value <= _UINT64_MASK:
        raise ValueError(f"{name} must fit in 64 unsigned bits")


def make_difficulty(low: int, high: int) -> int:
    """Combine the low and high 64-bit halves of a 128-bit difficulty."""
    _check_uint64(low, "low")
    _check_uint64(high, "high")
    return (high << 64) + low


def split_difficulty(value: int) -> tuple[int, int]:
    """Split a 128-bit difficulty into its low and high 64-bit halves."""
    if value < 0:
        raise ValueError("difficulty must not be negative")
    return value & _UINT64_MASK, (value >> 64) & _UINT64_MASK