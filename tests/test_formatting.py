import calendar
import time
from datetime import datetime, timezone

import pytest

from etnblocks.formatting import (
    etn_amount_to_str,
    etn_amount_to_str_formatted,
    get_etn,
    get_human_readable_timestamp,
    get_metric_prefix,
    make_difficulty,
    make_printable,
    split_difficulty,
    timestamp_difference,
    timestamp_to_str_gm,
    timestamps_time_scale,
)


@pytest.mark.parametrize("amount", [0, 1, 99, 12345, 10**12])
def test_get_etn_scales_by_hundred(amount):
    assert get_etn(amount) * 100 == pytest.approx(amount)


def test_zero_amount_is_question_mark():
    assert etn_amount_to_str(0) == "?"
    assert etn_amount_to_str_formatted(0) == "?"


def test_zero_amount_without_question_mark():
    assert etn_amount_to_str(0, "{:0.2f}", False) == "0.00"


@pytest.mark.parametrize("amount", [1, 250, 12345, 987654321])
def test_amount_string_parses_back(amount):
    assert float(etn_amount_to_str(amount)) == pytest.approx(get_etn(amount))


def test_formatted_amount_pinned():
    assert etn_amount_to_str_formatted(123456789) == "1,234,567.89"


@pytest.mark.parametrize("amount", [5, 123456, 10**9, 10**15 + 7])
def test_formatted_amount_groups(amount):
    formatted = etn_amount_to_str_formatted(amount)
    assert formatted.replace(",", "") == etn_amount_to_str(amount)
    integer_part = formatted.split(".")[0]
    groups = integer_part.split(",")
    assert 1 <= len(groups[0]) <= 3
    assert all(len(group) == 3 for group in groups[1:])


def test_timestamp_epoch():
    assert timestamp_to_str_gm(0) == "1970-01-01 00:00:00"


@pytest.mark.parametrize("ts", [1397818193, 1500000000, 1700000123])
def test_timestamp_round_trip(ts):
    text = timestamp_to_str_gm(ts)
    parsed = time.strptime(text, "%Y-%m-%d %H:%M:%S")
    assert calendar.timegm(parsed) == ts


def test_timestamp_custom_format_round_trip():
    text = timestamp_to_str_gm(1500000000, "%Y/%j")
    parsed = datetime.strptime(text, "%Y/%j").replace(tzinfo=timezone.utc)
    assert parsed.date() == datetime.fromtimestamp(1500000000, timezone.utc).date()


def test_human_readable_unknown():
    assert get_human_readable_timestamp(5) == "<unknown>"
    assert get_human_readable_timestamp(1234567889) == "<unknown>"


@pytest.mark.parametrize("ts", [1234567890, 1500000000, 1700043210])
def test_human_readable_twelve_hour(ts):
    text = get_human_readable_timestamp(ts)
    parsed = calendar.timegm(time.strptime(text, "%Y-%m-%d %I:%M:%S"))
    assert ts - parsed in (0, 12 * 3600)


@pytest.mark.parametrize("t1,t2", [(0, 0), (100, 5), (5, 100), (10**9, 3 * 10**8 + 12345)])
def test_timestamp_difference_recombines(t1, t2):
    years, days, hours, minutes, seconds = timestamp_difference(t1, t2)
    total = years * 31536000 + days * 86400 + hours * 3600 + minutes * 60 + seconds
    assert total == abs(t1 - t2)
    assert days < 365 and hours < 24 and minutes < 60 and seconds < 60
    assert timestamp_difference(t2, t1) == (years, days, hours, minutes, seconds)


def test_time_scale_shape():
    time0, time_n = 1000, 9000
    stamps = [1000, 2000, 5000, 8999]
    axis, scale = timestamps_time_scale(stamps, time_n, 40, time0)
    assert len(axis) == 40
    assert set(axis) <= {"_", "*"}
    assert axis[0] == "_"
    assert 1 <= axis.count("*") <= len(stamps)
    assert scale * 40 == pytest.approx(time_n - time0)


def test_time_scale_skips_out_of_range():
    axis, _ = timestamps_time_scale([1, 20000], 9000, 30, 1000)
    assert axis == "_" * 30


def test_time_scale_rejects_empty_interval():
    with pytest.raises(ValueError):
        timestamps_time_scale([5], 5, 10, 5)


def test_make_printable_plain_text_unchanged():
    assert make_printable("Hello, world!") == "Hello, world!"


def test_make_printable_control_chars():
    assert make_printable("\x01") == "\\001"
    assert make_printable(b"a\x00b") == "a\\000b"


def test_make_printable_high_byte_is_hex():
    result = make_printable(b"\x80")
    assert result.startswith("0x")
    assert int(result[2:], 16) & 0xFF == 0x80


def test_metric_prefix_small_rate():
    value, prefix = get_metric_prefix(999)
    assert prefix == ""
    assert value == 999


@pytest.mark.parametrize("rate", [1000, 54321, 1_500_000, 7 * 10**9, 3 * 10**13])
def test_metric_prefix_scaling(rate):
    value, prefix = get_metric_prefix(rate)
    assert prefix in "kMGT" and prefix != ""
    assert 1 <= value < 1000
    factor = 1000 ** ("kMGT".index(prefix) + 1)
    assert value * factor == pytest.approx(rate, rel=1e-3)


@pytest.mark.parametrize("low,high", [(0, 0), (1, 0), (0, 1), (2**64 - 1, 2**64 - 1), (12345, 678)])
def test_difficulty_round_trip(low, high):
    assert split_difficulty(make_difficulty(low, high)) == (low, high)


def test_difficulty_high_part_shifts():
    assert make_difficulty(0, 1) == 1 << 64


def test_difficulty_rejects_out_of_range():
    with pytest.raises(ValueError):
        make_difficulty(2**64, 0)
    with pytest.raises(ValueError):
        make_difficulty(0, -1)