from datetime import date

import pytest

from app.services.scheduling_errors import InvalidTimeFormat, InvalidTimeRange
from app.services.time_math import (
    add_minutes,
    compare_times,
    format_time,
    intervals_overlap,
    normalize_time,
    parse_date,
    parse_time,
)


@pytest.mark.parametrize(
    ("raw_value", "expected_minutes"),
    [
        ("00:00", 0),
        ("09:00", 540),
        ("9:05", 545),
        ("23:59", 1439),
        (" 12:30 ", 750),
    ],
)
def test_parse_time_returns_minutes_since_midnight(raw_value: str, expected_minutes: int) -> None:
    assert parse_time(raw_value) == expected_minutes


@pytest.mark.parametrize(
    "raw_value",
    ["", "9", "09:0", "24:00", "12:60", "ab:cd", "09:00:00", "-1:30", "09h00"],
)
def test_parse_time_rejects_malformed_values(raw_value: str) -> None:
    with pytest.raises(InvalidTimeFormat):
        parse_time(raw_value)


def test_parse_time_rejects_non_string_values() -> None:
    with pytest.raises(InvalidTimeFormat):
        parse_time(900)  # type: ignore[arg-type]


def test_add_minutes_rolls_hours_within_the_day() -> None:
    assert add_minutes("09:00", 45) == "09:45"
    assert add_minutes("09:30", 45) == "10:15"
    assert add_minutes("22:15", 104) == "23:59"


def test_add_minutes_past_midnight_is_an_invalid_range() -> None:
    with pytest.raises(InvalidTimeRange):
        add_minutes("23:30", 45)


def test_format_time_rejects_values_outside_a_day() -> None:
    with pytest.raises(InvalidTimeRange):
        format_time(-1)
    with pytest.raises(InvalidTimeRange):
        format_time(24 * 60)


def test_compare_times_orders_by_minutes_not_strings() -> None:
    assert compare_times("9:00", "10:00") == -1
    assert compare_times("10:00", "09:59") == 1
    assert compare_times("9:00", "09:00") == 0


def test_normalize_time_pads_hours() -> None:
    assert normalize_time("9:00") == "09:00"


def test_parse_date_accepts_iso_dates_only() -> None:
    assert parse_date("2024-06-10") == date(2024, 6, 10)
    assert parse_date(date(2024, 6, 10)) == date(2024, 6, 10)
    with pytest.raises(InvalidTimeFormat):
        parse_date("10/06/2024")
    with pytest.raises(InvalidTimeFormat):
        parse_date("2024-02-30")


def test_intervals_overlap_is_half_open() -> None:
    assert intervals_overlap(540, 585, 570, 615) is True
    assert intervals_overlap(540, 585, 585, 630) is False
    assert intervals_overlap(600, 645, 540, 600) is False
    assert intervals_overlap(540, 600, 550, 560) is True
