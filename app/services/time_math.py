from __future__ import annotations

import re
from datetime import date

from app.services.scheduling_errors import InvalidTimeFormat, InvalidTimeRange

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")
_DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


def parse_time(value: str) -> int:
    """Returns minutes since midnight for an ``HH:MM`` string."""
    if not isinstance(value, str):
        raise InvalidTimeFormat(f"Invalid time value: {value!r}.")
    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise InvalidTimeFormat(f"Invalid time value: {value!r}.")

    hours = int(match.group(1))
    minutes = int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidTimeFormat(f"Invalid time value: {value!r}.")
    return hours * 60 + minutes


def format_time(total_minutes: int) -> str:
    if total_minutes < 0 or total_minutes >= MINUTES_PER_DAY:
        raise InvalidTimeRange(f"{total_minutes} minutes is outside of a single day.")
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours:02d}:{minutes:02d}"


def add_minutes(value: str, minutes: int) -> str:
    # Rolling over into the next day is not supported.
    return format_time(parse_time(value) + minutes)


def compare_times(left: str, right: str) -> int:
    left_minutes = parse_time(left)
    right_minutes = parse_time(right)
    if left_minutes < right_minutes:
        return -1
    if left_minutes > right_minutes:
        return 1
    return 0


def normalize_time(value: str) -> str:
    return format_time(parse_time(value))


def parse_date(value: str | date) -> date:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DATE_PATTERN.match(value.strip()):
        raise InvalidTimeFormat(f"Invalid date value: {value!r}.")
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise InvalidTimeFormat(f"Invalid date value: {value!r}.") from exc


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open overlap test: [a, b) and [c, d) overlap iff a < d and c < b."""
    return start_a < end_b and start_b < end_a
