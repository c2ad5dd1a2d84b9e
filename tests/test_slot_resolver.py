import pytest

from app.services.slot_resolver import resolve_slot_minutes, resolve_slots
from app.services.time_math import parse_time


def test_full_day_window_offers_hourly_slots_including_window_end() -> None:
    slots = resolve_slots("09:00", "17:00")

    assert slots == [
        "09:00",
        "10:00",
        "11:00",
        "12:00",
        "13:00",
        "14:00",
        "15:00",
        "16:00",
        "17:00",
    ]


def test_window_end_slot_is_dropped_when_appointments_must_finish_inside_window() -> None:
    slots = resolve_slots("09:00", "17:00", include_window_end=False)

    assert slots[0] == "09:00"
    assert slots[-1] == "16:00"


def test_window_shorter_than_one_step_offers_only_its_start() -> None:
    assert resolve_slots("10:00", "10:30") == ["10:00"]
    assert resolve_slots("10:00", "10:30", include_window_end=False) == []


def test_uneven_window_does_not_offer_its_end() -> None:
    assert resolve_slots("09:30", "12:00") == ["09:30", "10:30", "11:30"]


def test_custom_duration_and_buffer_change_the_step() -> None:
    slots = resolve_slots(
        "09:00",
        "11:00",
        appointment_duration_minutes=30,
        buffer_minutes=0,
        include_window_end=False,
    )

    assert slots == ["09:00", "09:30", "10:00", "10:30"]


def test_slots_never_run_past_midnight() -> None:
    assert resolve_slots("22:00", "23:59") == ["22:00", "23:00"]
    assert resolve_slots("23:30", "23:45") == []


def test_non_positive_step_is_rejected() -> None:
    with pytest.raises(ValueError):
        resolve_slots("09:00", "10:00", appointment_duration_minutes=0, buffer_minutes=0)


@pytest.mark.parametrize(
    ("start_time", "end_time"),
    [("00:00", "23:59"), ("08:15", "12:40"), ("13:00", "13:01"), ("06:00", "18:00")],
)
def test_strict_slots_stay_inside_window_and_increase(start_time: str, end_time: str) -> None:
    window_start = parse_time(start_time)
    window_end = parse_time(end_time)

    slots = resolve_slot_minutes(start_time, end_time, include_window_end=False)

    assert all(window_start <= slot < window_end for slot in slots)
    assert all(earlier < later for earlier, later in zip(slots, slots[1:]))


def test_resolution_is_repeatable() -> None:
    assert resolve_slots("09:00", "17:00") == resolve_slots("09:00", "17:00")
