from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from app.services.scheduling_errors import NoAvailability, SlotNotOffered, SlotTaken
from app.services.slot_resolver import (
    DEFAULT_APPOINTMENT_DURATION_MINUTES,
    DEFAULT_BUFFER_MINUTES,
    resolve_slot_minutes,
)
from app.services.time_math import format_time, intervals_overlap, parse_time


def validate_booking(
    proposed_start: str,
    window: Mapping[str, Any] | None,
    existing_appointments: Sequence[Mapping[str, Any]],
    *,
    appointment_duration_minutes: int = DEFAULT_APPOINTMENT_DURATION_MINUTES,
    buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
    include_window_end: bool = True,
) -> str:
    """
    Checks a proposed start time against a window and the appointments
    already booked on it, returning the appointment end time.

    ``existing_appointments`` must belong to the same stylist and date as
    ``window``. Nothing is persisted here.
    """
    if not window:
        raise NoAvailability()

    start_minutes = parse_time(proposed_start)
    offered = resolve_slot_minutes(
        str(window.get("start_time", "")),
        str(window.get("end_time", "")),
        appointment_duration_minutes=appointment_duration_minutes,
        buffer_minutes=buffer_minutes,
        include_window_end=include_window_end,
    )
    if start_minutes not in offered:
        raise SlotNotOffered(f"{format_time(start_minutes)} is not an offered slot.")

    start_time = format_time(start_minutes)
    end_time = format_time(start_minutes + appointment_duration_minutes)
    if find_overlapping_appointment(start_time, end_time, existing_appointments):
        raise SlotTaken()
    return end_time


def find_overlapping_appointment(
    start_time: str,
    end_time: str,
    existing_appointments: Sequence[Mapping[str, Any]],
) -> Mapping[str, Any] | None:
    start_minutes = parse_time(start_time)
    end_minutes = parse_time(end_time)
    for appointment in existing_appointments:
        if intervals_overlap(
            start_minutes,
            end_minutes,
            parse_time(str(appointment.get("start_time", ""))),
            parse_time(str(appointment.get("end_time", ""))),
        ):
            return appointment
    return None
