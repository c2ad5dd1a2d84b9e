from app.services.time_math import MINUTES_PER_DAY, format_time, parse_time

DEFAULT_APPOINTMENT_DURATION_MINUTES = 45
DEFAULT_BUFFER_MINUTES = 15


def resolve_slot_minutes(
    start_time: str,
    end_time: str,
    *,
    appointment_duration_minutes: int = DEFAULT_APPOINTMENT_DURATION_MINUTES,
    buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
    include_window_end: bool = True,
) -> list[int]:
    """
    Bookable slot starts for a window, in minutes since midnight.

    The cursor starts at the window start and advances by one appointment
    plus its buffer. With ``include_window_end`` a slot may start exactly at
    the window end (09:00-17:00 offers 17:00); otherwise every slot must
    finish inside the window. Appointments never run past midnight.
    """
    window_start = parse_time(start_time)
    window_end = parse_time(end_time)
    step = appointment_duration_minutes + buffer_minutes
    if step <= 0:
        raise ValueError("Slot step must be positive.")

    if include_window_end:
        last_start = window_end
    else:
        last_start = window_end - appointment_duration_minutes

    slots: list[int] = []
    cursor = window_start
    while cursor <= last_start and cursor + appointment_duration_minutes < MINUTES_PER_DAY:
        slots.append(cursor)
        cursor += step
    return slots


def resolve_slots(
    start_time: str,
    end_time: str,
    *,
    appointment_duration_minutes: int = DEFAULT_APPOINTMENT_DURATION_MINUTES,
    buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
    include_window_end: bool = True,
) -> list[str]:
    return [
        format_time(slot)
        for slot in resolve_slot_minutes(
            start_time,
            end_time,
            appointment_duration_minutes=appointment_duration_minutes,
            buffer_minutes=buffer_minutes,
            include_window_end=include_window_end,
        )
    ]
