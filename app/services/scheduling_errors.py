"""
Error kinds raised by the scheduling engine and its stores.

Each error carries a stable ``kind`` string and the HTTP status the API layer
answers with. The application registers a single handler for
``SchedulingError`` so routes never translate these by hand.
"""

from fastapi import status


class SchedulingError(Exception):
    kind = "SchedulingError"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Scheduling request could not be processed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidTimeFormat(SchedulingError):
    kind = "InvalidTimeFormat"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Time must use the HH:MM format."


class InvalidTimeRange(SchedulingError):
    kind = "InvalidTimeRange"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Time falls outside of a single day."


class InvalidWindow(SchedulingError):
    kind = "InvalidWindow"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Availability start time must be before its end time."


class DuplicateWindow(SchedulingError):
    kind = "DuplicateWindow"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Stylist already has availability for this date."


class NoAvailability(SchedulingError):
    kind = "NoAvailability"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Stylist has no availability for this date."


class SlotNotOffered(SchedulingError):
    kind = "SlotNotOffered"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Requested start time is not an offered slot."


class SlotTaken(SchedulingError):
    kind = "SlotTaken"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Requested slot is already booked."


class InvalidClient(SchedulingError):
    kind = "InvalidClient"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Client name and a valid email are required."


class StorageUnavailable(SchedulingError):
    kind = "StorageUnavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Booking storage is unavailable."
