from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import date
from typing import Any

from fastapi import Depends, HTTPException, status

from app.core.config import Settings, get_settings
from app.core.resources import BookingResources, get_booking_resources
from app.schemas.appointment import Appointment, AppointmentCreateRequest, AppointmentListResponse
from app.schemas.availability import (
    AvailabilityCreateRequest,
    AvailabilityListResponse,
    AvailabilityWindow,
)
from app.schemas.scheduling import (
    BookableSlot,
    BookableTimesResponse,
    StylistListResponse,
    StylistSummary,
)
from app.services.appointment_store import AppointmentStore
from app.services.availability_store import AvailabilityStore
from app.services.booking_validator import find_overlapping_appointment, validate_booking
from app.services.notification_service import AppointmentConfirmation, AppointmentNotifier
from app.services.scheduling_errors import InvalidClient, SchedulingError
from app.services.slot_resolver import resolve_slots
from app.services.time_math import add_minutes, normalize_time
from app.services.user_store import STYLIST_ROLE, UserStore

logger = logging.getLogger(__name__)

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class SchedulingService:
    def __init__(
        self,
        settings: Settings,
        *,
        availability_store: AvailabilityStore,
        appointment_store: AppointmentStore,
        user_store: UserStore,
        notifier: AppointmentNotifier,
    ) -> None:
        self.settings = settings
        self.availability_store = availability_store
        self.appointment_store = appointment_store
        self.user_store = user_store
        self.notifier = notifier

    def list_bookable_times(self, stylist_id: str, day: date) -> BookableTimesResponse:
        stylist_id = stylist_id.strip()
        window = self.availability_store.get_window(stylist_id, day)
        if not window:
            return BookableTimesResponse(stylist_id=stylist_id, date=day, items=[])

        appointments = self.appointment_store.list_appointments(stylist_id, day)
        items: list[BookableSlot] = []
        for start_time in self._resolve_window_slots(window):
            end_time = add_minutes(start_time, self.settings.appointment_duration_minutes)
            items.append(
                BookableSlot(
                    start_time=start_time,
                    end_time=end_time,
                    available=find_overlapping_appointment(start_time, end_time, appointments) is None,
                ),
            )
        return BookableTimesResponse(stylist_id=stylist_id, date=day, items=items)

    def book(self, payload: AppointmentCreateRequest) -> Appointment:
        client_name = payload.client_name.strip()
        client_email = payload.client_email.strip().lower()
        if not client_name:
            raise InvalidClient("Client name is required.")
        if not _EMAIL_PATTERN.match(client_email):
            raise InvalidClient("A valid client email is required.")

        stylist_id = payload.stylist_id.strip()
        try:
            # Re-read both right before inserting; the store still has the final say.
            window = self.availability_store.get_window(stylist_id, payload.date)
            existing_appointments = (
                self.appointment_store.list_appointments(stylist_id, payload.date)
                if window
                else []
            )
            end_time = validate_booking(
                payload.start_time,
                window,
                existing_appointments,
                appointment_duration_minutes=self.settings.appointment_duration_minutes,
                buffer_minutes=self.settings.slot_buffer_minutes,
                include_window_end=self.settings.slot_include_window_end,
            )
            record = self.appointment_store.insert_appointment(
                stylist_id=stylist_id,
                client_name=client_name,
                client_email=client_email,
                date=payload.date,
                start_time=normalize_time(payload.start_time),
                end_time=end_time,
            )
        except SchedulingError as exc:
            logger.warning(
                "Booking rejected stylist_id=%s date=%s start_time=%s error=%s",
                stylist_id,
                payload.date.isoformat(),
                payload.start_time,
                exc.kind,
            )
            raise

        appointment = _map_appointment(record)
        logger.info(
            "Appointment booked appointment_id=%s stylist_id=%s date=%s start_time=%s end_time=%s",
            appointment.id,
            appointment.stylist_id,
            appointment.date.isoformat(),
            appointment.start_time,
            appointment.end_time,
        )
        self._notify_client(appointment)
        return appointment

    def add_availability(self, stylist_id: str, payload: AvailabilityCreateRequest) -> AvailabilityWindow:
        record = self.availability_store.add_window(
            stylist_id=stylist_id,
            date=payload.date,
            start_time=payload.start_time,
            end_time=payload.end_time,
        )
        window = _map_window(record)
        logger.info(
            "Availability added window_id=%s stylist_id=%s date=%s start_time=%s end_time=%s",
            window.id,
            window.stylist_id,
            window.date.isoformat(),
            window.start_time,
            window.end_time,
        )
        return window

    def list_availability(self, stylist_id: str) -> AvailabilityListResponse:
        windows = self.availability_store.list_windows(stylist_id)
        return AvailabilityListResponse(items=[_map_window(window) for window in windows])

    def remove_availability(self, stylist_id: str, window_id: str) -> None:
        window = self.availability_store.get_window_by_id(window_id)
        if not window:
            return
        if str(window.get("stylist_id", "")) != stylist_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only remove your own availability.",
            )
        self.availability_store.remove_window(window_id)
        logger.info("Availability removed window_id=%s stylist_id=%s", window_id, stylist_id)

    def list_appointments(self, stylist_id: str, day: date | None = None) -> AppointmentListResponse:
        if day is None:
            records = self.appointment_store.list_appointments_for_stylist(stylist_id)
        else:
            records = self.appointment_store.list_appointments(stylist_id, day)
        return AppointmentListResponse(items=[_map_appointment(record) for record in records])

    def cancel_appointment(self, stylist_id: str, appointment_id: str) -> None:
        appointment = self.appointment_store.get_appointment(appointment_id)
        if not appointment:
            return
        if str(appointment.get("stylist_id", "")) != stylist_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only cancel your own appointments.",
            )
        self.appointment_store.delete_appointment(appointment_id)
        logger.info("Appointment cancelled appointment_id=%s stylist_id=%s", appointment_id, stylist_id)

    def list_stylists(self) -> StylistListResponse:
        stylists = self.user_store.list_users_by_role(STYLIST_ROLE)
        return StylistListResponse(
            items=[
                StylistSummary(
                    id=str(stylist.get("_id", "")),
                    full_name=str(stylist.get("full_name", "")),
                )
                for stylist in stylists
            ],
        )

    def _resolve_window_slots(self, window: Mapping[str, Any]) -> list[str]:
        return resolve_slots(
            str(window.get("start_time", "")),
            str(window.get("end_time", "")),
            appointment_duration_minutes=self.settings.appointment_duration_minutes,
            buffer_minutes=self.settings.slot_buffer_minutes,
            include_window_end=self.settings.slot_include_window_end,
        )

    def _notify_client(self, appointment: Appointment) -> None:
        # The appointment is already stored; nothing here may fail the booking.
        try:
            stylist = self.user_store.get_user_by_id(appointment.stylist_id)
            stylist_name = str(stylist.get("full_name", "")).strip() if stylist else ""
            confirmation = AppointmentConfirmation(
                client_name=appointment.client_name,
                client_email=appointment.client_email,
                date=appointment.date.isoformat(),
                start_time=appointment.start_time,
                end_time=appointment.end_time,
                stylist_name=stylist_name or "your stylist",
            )
            self.notifier.send_confirmation(confirmation)
        except Exception:
            logger.exception(
                "Confirmation email failed appointment_id=%s client_email=%s",
                appointment.id,
                appointment.client_email,
            )


def _map_window(record: Mapping[str, Any]) -> AvailabilityWindow:
    return AvailabilityWindow(
        id=str(record.get("_id", "")),
        stylist_id=str(record.get("stylist_id", "")),
        date=date.fromisoformat(str(record.get("date", ""))),
        start_time=str(record.get("start_time", "")),
        end_time=str(record.get("end_time", "")),
    )


def _map_appointment(record: Mapping[str, Any]) -> Appointment:
    return Appointment(
        id=str(record.get("_id", "")),
        stylist_id=str(record.get("stylist_id", "")),
        client_name=str(record.get("client_name", "")),
        client_email=str(record.get("client_email", "")),
        date=date.fromisoformat(str(record.get("date", ""))),
        start_time=str(record.get("start_time", "")),
        end_time=str(record.get("end_time", "")),
    )


def get_scheduling_service(
    resources: BookingResources = Depends(get_booking_resources),
) -> SchedulingService:
    return SchedulingService(
        get_settings(),
        availability_store=resources.availability_store,
        appointment_store=resources.appointment_store,
        user_store=resources.user_store,
        notifier=resources.notifier,
    )
