from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Request

from app.core.config import Settings
from app.services.appointment_store import AppointmentStore, create_appointment_store
from app.services.availability_store import AvailabilityStore, create_availability_store
from app.services.notification_service import AppointmentNotifier, create_appointment_notifier
from app.services.user_store import UserStore, create_user_store

logger = logging.getLogger(__name__)


@dataclass
class BookingResources:
    """Process-wide collaborators built at startup and closed at shutdown."""

    availability_store: AvailabilityStore
    appointment_store: AppointmentStore
    user_store: UserStore
    notifier: AppointmentNotifier

    def close(self) -> None:
        for store in (self.availability_store, self.appointment_store, self.user_store):
            try:
                store.close()
            except Exception:
                logger.exception("Failed to close store store=%s", type(store).__name__)


def build_booking_resources(settings: Settings) -> BookingResources:
    logger.info("Building booking resources data_store=%s", settings.booking_data_store)
    return BookingResources(
        availability_store=create_availability_store(settings),
        appointment_store=create_appointment_store(settings),
        user_store=create_user_store(settings),
        notifier=create_appointment_notifier(settings),
    )


def get_booking_resources(request: Request) -> BookingResources:
    return request.app.state.booking_resources
