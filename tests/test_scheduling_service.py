from datetime import date

import pytest

from app.core.config import Settings
from app.schemas.appointment import AppointmentCreateRequest
from app.schemas.availability import AvailabilityCreateRequest
from app.services.appointment_store import InMemoryAppointmentStore
from app.services.availability_store import InMemoryAvailabilityStore
from app.services.email_client import EmailDeliveryError
from app.services.notification_service import AppointmentConfirmation, AppointmentNotifier
from app.services.scheduling_errors import (
    InvalidClient,
    NoAvailability,
    SlotNotOffered,
    SlotTaken,
    StorageUnavailable,
)
from app.services.scheduling_service import SchedulingService
from app.services.user_store import InMemoryUserStore

BOOKING_DATE = date(2024, 6, 10)


class _RecordingNotifier(AppointmentNotifier):
    def __init__(self, error: Exception | None = None) -> None:
        super().__init__(None)
        self.sent: list[AppointmentConfirmation] = []
        self.error = error

    def send_confirmation(self, confirmation: AppointmentConfirmation) -> bool:
        self.sent.append(confirmation)
        if self.error:
            raise self.error
        return True


@pytest.fixture
def user_store() -> InMemoryUserStore:
    store = InMemoryUserStore()
    store.create_user(
        email="stylist@salon.com",
        full_name="Sam Stylist",
        password_hash="not-used",
        role="stylist",
    )
    return store


@pytest.fixture
def notifier() -> _RecordingNotifier:
    return _RecordingNotifier()


@pytest.fixture
def service(user_store: InMemoryUserStore, notifier: _RecordingNotifier) -> SchedulingService:
    return SchedulingService(
        Settings(booking_data_store="memory"),
        availability_store=InMemoryAvailabilityStore(),
        appointment_store=InMemoryAppointmentStore(),
        user_store=user_store,
        notifier=notifier,
    )


def _open_day(service: SchedulingService, stylist_id: str = "1") -> None:
    service.add_availability(
        stylist_id,
        AvailabilityCreateRequest(date=BOOKING_DATE, start_time="09:00", end_time="17:00"),
    )


def _booking(start_time: str = "09:00", **overrides: str) -> AppointmentCreateRequest:
    values = {
        "stylist_id": "1",
        "date": BOOKING_DATE,
        "start_time": start_time,
        "client_name": "Ann",
        "client_email": "ann@x.com",
    }
    values.update(overrides)
    return AppointmentCreateRequest(**values)


def test_list_bookable_times_is_empty_without_window(service: SchedulingService) -> None:
    response = service.list_bookable_times("3", BOOKING_DATE)

    assert response.items == []
    assert response.stylist_id == "3"


def test_list_bookable_times_flags_booked_slots(service: SchedulingService) -> None:
    _open_day(service)
    service.book(_booking("10:00"))

    response = service.list_bookable_times("1", BOOKING_DATE)

    assert [slot.start_time for slot in response.items] == [
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
    booked = [slot.start_time for slot in response.items if not slot.available]
    assert booked == ["10:00"]
    assert response.items[0].end_time == "09:45"


def test_list_bookable_times_trims_stylist_id(service: SchedulingService) -> None:
    _open_day(service)
    service.book(_booking("09:00"))

    response = service.list_bookable_times(" 1 ", BOOKING_DATE)

    assert response.stylist_id == "1"
    assert len(response.items) == 9
    assert response.items[0].available is False


def test_book_returns_appointment_with_computed_end(
    service: SchedulingService,
    notifier: _RecordingNotifier,
) -> None:
    _open_day(service)

    appointment = service.book(_booking("09:00"))

    assert appointment.end_time == "09:45"
    assert appointment.stylist_id == "1"
    assert notifier.sent == [
        AppointmentConfirmation(
            client_name="Ann",
            client_email="ann@x.com",
            date="2024-06-10",
            start_time="09:00",
            end_time="09:45",
            stylist_name="Sam Stylist",
        ),
    ]


def test_booking_same_slot_twice_fails_with_slot_taken(service: SchedulingService) -> None:
    _open_day(service)
    service.book(_booking("09:00"))

    with pytest.raises(SlotTaken):
        service.book(_booking("09:00", client_name="Bob", client_email="bob@x.com"))


def test_book_without_window_fails_with_no_availability(service: SchedulingService) -> None:
    with pytest.raises(NoAvailability):
        service.book(_booking("09:00", stylist_id="3"))


def test_book_off_grid_time_fails_with_slot_not_offered(service: SchedulingService) -> None:
    _open_day(service)

    with pytest.raises(SlotNotOffered):
        service.book(_booking("09:15"))


@pytest.mark.parametrize(
    ("client_name", "client_email"),
    [("", "ann@x.com"), ("   ", "ann@x.com"), ("Ann", "ann"), ("Ann", "ann@x"), ("Ann", "")],
)
def test_book_rejects_invalid_client_before_checking_availability(
    service: SchedulingService,
    client_name: str,
    client_email: str,
) -> None:
    with pytest.raises(InvalidClient):
        service.book(_booking("09:00", stylist_id="3", client_name=client_name, client_email=client_email))


def test_notification_failure_does_not_fail_booking(
    user_store: InMemoryUserStore,
) -> None:
    failing_notifier = _RecordingNotifier(error=EmailDeliveryError("mail api down"))
    service = SchedulingService(
        Settings(booking_data_store="memory"),
        availability_store=InMemoryAvailabilityStore(),
        appointment_store=InMemoryAppointmentStore(),
        user_store=user_store,
        notifier=failing_notifier,
    )
    _open_day(service)

    appointment = service.book(_booking("11:00"))

    assert appointment.start_time == "11:00"
    assert len(failing_notifier.sent) == 1
    assert len(service.list_appointments("1", BOOKING_DATE).items) == 1


def test_notifier_raising_unexpected_error_does_not_fail_booking(
    user_store: InMemoryUserStore,
) -> None:
    failing_notifier = _RecordingNotifier(error=TimeoutError("mail api timed out"))
    service = SchedulingService(
        Settings(booking_data_store="memory"),
        availability_store=InMemoryAvailabilityStore(),
        appointment_store=InMemoryAppointmentStore(),
        user_store=user_store,
        notifier=failing_notifier,
    )
    _open_day(service)

    appointment = service.book(_booking("12:00"))

    assert appointment.start_time == "12:00"
    assert len(failing_notifier.sent) == 1
    assert [item.id for item in service.list_appointments("1", BOOKING_DATE).items] == [appointment.id]


class _UnreachableUserStore(InMemoryUserStore):
    def get_user_by_id(self, user_id: str) -> dict | None:
        raise StorageUnavailable()


def test_stylist_lookup_failure_after_insert_does_not_fail_booking(
    notifier: _RecordingNotifier,
) -> None:
    service = SchedulingService(
        Settings(booking_data_store="memory"),
        availability_store=InMemoryAvailabilityStore(),
        appointment_store=InMemoryAppointmentStore(),
        user_store=_UnreachableUserStore(),
        notifier=notifier,
    )
    _open_day(service)

    appointment = service.book(_booking("13:00"))

    assert appointment.start_time == "13:00"
    assert notifier.sent == []
    assert len(service.list_appointments("1", BOOKING_DATE).items) == 1
    with pytest.raises(SlotTaken):
        service.book(_booking("13:00", client_email="bob@x.com"))


def test_booked_appointments_never_overlap(service: SchedulingService) -> None:
    _open_day(service)
    for start_time in ["09:00", "10:00", "09:00", "17:00", "10:00", "16:00"]:
        try:
            service.book(_booking(start_time))
        except SlotTaken:
            pass

    appointments = service.list_appointments("1", BOOKING_DATE).items
    assert [appointment.start_time for appointment in appointments] == ["09:00", "10:00", "16:00", "17:00"]
    for earlier, later in zip(appointments, appointments[1:]):
        assert earlier.end_time <= later.start_time


def test_unknown_stylist_name_falls_back_in_confirmation(
    service: SchedulingService,
    notifier: _RecordingNotifier,
) -> None:
    _open_day(service, stylist_id="42")

    service.book(_booking("09:00", stylist_id="42"))

    assert notifier.sent[0].stylist_name == "your stylist"


def test_remove_availability_is_idempotent(service: SchedulingService) -> None:
    _open_day(service)
    window_id = service.list_availability("1").items[0].id

    service.remove_availability("1", window_id)
    service.remove_availability("1", window_id)

    assert service.list_availability("1").items == []
    assert service.list_bookable_times("1", BOOKING_DATE).items == []


def test_cancel_appointment_frees_the_slot(service: SchedulingService) -> None:
    _open_day(service)
    appointment = service.book(_booking("09:00"))

    service.cancel_appointment("1", appointment.id)

    assert service.list_appointments("1").items == []
    service.book(_booking("09:00"))


def test_list_stylists_returns_only_stylists(
    service: SchedulingService,
    user_store: InMemoryUserStore,
) -> None:
    user_store.create_user(
        email="client@x.com",
        full_name="Client",
        password_hash="not-used",
        role="client",
    )

    response = service.list_stylists()

    assert [stylist.full_name for stylist in response.items] == ["Sam Stylist"]
