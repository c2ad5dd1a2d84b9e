import threading

import pytest

from app.services.appointment_store import InMemoryAppointmentStore
from app.services.scheduling_errors import SlotTaken


@pytest.fixture
def store() -> InMemoryAppointmentStore:
    return InMemoryAppointmentStore()


def _insert(store: InMemoryAppointmentStore, start_time: str = "09:00", **overrides: str) -> dict:
    values = {
        "stylist_id": "1",
        "client_name": "Ann",
        "client_email": "Ann@X.com",
        "date": "2024-06-10",
        "start_time": start_time,
        "end_time": "09:45",
    }
    values.update(overrides)
    return store.insert_appointment(**values)


def test_insert_appointment_stores_normalized_record(store: InMemoryAppointmentStore) -> None:
    appointment = _insert(store)

    assert appointment["_id"] == "1"
    assert appointment["client_email"] == "ann@x.com"
    assert store.get_appointment("1") == appointment
    assert store.list_appointments("1", "2024-06-10") == [appointment]


def test_insert_rejects_same_stylist_date_and_start(store: InMemoryAppointmentStore) -> None:
    _insert(store)

    with pytest.raises(SlotTaken):
        _insert(store, start_time="9:00", client_name="Bob", client_email="bob@x.com")

    _insert(store, stylist_id="2")
    _insert(store, date="2024-06-11")


def test_concurrent_inserts_for_one_slot_store_exactly_one(store: InMemoryAppointmentStore) -> None:
    outcomes: list[str] = []
    barrier = threading.Barrier(8)

    def book(index: int) -> None:
        barrier.wait()
        try:
            _insert(store, client_email=f"client{index}@x.com")
            outcomes.append("stored")
        except SlotTaken:
            outcomes.append("taken")

    threads = [threading.Thread(target=book, args=(index,)) for index in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count("stored") == 1
    assert outcomes.count("taken") == 7
    assert len(store.list_appointments("1", "2024-06-10")) == 1


def test_appointments_are_listed_in_start_order(store: InMemoryAppointmentStore) -> None:
    _insert(store, start_time="11:00", end_time="11:45")
    _insert(store, start_time="09:00", end_time="09:45")
    _insert(store, start_time="10:00", end_time="10:45", date="2024-06-09")

    same_day = store.list_appointments("1", "2024-06-10")
    every_day = store.list_appointments_for_stylist("1")

    assert [appointment["start_time"] for appointment in same_day] == ["09:00", "11:00"]
    assert [appointment["date"] for appointment in every_day] == [
        "2024-06-09",
        "2024-06-10",
        "2024-06-10",
    ]


def test_delete_appointment_is_idempotent_and_releases_slot(store: InMemoryAppointmentStore) -> None:
    appointment = _insert(store)

    store.delete_appointment(appointment["_id"])
    store.delete_appointment(appointment["_id"])

    assert store.get_appointment(appointment["_id"]) is None
    _insert(store)
