from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import UTC, date, datetime
from typing import Any

from app.core.config import Settings
from app.services.scheduling_errors import SlotTaken, StorageUnavailable
from app.services.time_math import normalize_time, parse_date, parse_time


class AppointmentStore(ABC):
    """
    Persistence for booked appointments.

    ``insert_appointment`` must reject a second appointment for the same
    ``(stylist_id, date, start_time)`` atomically by raising ``SlotTaken``;
    the booking flow relies on it to close the read-then-write race.
    """

    @abstractmethod
    def insert_appointment(
        self,
        *,
        stylist_id: str,
        client_name: str,
        client_email: str,
        date: str | date,
        start_time: str,
        end_time: str,
    ) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def list_appointments(self, stylist_id: str, date: str | date) -> list[dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def list_appointments_for_stylist(self, stylist_id: str) -> list[dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def get_appointment(self, appointment_id: str) -> dict[str, Any] | None:
        raise NotImplementedError

    @abstractmethod
    def delete_appointment(self, appointment_id: str) -> None:
        raise NotImplementedError

    def close(self) -> None:
        return None


class InMemoryAppointmentStore(AppointmentStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._next_id = 1
        self._appointments_by_id: dict[str, dict[str, Any]] = {}
        self._appointment_id_by_slot: dict[tuple[str, str, str], str] = {}

    def insert_appointment(
        self,
        *,
        stylist_id: str,
        client_name: str,
        client_email: str,
        date: str | date,
        start_time: str,
        end_time: str,
    ) -> dict[str, Any]:
        appointment = _build_appointment_document(
            stylist_id=stylist_id,
            client_name=client_name,
            client_email=client_email,
            date=date,
            start_time=start_time,
            end_time=end_time,
        )
        key = (appointment["stylist_id"], appointment["date"], appointment["start_time"])
        with self._lock:
            if key in self._appointment_id_by_slot:
                raise SlotTaken()
            appointment_id = str(self._next_id)
            self._next_id += 1
            appointment["_id"] = appointment_id
            self._appointments_by_id[appointment_id] = appointment
            self._appointment_id_by_slot[key] = appointment_id
        return dict(appointment)

    def list_appointments(self, stylist_id: str, date: str | date) -> list[dict[str, Any]]:
        normalized_stylist_id = stylist_id.strip()
        normalized_date = parse_date(date).isoformat()
        with self._lock:
            appointments = [
                dict(appointment)
                for appointment in self._appointments_by_id.values()
                if appointment["stylist_id"] == normalized_stylist_id
                and appointment["date"] == normalized_date
            ]
        return _sort_appointments(appointments)

    def list_appointments_for_stylist(self, stylist_id: str) -> list[dict[str, Any]]:
        normalized_stylist_id = stylist_id.strip()
        with self._lock:
            appointments = [
                dict(appointment)
                for appointment in self._appointments_by_id.values()
                if appointment["stylist_id"] == normalized_stylist_id
            ]
        return _sort_appointments(appointments)

    def get_appointment(self, appointment_id: str) -> dict[str, Any] | None:
        with self._lock:
            appointment = self._appointments_by_id.get(appointment_id)
            if not appointment:
                return None
            return dict(appointment)

    def delete_appointment(self, appointment_id: str) -> None:
        with self._lock:
            appointment = self._appointments_by_id.pop(appointment_id, None)
            if not appointment:
                return
            self._appointment_id_by_slot.pop(
                (appointment["stylist_id"], appointment["date"], appointment["start_time"]),
                None,
            )


class MongoAppointmentStore(AppointmentStore):
    def __init__(
        self,
        *,
        uri: str,
        db_name: str,
        collection_name: str,
        connect_timeout_ms: int = 2000,
    ) -> None:
        from pymongo import ASCENDING, MongoClient

        self._client = MongoClient(
            uri,
            serverSelectionTimeoutMS=connect_timeout_ms,
            connectTimeoutMS=connect_timeout_ms,
        )
        self._collection = self._client[db_name][collection_name]
        self._collection.create_index(
            [("stylist_id", ASCENDING), ("date", ASCENDING), ("start_time", ASCENDING)],
            unique=True,
        )

    def insert_appointment(
        self,
        *,
        stylist_id: str,
        client_name: str,
        client_email: str,
        date: str | date,
        start_time: str,
        end_time: str,
    ) -> dict[str, Any]:
        from pymongo.errors import DuplicateKeyError, PyMongoError

        appointment = _build_appointment_document(
            stylist_id=stylist_id,
            client_name=client_name,
            client_email=client_email,
            date=date,
            start_time=start_time,
            end_time=end_time,
        )
        try:
            insert_result = self._collection.insert_one(appointment)
        except DuplicateKeyError as exc:
            raise SlotTaken() from exc
        except PyMongoError as exc:
            raise StorageUnavailable() from exc
        appointment["_id"] = insert_result.inserted_id
        return _serialize_appointment_record(appointment) or {}

    def list_appointments(self, stylist_id: str, date: str | date) -> list[dict[str, Any]]:
        return self._find_many(
            {
                "stylist_id": stylist_id.strip(),
                "date": parse_date(date).isoformat(),
            },
        )

    def list_appointments_for_stylist(self, stylist_id: str) -> list[dict[str, Any]]:
        return self._find_many({"stylist_id": stylist_id.strip()})

    def get_appointment(self, appointment_id: str) -> dict[str, Any] | None:
        from pymongo.errors import PyMongoError

        object_id = _to_object_id(appointment_id)
        if object_id is None:
            return None
        try:
            record = self._collection.find_one({"_id": object_id})
        except PyMongoError as exc:
            raise StorageUnavailable() from exc
        return _serialize_appointment_record(record)

    def delete_appointment(self, appointment_id: str) -> None:
        from pymongo.errors import PyMongoError

        object_id = _to_object_id(appointment_id)
        if object_id is None:
            return
        try:
            self._collection.delete_one({"_id": object_id})
        except PyMongoError as exc:
            raise StorageUnavailable() from exc

    def close(self) -> None:
        self._client.close()

    def _find_many(self, query: Mapping[str, Any]) -> list[dict[str, Any]]:
        from pymongo.errors import PyMongoError

        try:
            records = list(self._collection.find(dict(query)))
        except PyMongoError as exc:
            raise StorageUnavailable() from exc
        appointments = [
            serialized
            for serialized in (_serialize_appointment_record(record) for record in records)
            if serialized
        ]
        return _sort_appointments(appointments)


def _build_appointment_document(
    *,
    stylist_id: str,
    client_name: str,
    client_email: str,
    date: str | date,
    start_time: str,
    end_time: str,
) -> dict[str, Any]:
    return {
        "stylist_id": stylist_id.strip(),
        "client_name": client_name.strip(),
        "client_email": client_email.strip().lower(),
        "date": parse_date(date).isoformat(),
        "start_time": normalize_time(start_time),
        "end_time": normalize_time(end_time),
        "created_at": datetime.now(UTC),
    }


def _sort_appointments(appointments: list[dict[str, Any]]) -> list[dict[str, Any]]:
    appointments.sort(
        key=lambda appointment: (appointment["date"], parse_time(appointment["start_time"])),
    )
    return appointments


def _serialize_appointment_record(record: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if not record:
        return None
    serialized = dict(record)
    serialized["_id"] = str(record.get("_id", ""))
    return serialized


def _to_object_id(record_id: str):
    from bson import ObjectId
    from bson.errors import InvalidId

    try:
        return ObjectId(record_id)
    except (InvalidId, TypeError):
        return None


def create_appointment_store(settings: Settings) -> AppointmentStore:
    if settings.booking_data_store == "mongodb":
        return MongoAppointmentStore(
            uri=settings.mongodb_uri,
            db_name=settings.mongodb_db_name,
            collection_name=settings.mongodb_appointments_collection,
            connect_timeout_ms=settings.mongodb_connect_timeout_ms,
        )

    return InMemoryAppointmentStore()
