from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import UTC, date, datetime
from typing import Any

from app.core.config import Settings
from app.services.scheduling_errors import DuplicateWindow, InvalidWindow, StorageUnavailable
from app.services.time_math import normalize_time, parse_date, parse_time


class AvailabilityStore(ABC):
    @abstractmethod
    def add_window(
        self,
        *,
        stylist_id: str,
        date: str | date,
        start_time: str,
        end_time: str,
    ) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def remove_window(self, window_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_window(self, stylist_id: str, date: str | date) -> dict[str, Any] | None:
        raise NotImplementedError

    @abstractmethod
    def get_window_by_id(self, window_id: str) -> dict[str, Any] | None:
        raise NotImplementedError

    @abstractmethod
    def list_windows(self, stylist_id: str) -> list[dict[str, Any]]:
        raise NotImplementedError

    def close(self) -> None:
        return None


class InMemoryAvailabilityStore(AvailabilityStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._next_id = 1
        self._windows_by_id: dict[str, dict[str, Any]] = {}
        self._window_id_by_stylist_date: dict[tuple[str, str], str] = {}

    def add_window(
        self,
        *,
        stylist_id: str,
        date: str | date,
        start_time: str,
        end_time: str,
    ) -> dict[str, Any]:
        window = _build_window_document(
            stylist_id=stylist_id,
            date=date,
            start_time=start_time,
            end_time=end_time,
        )
        key = (window["stylist_id"], window["date"])
        with self._lock:
            if key in self._window_id_by_stylist_date:
                raise DuplicateWindow()

            window_id = str(self._next_id)
            self._next_id += 1
            window["_id"] = window_id
            self._windows_by_id[window_id] = window
            self._window_id_by_stylist_date[key] = window_id
            return dict(window)

    def remove_window(self, window_id: str) -> None:
        with self._lock:
            window = self._windows_by_id.pop(window_id, None)
            if not window:
                return
            self._window_id_by_stylist_date.pop((window["stylist_id"], window["date"]), None)

    def get_window(self, stylist_id: str, date: str | date) -> dict[str, Any] | None:
        key = (stylist_id.strip(), parse_date(date).isoformat())
        with self._lock:
            window_id = self._window_id_by_stylist_date.get(key)
            window = self._windows_by_id.get(window_id) if window_id else None
            return dict(window) if window else None

    def get_window_by_id(self, window_id: str) -> dict[str, Any] | None:
        with self._lock:
            window = self._windows_by_id.get(window_id)
            return dict(window) if window else None

    def list_windows(self, stylist_id: str) -> list[dict[str, Any]]:
        normalized_stylist_id = stylist_id.strip()
        with self._lock:
            windows = [
                dict(window)
                for window in self._windows_by_id.values()
                if window.get("stylist_id") == normalized_stylist_id
            ]
        windows.sort(key=lambda window: (window["date"], parse_time(window["start_time"])))
        return windows


class MongoAvailabilityStore(AvailabilityStore):
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
            [("stylist_id", ASCENDING), ("date", ASCENDING)],
            unique=True,
        )

    def add_window(
        self,
        *,
        stylist_id: str,
        date: str | date,
        start_time: str,
        end_time: str,
    ) -> dict[str, Any]:
        from pymongo.errors import DuplicateKeyError, PyMongoError

        window = _build_window_document(
            stylist_id=stylist_id,
            date=date,
            start_time=start_time,
            end_time=end_time,
        )
        try:
            insert_result = self._collection.insert_one(window)
        except DuplicateKeyError as exc:
            raise DuplicateWindow() from exc
        except PyMongoError as exc:
            raise StorageUnavailable() from exc
        window["_id"] = insert_result.inserted_id
        return _serialize_window_record(window) or {}

    def remove_window(self, window_id: str) -> None:
        from pymongo.errors import PyMongoError

        object_id = _to_object_id(window_id)
        if object_id is None:
            return
        try:
            self._collection.delete_one({"_id": object_id})
        except PyMongoError as exc:
            raise StorageUnavailable() from exc

    def get_window(self, stylist_id: str, date: str | date) -> dict[str, Any] | None:
        from pymongo.errors import PyMongoError

        try:
            record = self._collection.find_one(
                {
                    "stylist_id": stylist_id.strip(),
                    "date": parse_date(date).isoformat(),
                },
            )
        except PyMongoError as exc:
            raise StorageUnavailable() from exc
        return _serialize_window_record(record)

    def get_window_by_id(self, window_id: str) -> dict[str, Any] | None:
        from pymongo.errors import PyMongoError

        object_id = _to_object_id(window_id)
        if object_id is None:
            return None
        try:
            record = self._collection.find_one({"_id": object_id})
        except PyMongoError as exc:
            raise StorageUnavailable() from exc
        return _serialize_window_record(record)

    def list_windows(self, stylist_id: str) -> list[dict[str, Any]]:
        from pymongo.errors import PyMongoError

        try:
            cursor = self._collection.find({"stylist_id": stylist_id.strip()}).sort("date", 1)
            records = list(cursor)
        except PyMongoError as exc:
            raise StorageUnavailable() from exc
        return [
            serialized
            for serialized in (_serialize_window_record(record) for record in records)
            if serialized
        ]

    def close(self) -> None:
        self._client.close()


def _build_window_document(
    *,
    stylist_id: str,
    date: str | date,
    start_time: str,
    end_time: str,
) -> dict[str, Any]:
    normalized_start = normalize_time(start_time)
    normalized_end = normalize_time(end_time)
    if parse_time(normalized_start) >= parse_time(normalized_end):
        raise InvalidWindow()
    return {
        "stylist_id": stylist_id.strip(),
        "date": parse_date(date).isoformat(),
        "start_time": normalized_start,
        "end_time": normalized_end,
        "created_at": datetime.now(UTC),
    }


def _serialize_window_record(record: Mapping[str, Any] | None) -> dict[str, Any] | None:
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


def create_availability_store(settings: Settings) -> AvailabilityStore:
    if settings.booking_data_store == "mongodb":
        return MongoAvailabilityStore(
            uri=settings.mongodb_uri,
            db_name=settings.mongodb_db_name,
            collection_name=settings.mongodb_availability_collection,
            connect_timeout_ms=settings.mongodb_connect_timeout_ms,
        )

    return InMemoryAvailabilityStore()
