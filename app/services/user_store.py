from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from app.core.config import Settings
from app.services.scheduling_errors import StorageUnavailable

STYLIST_ROLE = "stylist"
CLIENT_ROLE = "client"


class UserStore(ABC):
    @abstractmethod
    def get_user_by_id(self, user_id: str) -> dict[str, Any] | None:
        raise NotImplementedError

    @abstractmethod
    def get_user_by_email(self, email: str) -> dict[str, Any] | None:
        raise NotImplementedError

    @abstractmethod
    def create_user(
        self,
        *,
        email: str,
        full_name: str,
        password_hash: str,
        role: str,
    ) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def list_users_by_role(self, role: str) -> list[dict[str, Any]]:
        raise NotImplementedError

    def close(self) -> None:
        return None


class InMemoryUserStore(UserStore):
    def __init__(self) -> None:
        self._next_id = 1
        self._users_by_id: dict[str, dict[str, Any]] = {}
        self._user_id_by_email: dict[str, str] = {}

    def get_user_by_id(self, user_id: str) -> dict[str, Any] | None:
        user = self._users_by_id.get(user_id)
        if not user:
            return None
        return dict(user)

    def get_user_by_email(self, email: str) -> dict[str, Any] | None:
        user_id = self._user_id_by_email.get(_normalize_email(email))
        if not user_id:
            return None
        return self.get_user_by_id(user_id)

    def create_user(
        self,
        *,
        email: str,
        full_name: str,
        password_hash: str,
        role: str,
    ) -> dict[str, Any]:
        normalized_email = _normalize_email(email)
        if normalized_email in self._user_id_by_email:
            raise ValueError("email_already_exists")

        user_id = str(self._next_id)
        self._next_id += 1
        now = datetime.now(UTC)
        user = {
            "_id": user_id,
            "email": normalized_email,
            "full_name": full_name.strip(),
            "password_hash": password_hash,
            "role": role.strip().lower(),
            "created_at": now,
            "updated_at": now,
        }
        self._users_by_id[user_id] = user
        self._user_id_by_email[normalized_email] = user_id
        return dict(user)

    def list_users_by_role(self, role: str) -> list[dict[str, Any]]:
        normalized_role = role.strip().lower()
        users = [
            dict(user)
            for user in self._users_by_id.values()
            if user.get("role") == normalized_role
        ]
        users.sort(key=lambda user: str(user.get("full_name", "")).lower())
        return users


class MongoUserStore(UserStore):
    def __init__(
        self,
        *,
        uri: str,
        db_name: str,
        users_collection_name: str,
        connect_timeout_ms: int = 2000,
    ) -> None:
        from pymongo import MongoClient

        self._client = MongoClient(
            uri,
            serverSelectionTimeoutMS=connect_timeout_ms,
            connectTimeoutMS=connect_timeout_ms,
        )
        self._users = self._client[db_name][users_collection_name]
        self._users.create_index("email", unique=True)
        self._users.create_index("role")

    def get_user_by_id(self, user_id: str) -> dict[str, Any] | None:
        from bson import ObjectId
        from bson.errors import InvalidId
        from pymongo.errors import PyMongoError

        try:
            object_id = ObjectId(user_id)
        except (InvalidId, TypeError):
            return None
        try:
            record = self._users.find_one({"_id": object_id})
        except PyMongoError as exc:
            raise StorageUnavailable() from exc
        return _serialize_user_record(record)

    def get_user_by_email(self, email: str) -> dict[str, Any] | None:
        from pymongo.errors import PyMongoError

        try:
            record = self._users.find_one({"email": _normalize_email(email)})
        except PyMongoError as exc:
            raise StorageUnavailable() from exc
        return _serialize_user_record(record)

    def create_user(
        self,
        *,
        email: str,
        full_name: str,
        password_hash: str,
        role: str,
    ) -> dict[str, Any]:
        from pymongo.errors import DuplicateKeyError, PyMongoError

        now = datetime.now(UTC)
        payload = {
            "email": _normalize_email(email),
            "full_name": full_name.strip(),
            "password_hash": password_hash,
            "role": role.strip().lower(),
            "created_at": now,
            "updated_at": now,
        }
        try:
            insert_result = self._users.insert_one(payload)
        except DuplicateKeyError as exc:
            raise ValueError("email_already_exists") from exc
        except PyMongoError as exc:
            raise StorageUnavailable() from exc
        payload["_id"] = insert_result.inserted_id
        return _serialize_user_record(payload) or {}

    def list_users_by_role(self, role: str) -> list[dict[str, Any]]:
        from pymongo.errors import PyMongoError

        try:
            records = list(self._users.find({"role": role.strip().lower()}).sort("full_name", 1))
        except PyMongoError as exc:
            raise StorageUnavailable() from exc
        return [
            serialized
            for serialized in (_serialize_user_record(record) for record in records)
            if serialized
        ]

    def close(self) -> None:
        self._client.close()


def _serialize_user_record(record: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if not record:
        return None
    serialized = dict(record)
    serialized["_id"] = str(record.get("_id", ""))
    return serialized


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def create_user_store(settings: Settings) -> UserStore:
    if settings.booking_data_store == "mongodb":
        return MongoUserStore(
            uri=settings.mongodb_uri,
            db_name=settings.mongodb_db_name,
            users_collection_name=settings.mongodb_users_collection,
            connect_timeout_ms=settings.mongodb_connect_timeout_ms,
        )

    return InMemoryUserStore()
