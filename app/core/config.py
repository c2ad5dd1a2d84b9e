from functools import lru_cache
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

ALLOWED_ENV_FIELD_NAMES = frozenset(
    {
        "app_name",
        "app_env",
        "app_version",
        "api_prefix",
        "allowed_origins",
        "booking_data_store",
        "mongodb_uri",
        "mongodb_db_name",
        "mongodb_availability_collection",
        "mongodb_appointments_collection",
        "mongodb_users_collection",
        "mongodb_connect_timeout_ms",
        "auth_secret_key",
        "auth_token_ttl_minutes",
        "appointment_duration_minutes",
        "slot_buffer_minutes",
        "slot_include_window_end",
        "notifications_enabled",
        "sendgrid_api_url",
        "sendgrid_api_key",
        "email_from_address",
        "email_api_timeout_seconds",
    },
)


class Settings(BaseSettings):
    app_name: str = "Salon Booking API"
    app_env: str = "development"
    app_version: str = "0.1.0"
    api_prefix: str = "/api"
    allowed_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    booking_data_store: str = "mongodb"
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "salon_booking"
    mongodb_availability_collection: str = "availabilities"
    mongodb_appointments_collection: str = "appointments"
    mongodb_users_collection: str = "users"
    mongodb_connect_timeout_ms: int = 2000
    auth_secret_key: str = "change-me-in-production"
    auth_token_ttl_minutes: int = 60 * 12
    appointment_duration_minutes: int = 45
    slot_buffer_minutes: int = 15
    slot_include_window_end: bool = True
    notifications_enabled: bool = True
    sendgrid_api_url: str = "https://api.sendgrid.com/v3"
    sendgrid_api_key: str = ""
    email_from_address: str = "appointments@hairstylist.com"
    email_api_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        def _filter_allowed_env_fields(source):
            return {
                field_name: raw_value
                for field_name, raw_value in source().items()
                if field_name in ALLOWED_ENV_FIELD_NAMES
            }

        return (
            init_settings,
            lambda: _filter_allowed_env_fields(env_settings),
            lambda: _filter_allowed_env_fields(dotenv_settings),
            file_secret_settings,
        )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("booking_data_store", mode="before")
    @classmethod
    def normalize_booking_data_store(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("appointment_duration_minutes", mode="before")
    @classmethod
    def normalize_appointment_duration(cls, value: int | str) -> int:
        parsed_value = int(value)
        if parsed_value <= 0:
            return 45
        return parsed_value

    @field_validator("slot_buffer_minutes", mode="before")
    @classmethod
    def normalize_slot_buffer(cls, value: int | str) -> int:
        parsed_value = int(value)
        if parsed_value < 0:
            return 15
        return parsed_value

    @field_validator("email_api_timeout_seconds", mode="before")
    @classmethod
    def normalize_email_timeout(cls, value: float | str) -> float:
        parsed_value = float(value)
        if parsed_value <= 0:
            return 10.0
        return parsed_value

    @field_validator("auth_token_ttl_minutes", mode="before")
    @classmethod
    def normalize_auth_token_ttl(cls, value: int | str) -> int:
        parsed_value = int(value)
        if parsed_value <= 0:
            return 60 * 12
        return parsed_value


@lru_cache
def get_settings() -> Settings:
    return Settings()
