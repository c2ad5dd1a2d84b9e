from datetime import UTC, datetime

from app.core.config import Settings
from app.core.resources import BookingResources
from app.schemas.health import HealthResponse


class HealthService:
    def __init__(self, settings: Settings, resources: BookingResources | None) -> None:
        self.settings = settings
        self.resources = resources

    def get_status(self) -> HealthResponse:
        return HealthResponse(
            status="ok" if self.resources is not None else "starting",
            service=self.settings.app_name,
            version=self.settings.app_version,
            environment=self.settings.app_env,
            data_store=self.settings.booking_data_store,
            timestamp=datetime.now(UTC),
        )
