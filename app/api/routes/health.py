from fastapi import APIRouter, Depends, Request

from app.core.config import Settings, get_settings
from app.schemas.health import HealthResponse
from app.services.health_service import HealthService

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def healthcheck(request: Request, settings: Settings = Depends(get_settings)) -> HealthResponse:
    resources = getattr(request.app.state, "booking_resources", None)
    return HealthService(settings, resources).get_status()
