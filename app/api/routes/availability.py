from fastapi import APIRouter, Depends, Response, status

from app.schemas.auth import CurrentUserResponse
from app.schemas.availability import AvailabilityCreateRequest, AvailabilityWindow
from app.services.auth_service import require_stylist
from app.services.scheduling_service import SchedulingService, get_scheduling_service

router = APIRouter(prefix="/availability", tags=["availability"])


@router.post(
    "",
    response_model=AvailabilityWindow,
    status_code=status.HTTP_201_CREATED,
)
def create_availability(
    payload: AvailabilityCreateRequest,
    current_user: CurrentUserResponse = Depends(require_stylist),
    service: SchedulingService = Depends(get_scheduling_service),
) -> AvailabilityWindow:
    return service.add_availability(current_user.id, payload)


@router.delete("/{window_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_availability(
    window_id: str,
    current_user: CurrentUserResponse = Depends(require_stylist),
    service: SchedulingService = Depends(get_scheduling_service),
) -> Response:
    service.remove_availability(current_user.id, window_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
