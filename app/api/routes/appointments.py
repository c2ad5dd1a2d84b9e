from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status

from app.schemas.appointment import Appointment, AppointmentCreateRequest, AppointmentListResponse
from app.schemas.auth import CurrentUserResponse
from app.services.auth_service import require_stylist
from app.services.scheduling_service import SchedulingService, get_scheduling_service

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post(
    "",
    response_model=Appointment,
    status_code=status.HTTP_201_CREATED,
)
def book_appointment(
    payload: AppointmentCreateRequest,
    service: SchedulingService = Depends(get_scheduling_service),
) -> Appointment:
    return service.book(payload)


@router.get("", response_model=AppointmentListResponse)
def list_my_appointments(
    day: date | None = Query(default=None, alias="date"),
    current_user: CurrentUserResponse = Depends(require_stylist),
    service: SchedulingService = Depends(get_scheduling_service),
) -> AppointmentListResponse:
    return service.list_appointments(current_user.id, day)


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_appointment(
    appointment_id: str,
    current_user: CurrentUserResponse = Depends(require_stylist),
    service: SchedulingService = Depends(get_scheduling_service),
) -> Response:
    service.cancel_appointment(current_user.id, appointment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
