from datetime import date

from fastapi import APIRouter, Depends, Query

from app.schemas.availability import AvailabilityListResponse
from app.schemas.scheduling import BookableTimesResponse, StylistListResponse
from app.services.scheduling_service import SchedulingService, get_scheduling_service

router = APIRouter(prefix="/stylists", tags=["stylists"])


@router.get("", response_model=StylistListResponse)
def list_stylists(
    service: SchedulingService = Depends(get_scheduling_service),
) -> StylistListResponse:
    return service.list_stylists()


@router.get("/{stylist_id}/availability", response_model=AvailabilityListResponse)
def list_stylist_availability(
    stylist_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
) -> AvailabilityListResponse:
    return service.list_availability(stylist_id)


@router.get("/{stylist_id}/bookable-times", response_model=BookableTimesResponse)
def list_bookable_times(
    stylist_id: str,
    day: date = Query(..., alias="date"),
    service: SchedulingService = Depends(get_scheduling_service),
) -> BookableTimesResponse:
    return service.list_bookable_times(stylist_id, day)
