from datetime import date

from pydantic import BaseModel, Field


class AvailabilityCreateRequest(BaseModel):
    date: date
    start_time: str = Field(min_length=1)
    end_time: str = Field(min_length=1)


class AvailabilityWindow(BaseModel):
    id: str
    stylist_id: str
    date: date
    start_time: str
    end_time: str


class AvailabilityListResponse(BaseModel):
    items: list[AvailabilityWindow] = Field(default_factory=list)
