from datetime import date

from pydantic import BaseModel, Field


class BookableSlot(BaseModel):
    start_time: str
    end_time: str
    available: bool


class BookableTimesResponse(BaseModel):
    stylist_id: str
    date: date
    items: list[BookableSlot] = Field(default_factory=list)


class StylistSummary(BaseModel):
    id: str
    full_name: str


class StylistListResponse(BaseModel):
    items: list[StylistSummary] = Field(default_factory=list)
