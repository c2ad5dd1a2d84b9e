from datetime import date

from pydantic import BaseModel, Field


class AppointmentCreateRequest(BaseModel):
    stylist_id: str = Field(min_length=1)
    date: date
    start_time: str = Field(min_length=1)
    client_name: str
    client_email: str


class Appointment(BaseModel):
    id: str
    stylist_id: str
    client_name: str
    client_email: str
    date: date
    start_time: str
    end_time: str


class AppointmentListResponse(BaseModel):
    items: list[Appointment] = Field(default_factory=list)
