from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class BookingCreate(BaseModel):
    full_name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: str | None = Field(None, max_length=50)
    company: str | None = Field(None, max_length=255)
    service_type: str
    consultation_date: date
    consultation_time: str
    message: str | None = Field(None, max_length=1000)


class BookingRead(BaseModel):
    id: UUID
    full_name: str
    email: str
    service_type: str
    consultation_date: date
    consultation_time: str
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingSlots(BaseModel):
    service_types: list[str]
    time_slots: list[str]
    earliest_date: date
    latest_date: date
