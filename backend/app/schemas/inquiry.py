from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.services.inquiry_validation import (
    validate_email,
    validate_full_name,
    validate_message,
    validate_phone,
)

InquiryType = Literal["consultation", "contingency_placement", "contract_services", "coaching", "general"]
ContactMethod = Literal["email", "phone", "either"]
Urgency = Literal["immediate", "within-week", "within-month", "flexible"]

INQUIRY_TYPE_LABELS = {
    "consultation": "General Consultation",
    "contingency_placement": "Contingency Placement",
    "contract_services": "In-house Contract Services",
    "coaching": "Resume/Coaching Services",
    "general": "General Inquiry",
}

URGENCY_LABELS = {
    "immediate": "Immediate",
    "within-week": "Within a Week",
    "within-month": "Within a Month",
    "flexible": "Flexible",
}


def _check(validator, value):
    message = validator(value)
    if message:
        raise ValueError(message)
    return value


class ConsultationInquiryCreate(BaseModel):
    full_name: str
    email: str
    phone: str | None = None
    company_name: str | None = None
    job_title: str | None = None
    inquiry_type: InquiryType
    message: str | None = None
    preferred_contact: ContactMethod = "email"
    urgency: Urgency = "flexible"

    @field_validator("full_name", "email", mode="before")
    @classmethod
    def strip_required(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("inquiry_type", "preferred_contact", "urgency", mode="before")
    @classmethod
    def strip_choice(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("phone", "company_name", "job_title", "message", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        # Phone numbers often arrive as JSON numbers
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            v = str(v)
        if isinstance(v, str):
            return v.strip() or None
        return v

    @field_validator("full_name")
    @classmethod
    def check_full_name(cls, v):
        return _check(validate_full_name, v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return _check(validate_email, v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return _check(validate_phone, v)

    @field_validator("message")
    @classmethod
    def check_message(cls, v):
        return _check(validate_message, v)


class ConsultationInquiryRead(ConsultationInquiryCreate):
    id: UUID | str
    created_at: datetime | str

    model_config = {"from_attributes": True}


class StoredInquiry(BaseModel):
    """A stored row as returned to staff; read back without re-validation."""

    id: UUID | str
    created_at: datetime | str
    full_name: str
    email: str
    phone: str | None = None
    company_name: str | None = None
    job_title: str | None = None
    inquiry_type: str
    message: str | None = None
    preferred_contact: str | None = None
    urgency: str | None = None


class NotificationResult(BaseModel):
    success: bool
    message: str


class RateLimitInfo(BaseModel):
    allowed: bool
    remaining: int
    max_per_window: int
    window_minutes: int
    reset_in_minutes: int | None = None
    reset_at: datetime | None = None


class DraftResponse(BaseModel):
    draft: dict[str, str] | None
    restored: bool
    notice: str | None = None


class DraftSaveRequest(BaseModel):
    form: dict[str, str] = Field(default_factory=dict)


class DraftSaveResponse(BaseModel):
    saved: bool
