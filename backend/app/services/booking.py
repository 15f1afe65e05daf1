"""Calendar consultation bookings: a date and a one-hour slot."""
import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.consultation_booking import ConsultationBooking
from app.schemas.booking import BookingCreate
from app.services.email_service import _redact_email

logger = logging.getLogger(__name__)

SERVICE_TYPES = (
    "Contingency Placement",
    "Contract Services",
    "Resume Review & Career Coaching",
    "General Inquiry",
)

TIME_SLOTS = (
    "9:00 AM - 10:00 AM",
    "10:00 AM - 11:00 AM",
    "11:00 AM - 12:00 PM",
    "1:00 PM - 2:00 PM",
    "2:00 PM - 3:00 PM",
    "3:00 PM - 4:00 PM",
    "4:00 PM - 5:00 PM",
)

MAX_DAYS_AHEAD = 60


class BookingError(Exception):
    """A booking request that cannot be accepted as submitted."""


def booking_window(today: Optional[date] = None) -> tuple[date, date]:
    """First and last bookable dates: tomorrow through 60 days out."""
    today = today or date.today()
    return today + timedelta(days=1), today + timedelta(days=MAX_DAYS_AHEAD)


def check_booking(data: BookingCreate, today: Optional[date] = None) -> None:
    if data.service_type not in SERVICE_TYPES:
        raise BookingError("Please select a valid service type")
    if data.consultation_time not in TIME_SLOTS:
        raise BookingError("Please select one of the available time slots")
    first, last = booking_window(today)
    if not first <= data.consultation_date <= last:
        raise BookingError(
            f"Consultations can be booked between {first.isoformat()} and {last.isoformat()}"
        )


async def create_booking(db: AsyncSession, data: BookingCreate, today: Optional[date] = None) -> ConsultationBooking:
    check_booking(data, today)
    booking = ConsultationBooking(**data.model_dump())
    db.add(booking)
    try:
        await db.flush()
    except SQLAlchemyError as e:
        logger.error(f"Failed to save booking: {type(e).__name__}: {e}")
        raise
    logger.info(
        f"Consultation booked for {_redact_email(data.email)} on {data.consultation_date} at {data.consultation_time}"
    )
    return booking
