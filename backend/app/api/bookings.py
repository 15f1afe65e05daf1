from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.booking import BookingCreate, BookingRead, BookingSlots
from app.services.booking import SERVICE_TYPES, TIME_SLOTS, BookingError, booking_window, create_booking

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/slots", response_model=BookingSlots)
async def list_slots():
    earliest, latest = booking_window()
    return BookingSlots(
        service_types=list(SERVICE_TYPES),
        time_slots=list(TIME_SLOTS),
        earliest_date=earliest,
        latest_date=latest,
    )


@router.post("", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
async def book_consultation(data: BookingCreate, db: AsyncSession = Depends(get_db)):
    """Book a consultation slot. No authentication required."""
    try:
        return await create_booking(db, data)
    except BookingError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
