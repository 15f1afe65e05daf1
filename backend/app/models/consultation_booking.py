import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class ConsultationBooking(Base):
    __tablename__ = "consultation_bookings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    company = Column(String(255), nullable=True)
    service_type = Column(String(60), nullable=False)
    consultation_date = Column(Date, nullable=False)
    consultation_time = Column(String(30), nullable=False)
    message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
