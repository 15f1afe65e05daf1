from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.testimonial import Testimonial
from app.schemas.content import TestimonialRead

router = APIRouter(prefix="/testimonials", tags=["testimonials"])


@router.get("", response_model=List[TestimonialRead])
async def list_testimonials(featured: bool = False, db: AsyncSession = Depends(get_db)):
    """Testimonials in display order; ``featured=true`` limits to the home page set."""
    query = select(Testimonial)
    if featured:
        query = query.where(Testimonial.is_featured.is_(True))
    result = await db.execute(query.order_by(Testimonial.display_order))
    return result.scalars().all()
