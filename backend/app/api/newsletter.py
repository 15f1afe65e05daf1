import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.database import get_db
from app.models.newsletter_subscriber import NewsletterSubscriber
from app.schemas.newsletter import NewsletterSubscribeRequest, NewsletterSubscribeResponse
from app.services.email_service import _redact_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/newsletter", tags=["newsletter"])

ALREADY_SUBSCRIBED = "This email is already subscribed"


@router.post("/subscribe", response_model=NewsletterSubscribeResponse, status_code=status.HTTP_201_CREATED)
async def subscribe(data: NewsletterSubscribeRequest, db: AsyncSession = Depends(get_db)):
    """Subscribe to the newsletter. No authentication required."""
    email = data.email.lower()
    result = await db.execute(
        select(NewsletterSubscriber).where(NewsletterSubscriber.email == email)
    )
    if result.scalars().first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_SUBSCRIBED)

    try:
        db.add(NewsletterSubscriber(email=email))
        await db.flush()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same address
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_SUBSCRIBED)
    except SQLAlchemyError as e:
        logger.error(f"Failed to subscribe {_redact_email(email)}: {type(e).__name__}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to subscribe. Please try again.",
        )

    logger.info(f"Newsletter subscription for {_redact_email(email)}")
    return NewsletterSubscribeResponse(
        message="Successfully subscribed to our newsletter!",
        email=email,
    )
