from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.case_study import CaseStudy
from app.schemas.content import CaseStudyRead

router = APIRouter(prefix="/case-studies", tags=["case-studies"])


@router.get("", response_model=List[CaseStudyRead])
async def list_case_studies(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(CaseStudy).where(CaseStudy.is_published.is_(True)).order_by(CaseStudy.display_order)
    )
    return result.scalars().all()


@router.get("/{case_study_id}", response_model=CaseStudyRead)
async def get_case_study(case_study_id: UUID, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(CaseStudy).where(CaseStudy.id == case_study_id, CaseStudy.is_published.is_(True))
    )
    case_study = result.scalars().first()
    if case_study is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Case study not found")
    return case_study
