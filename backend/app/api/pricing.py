from fastapi import APIRouter, HTTPException, status

from app.schemas.pricing import PricingEstimate, PricingRequest
from app.services.pricing import PricingError, estimate

router = APIRouter(prefix="/pricing", tags=["pricing"])


@router.post("/estimate", response_model=PricingEstimate)
async def estimate_price(data: PricingRequest):
    try:
        return estimate(
            data.service_type,
            annual_salary=data.annual_salary,
            contract_hours=data.contract_hours,
            coaching_sessions=data.coaching_sessions,
        )
    except PricingError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
