from typing import Literal

from pydantic import BaseModel


class PricingRequest(BaseModel):
    service_type: Literal["contingency", "contract", "coaching"]
    annual_salary: int = 100_000
    contract_hours: int = 120
    coaching_sessions: int = 1


class PricingEstimate(BaseModel):
    service_type: str
    amount: int
    formatted: str
    description: str
