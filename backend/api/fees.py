"""
Concrete Station Approval - Fee API
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-05): Fee preview for the registration form
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from typing import Optional

from models.station import ReportLanguage, AccommodationType
from services.fee_calculator import calculate_fees

router = APIRouter(prefix="/fees", tags=["fees"])


class FeeRequest(BaseModel):
    distance: float = Field(..., ge=0)
    mixers_count: int = Field(..., ge=0)
    report_language: ReportLanguage
    accommodation: Optional[AccommodationType] = None


@router.post("/calculate")
async def calculate(data: FeeRequest):
    """Approval fee breakdown in EGP"""
    try:
        breakdown = calculate_fees(
            data.distance, data.mixers_count, data.report_language, data.accommodation)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return breakdown.to_dict()
