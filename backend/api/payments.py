"""
Concrete Station Approval - Payment API
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-05): Initial payment endpoints
"""

from fastapi import APIRouter, HTTPException
import logging

from api.http_errors import to_http
from errors import StationApprovalError
from models.payment import Payment, PaymentCreate, PaymentUpdate
from services import station_registry

router = APIRouter(prefix="/payments", tags=["payments"])
logger = logging.getLogger(__name__)


@router.post("", response_model=Payment, status_code=201)
async def create_payment(data: PaymentCreate):
    try:
        return await station_registry.create_payment(data)
    except StationApprovalError as e:
        raise to_http(e)
    except Exception as e:
        logger.error(f"Failed to create payment: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.patch("/{payment_id}", response_model=Payment)
async def update_payment(payment_id: int, data: PaymentUpdate):
    try:
        return await station_registry.update_payment(payment_id, data)
    except StationApprovalError as e:
        raise to_http(e)
    except Exception as e:
        logger.error(f"Failed to update payment {payment_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
