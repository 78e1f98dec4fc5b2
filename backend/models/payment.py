"""
Concrete Station Approval - Payment Models
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-05): Initial payment models
"""

from pydantic import BaseModel, ConfigDict, Field
from enum import Enum
from typing import Optional
from datetime import datetime


class PaymentStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"
    CHEQUE = "cheque"


class Payment(BaseModel):
    """Payment record for a station's approval fees"""
    id: int
    station_id: int
    amount: int
    status: PaymentStatus = PaymentStatus.PENDING
    payment_method: Optional[PaymentMethod] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PaymentCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    station_id: int = Field(..., ge=1)
    amount: int = Field(..., ge=0)
    status: PaymentStatus = PaymentStatus.PENDING
    payment_method: Optional[PaymentMethod] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[datetime] = None
    notes: Optional[str] = None


class PaymentUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: Optional[int] = Field(None, ge=0)
    status: Optional[PaymentStatus] = None
    payment_method: Optional[PaymentMethod] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[datetime] = None
    notes: Optional[str] = None


class PaymentConfirmation(BaseModel):
    """Confirm the approval fees of a pending-payment station"""
    model_config = ConfigDict(extra="forbid")

    amount: Optional[int] = Field(None, ge=0, description="Defaults to the station fees")
    payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    invoice_number: Optional[str] = None
    invoice_date: Optional[datetime] = None
    notes: Optional[str] = None
