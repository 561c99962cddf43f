"""
Payment DTOs (Pydantic v2) used at application boundaries.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


PAYMENT_INTENT_PATTERN = r"^pi_"
CONNECTED_ACCOUNT_PATTERN = r"^acct_"
PRICE_PATTERN = r"^price_"


class ChargePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_email: EmailStr = Field(..., alias="customerEmail")
    price_id: str = Field(..., alias="priceId", pattern=PRICE_PATTERN, max_length=250)
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None


class RefundPayload(BaseModel):
    payment_intent: str = Field(..., pattern=PAYMENT_INTENT_PATTERN, max_length=255)


class PartialRefundPayload(RefundPayload):
    # omitted -> 90
    percentage: Optional[float] = Field(None, gt=1, le=100)


class ReleasePayload(RefundPayload):
    consultant_account_id: str = Field(..., pattern=CONNECTED_ACCOUNT_PATTERN, max_length=255)
    # omitted -> 10
    platform_fee_percent: Optional[float] = Field(None, gt=0, le=100)


class CheckoutResult(BaseModel):
    id: str
    session_url: Optional[str] = None


class VerifyResult(BaseModel):
    id: str
    currency: Optional[str] = None
    created: Optional[int] = None
    email: Optional[str] = None
    # major units
    amount: Optional[float] = None
    payment_status: Optional[str] = None
    payment_intent: Optional[str] = None


class RefundResult(BaseModel):
    id: str
    status: Optional[str] = None
    amount: int
    created: Optional[int] = None
    currency: Optional[str] = None
    charge: Optional[str] = None
    payment_intent: Optional[str] = None
    balance_transaction: Optional[str] = None


class TransferResult(BaseModel):
    id: str
    amount: int
    currency: str
    created: Optional[int] = None
    destination: Optional[str] = None
    status: Optional[str] = None
