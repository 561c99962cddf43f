"""
Payments API routes.

Checkout, verification, refunds and fund release. Keep this thin: no SDK
details here; the application service owns the workflows.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_current_user, get_idempotency_key, get_payment_service
from application.dtos.payments import (
    ChargePayload,
    CheckoutResult,
    PartialRefundPayload,
    RefundPayload,
    RefundResult,
    ReleasePayload,
    TransferResult,
    VerifyResult,
)
from application.services.payment_service import PAYMENT_CONFIRMED, PaymentService
from core.response import Response as ApiResponse, success_response


router = APIRouter(
    prefix="/payment",
    tags=["Payments"],
    dependencies=[Depends(get_current_user)],
)


@router.post("/charge", response_model=ApiResponse[CheckoutResult])
async def charge(
    payload: ChargePayload,
    idempotency_key: Optional[str] = Depends(get_idempotency_key),
    service: PaymentService = Depends(get_payment_service),
):
    """Create a one-time checkout session; returns the hosted session URL."""
    return success_response(result=await service.charge(payload, idempotency_key))


@router.get("/verify", response_model=ApiResponse[VerifyResult])
async def verify(
    session_id: Optional[str] = Query(None),
    service: PaymentService = Depends(get_payment_service),
):
    """Confirm a checkout session; unpaid sessions return 400 with their details."""
    result = await service.verify(session_id)
    return success_response(result=result, message=PAYMENT_CONFIRMED)


@router.post("/refund", response_model=ApiResponse[RefundResult])
async def refund(
    payload: RefundPayload,
    idempotency_key: Optional[str] = Depends(get_idempotency_key),
    service: PaymentService = Depends(get_payment_service),
):
    return success_response(result=await service.refund(payload, idempotency_key))


@router.post("/partial-refund", response_model=ApiResponse[RefundResult])
async def partial_refund(
    payload: PartialRefundPayload,
    idempotency_key: Optional[str] = Depends(get_idempotency_key),
    service: PaymentService = Depends(get_payment_service),
):
    """Refund ``percentage`` (default 90) of the amount received."""
    return success_response(result=await service.partial_refund(payload, idempotency_key))


@router.post("/release", response_model=ApiResponse[TransferResult])
async def release(
    payload: ReleasePayload,
    idempotency_key: Optional[str] = Depends(get_idempotency_key),
    service: PaymentService = Depends(get_payment_service),
):
    """Release the charge minus the platform fee to the consultant's account."""
    return success_response(result=await service.release(payload, idempotency_key))
