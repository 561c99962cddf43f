"""
Application service orchestrating payment use-cases.

This class depends only on the application PaymentGateway port and DTOs.
Gateway implementations are provided by infrastructure and must be injected
from the composition root (API dependencies), keeping dependencies one-way.

Every workflow is strictly sequential and short-circuits on the first failed
step; nothing is retried locally.
"""
from __future__ import annotations

from typing import Optional

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
from application.ports.payment_gateway import PaymentGateway
from application.services.customer_service import CustomerService
from application.services.gateway_result import unwrap
from core.logging_config import get_logger
from core.settings import payment_settings
from domain.common.exceptions import ValidationException
from domain.payment.entity import RefundRequest, RefundView, TransferRequest, TransferView
from domain.payment.fees import partial_refund_amount, split_platform_fee, to_major_units
from domain.payment.result import Err
from shared.codes.payment_codes import GatewayErrorKind


logger = get_logger(__name__)

RECURRING_PRICE = "Recurring price cannot be charged with mode: payment. Use a one-time price."
MISSING_SESSION_ID = "Missing session_id"
PAYMENT_CONFIRMED = "Payment confirmed"
PAYMENT_INCOMPLETE = "Payment incomplete or failed"
NO_CHARGE = "No charge found for this payment intent"
CHARGE_NOT_RELEASABLE = "Charge is not completed, has been refunded, or failed"
NOTHING_TO_RELEASE = "Nothing to release after platform fee"
INSUFFICIENT_BALANCE = "Insufficient platform balance to release funds"
ALREADY_REFUNDED = "This payment has already been refunded"
NO_PAYMENT_RECEIVED = "No payment received for this payment intent"
NOTHING_TO_REFUND = "Refund amount rounds down to zero for this percentage"


def _refund_result(refund: RefundView) -> RefundResult:
    return RefundResult(
        id=refund.id,
        status=refund.status,
        amount=refund.amount,
        created=refund.created,
        currency=refund.currency,
        charge=refund.charge,
        payment_intent=refund.payment_intent,
        balance_transaction=refund.balance_transaction,
    )


def _transfer_result(transfer: TransferView) -> TransferResult:
    return TransferResult(
        id=transfer.id,
        amount=transfer.amount,
        currency=transfer.currency,
        created=transfer.created,
        destination=transfer.destination,
        status=transfer.status,
    )


class PaymentService:
    def __init__(self, gateway: PaymentGateway) -> None:
        self.gateway = gateway
        self.customers = CustomerService(gateway)

    async def charge(self, payload: ChargePayload, idempotency_key: Optional[str] = None) -> CheckoutResult:
        """Create a one-time checkout session for ``priceId``."""
        logger.info("payment_charge_request", price_id=payload.price_id, provider=self.gateway.provider)
        price = unwrap(await self.gateway.retrieve_price(payload.price_id))
        if price.recurring:
            raise ValidationException(RECURRING_PRICE, field="priceId")

        customer = await self.customers.find_or_create_by_email(payload.customer_email)
        session = unwrap(
            await self.gateway.create_checkout_session(
                customer_id=customer.id,
                price_id=payload.price_id,
                success_url=payload.success_url or payment_settings.checkout.success_url,
                cancel_url=payload.cancel_url or payment_settings.checkout.cancel_url,
                metadata={"customerEmail": payload.customer_email, "priceId": payload.price_id},
                idempotency_key=idempotency_key,
            )
        )
        logger.info("payment_charge_response", session_id=session.id, customer_id=customer.id)
        return CheckoutResult(id=session.id, session_url=session.url)

    async def verify(self, session_id: Optional[str]) -> VerifyResult:
        """Return session details when paid; otherwise raise 400 echoing them."""
        if not session_id:
            raise ValidationException(MISSING_SESSION_ID, field="session_id")

        session = unwrap(await self.gateway.retrieve_checkout_session(session_id))
        result = VerifyResult(
            id=session.id,
            currency=session.currency,
            created=session.created,
            email=session.email,
            amount=to_major_units(session.amount_total, session.currency or ""),
            payment_status=session.payment_status,
            payment_intent=session.payment_intent,
        )
        logger.info("payment_verify", session_id=session.id, payment_status=session.payment_status)
        if not session.is_paid:
            raise ValidationException(PAYMENT_INCOMPLETE, result=result)
        return result

    async def refund(self, payload: RefundPayload, idempotency_key: Optional[str] = None) -> RefundResult:
        """Refund the full amount of a payment intent."""
        logger.info("payment_refund_request", payment_intent=payload.payment_intent)
        refund = await self._create_refund(
            RefundRequest(payment_intent=payload.payment_intent, idempotency_key=idempotency_key)
        )
        return _refund_result(refund)

    async def partial_refund(
        self, payload: PartialRefundPayload, idempotency_key: Optional[str] = None
    ) -> RefundResult:
        """Refund ``percentage`` (default 90) of the amount received."""
        intent = unwrap(await self.gateway.retrieve_payment_intent(payload.payment_intent))
        if intent.amount_received == 0:
            raise ValidationException(NO_PAYMENT_RECEIVED, field="payment_intent")

        amount = partial_refund_amount(intent.amount_received, payload.percentage)
        if amount == 0:
            raise ValidationException(NOTHING_TO_REFUND, field="percentage")
        logger.info(
            "payment_partial_refund_request",
            payment_intent=intent.id,
            amount_received=intent.amount_received,
            refund_amount=amount,
        )
        refund = await self._create_refund(
            RefundRequest(payment_intent=intent.id, amount=amount, idempotency_key=idempotency_key)
        )
        return _refund_result(refund)

    async def release(self, payload: ReleasePayload, idempotency_key: Optional[str] = None) -> TransferResult:
        """Transfer the charge amount minus the platform fee to the consultant.

        Steps: intent -> charge -> charge checks -> fee split -> balance check -> transfer.
        """
        logger.info(
            "payment_release_request",
            payment_intent=payload.payment_intent,
            destination=payload.consultant_account_id,
        )
        intent = unwrap(await self.gateway.retrieve_payment_intent(payload.payment_intent))
        if not intent.latest_charge:
            raise ValidationException(NO_CHARGE, field="payment_intent")

        charge = unwrap(await self.gateway.retrieve_charge(intent.latest_charge))
        if not charge.releasable:
            raise ValidationException(
                CHARGE_NOT_RELEASABLE,
                details={"paid": charge.paid, "refunded": charge.refunded, "status": charge.status},
            )

        split = split_platform_fee(charge.amount, payload.platform_fee_percent)
        if split.transfer_amount == 0:
            raise ValidationException(NOTHING_TO_RELEASE, field="platform_fee_percent")

        balance = unwrap(await self.gateway.retrieve_balance())
        available = balance.available_in(charge.currency)
        if available < split.transfer_amount:
            logger.warning(
                "payment_release_insufficient_balance",
                currency=charge.currency,
                available=available,
                transfer_amount=split.transfer_amount,
            )
            raise ValidationException(INSUFFICIENT_BALANCE)

        transfer = unwrap(
            await self.gateway.create_transfer(
                TransferRequest(
                    amount=split.transfer_amount,
                    currency=charge.currency,
                    destination=payload.consultant_account_id,
                    transfer_group=charge.transfer_group or intent.id,
                    idempotency_key=idempotency_key,
                )
            )
        )
        logger.info(
            "payment_release_response",
            transfer_id=transfer.id,
            amount=transfer.amount,
            platform_fee=split.platform_fee,
        )
        return _transfer_result(transfer)

    async def _create_refund(self, req: RefundRequest) -> RefundView:
        result = await self.gateway.create_refund(req)
        if isinstance(result, Err) and result.kind is GatewayErrorKind.ALREADY_REFUNDED:
            raise ValidationException(ALREADY_REFUNDED, field="payment_intent")
        refund = unwrap(result)
        logger.info("payment_refund_response", refund_id=refund.id, amount=refund.amount, status=refund.status)
        return refund
