"""
Consultant use-cases. Consultants are Express connected accounts that
receive released funds.
"""
from __future__ import annotations

from typing import Optional

from application.dtos.consultants import ConsultantCreatePayload, ConsultantResult, OnboardingLinkResult
from application.ports.payment_gateway import PaymentGateway
from application.services.gateway_result import unwrap
from core.logging_config import get_logger
from core.settings import payment_settings
from domain.common.exceptions import ValidationException
from domain.payment.entity import ConnectedAccountView
from shared.codes import ResponseMessage


logger = get_logger(__name__)

EXPRESS = "express"
MISSING_ACCOUNT_ID = "Missing account_id"


def to_consultant_result(account: ConnectedAccountView) -> ConsultantResult:
    return ConsultantResult(
        id=account.id,
        created=account.created,
        onboarded=account.details_submitted,
        first_name=account.first_name,
        email=account.email,
        default_currency=account.default_currency,
        stripe_account_id=account.id,
    )


def ensure_account_id(account_id: Optional[str]) -> str:
    if not account_id or not account_id.strip():
        raise ValidationException(MISSING_ACCOUNT_ID, field="account_id")
    return account_id.strip()


class ConsultantService:
    def __init__(self, gateway: PaymentGateway) -> None:
        self.gateway = gateway

    def _unwrap(self, result):
        return unwrap(result, not_found_message=ResponseMessage.NOT_FOUND)

    async def list(self) -> list[ConsultantResult]:
        accounts = self._unwrap(await self.gateway.list_accounts(payment_settings.connect.list_limit))
        return [to_consultant_result(a) for a in accounts if a.type == EXPRESS]

    async def get(self, account_id: Optional[str]) -> ConsultantResult:
        account_id = ensure_account_id(account_id)
        return to_consultant_result(self._unwrap(await self.gateway.retrieve_account(account_id)))

    async def create(self, payload: ConsultantCreatePayload) -> ConsultantResult:
        account = self._unwrap(
            await self.gateway.create_express_account(
                email=payload.email,
                first_name=payload.first_name,
                country=payment_settings.connect.country,
                default_currency=payment_settings.connect.default_currency,
            )
        )
        logger.info("consultant_created", account_id=account.id)
        return to_consultant_result(account)

    async def onboarding_link(self, account_id: Optional[str]) -> OnboardingLinkResult:
        account_id = ensure_account_id(account_id)
        url = self._unwrap(
            await self.gateway.create_onboarding_link(
                account_id,
                refresh_url=payment_settings.connect.refresh_url,
                return_url=payment_settings.connect.return_url,
            )
        )
        return OnboardingLinkResult(url=url)

    async def delete(self, account_id: Optional[str]) -> dict:
        account_id = ensure_account_id(account_id)
        deleted = self._unwrap(await self.gateway.delete_account(account_id))
        logger.info("consultant_deleted", account_id=account_id, deleted=deleted)
        return {"id": account_id, "deleted": deleted}
