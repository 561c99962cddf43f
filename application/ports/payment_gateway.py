"""
Payment gateway port (application/ports) exposing a replaceable protocol.

Application services depend on this Protocol; infrastructure implements the
adapter and the composition root (API dependencies) injects it. Every call
returns a ``GatewayResult`` instead of raising processor errors.
"""
from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from domain.payment.entity import (
    BalanceView,
    ChargeView,
    CheckoutSessionView,
    ConnectedAccountView,
    CustomerView,
    PaymentIntentView,
    PriceView,
    ProductView,
    RefundRequest,
    RefundView,
    TransferRequest,
    TransferView,
)
from domain.payment.result import GatewayResult


@runtime_checkable
class PaymentGateway(Protocol):
    """Gateway protocol for the hosted payment processor."""

    provider: str

    # Payments
    async def retrieve_payment_intent(self, intent_id: str) -> GatewayResult[PaymentIntentView]: ...

    async def retrieve_charge(self, charge_id: str) -> GatewayResult[ChargeView]: ...

    async def retrieve_balance(self) -> GatewayResult[BalanceView]: ...

    async def create_refund(self, req: RefundRequest) -> GatewayResult[RefundView]: ...

    async def create_transfer(self, req: TransferRequest) -> GatewayResult[TransferView]: ...

    # Checkout
    async def create_checkout_session(
        self,
        *,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        idempotency_key: Optional[str] = None,
    ) -> GatewayResult[CheckoutSessionView]: ...

    async def retrieve_checkout_session(self, session_id: str) -> GatewayResult[CheckoutSessionView]: ...

    # Catalog
    async def list_products(self) -> GatewayResult[list[ProductView]]: ...

    async def retrieve_product(self, product_id: str) -> GatewayResult[ProductView]: ...

    async def create_product(self, *, name: str, description: Optional[str], active: bool) -> GatewayResult[ProductView]: ...

    async def update_product(self, product_id: str, **fields: Any) -> GatewayResult[ProductView]: ...

    async def retrieve_price(self, price_id: str) -> GatewayResult[PriceView]: ...

    async def list_prices(self, *, product_id: str, active: bool = True) -> GatewayResult[list[PriceView]]: ...

    async def create_price(self, *, product_id: str, unit_amount: int, currency: str) -> GatewayResult[PriceView]: ...

    async def deactivate_price(self, price_id: str) -> GatewayResult[PriceView]: ...

    # Customers
    async def search_customers(self, query: str) -> GatewayResult[list[CustomerView]]: ...

    async def list_customers(self, limit: Optional[int] = None) -> GatewayResult[list[CustomerView]]: ...

    async def retrieve_customer(self, customer_id: str) -> GatewayResult[CustomerView]: ...

    async def create_customer(self, **params: Any) -> GatewayResult[CustomerView]: ...

    async def update_customer(self, customer_id: str, **params: Any) -> GatewayResult[CustomerView]: ...

    async def delete_customer(self, customer_id: str) -> GatewayResult[bool]: ...

    # Connected accounts
    async def list_accounts(self, limit: int) -> GatewayResult[list[ConnectedAccountView]]: ...

    async def retrieve_account(self, account_id: str) -> GatewayResult[ConnectedAccountView]: ...

    async def create_express_account(
        self,
        *,
        email: str,
        first_name: str,
        country: str,
        default_currency: str,
    ) -> GatewayResult[ConnectedAccountView]: ...

    async def create_onboarding_link(self, account_id: str, *, refresh_url: str, return_url: str) -> GatewayResult[str]: ...

    async def delete_account(self, account_id: str) -> GatewayResult[bool]: ...
