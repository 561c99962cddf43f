"""
Stripe adapter using the official stripe-python SDK.

Notes on SDK usage:
- Module-level resources with the ``*_async`` variants (``stripe.Refund.create_async``
  and friends) so no call blocks the event loop; the SDK drives them with httpx.
- Idempotency keys are supplied via the ``idempotency_key`` kwarg.
- Every ``stripe.StripeError`` is mapped to an ``Err`` result. Error kind comes
  from the error ``code`` first (``resource_missing``, ``charge_already_refunded``)
  and then from the exception class.
"""
from __future__ import annotations

from typing import Any, Optional

import stripe

from core.settings import payment_settings
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
from domain.payment.result import Err, GatewayResult
from infrastructure.external.payments.base import BasePaymentClient
from shared.codes.payment_codes import (
    DEFAULT_STATUS_BY_KIND,
    GatewayErrorKind,
    STRIPE_CODE_TO_KIND,
    STRIPE_ERROR_CLASS_TO_KIND,
)


CONSULTANT_ACCOUNT_SOURCE = "consultant-onboarding"


class StripeGateway(BasePaymentClient):
    provider = "stripe"
    provider_errors = (stripe.StripeError,)

    def __init__(self, secret_key: Optional[str] = None):
        key = secret_key or payment_settings.stripe.secret_key
        if not key:
            raise RuntimeError("STRIPE__SECRET_KEY not configured")
        # Module-level configuration, shared by every resource call
        stripe.api_key = key
        stripe.max_network_retries = payment_settings.stripe.max_network_retries
        if payment_settings.stripe.api_version:
            stripe.api_version = payment_settings.stripe.api_version

    def _to_err(self, exc: BaseException) -> Err:
        code = getattr(exc, "code", None)
        kind = STRIPE_CODE_TO_KIND.get(code) if code else None
        if kind is None:
            # Walk the MRO so SDK subclasses inherit their parent's kind
            for klass in type(exc).__mro__:
                kind = STRIPE_ERROR_CLASS_TO_KIND.get(klass.__name__)
                if kind is not None:
                    break
        kind = kind or GatewayErrorKind.API
        status = getattr(exc, "http_status", None) or DEFAULT_STATUS_BY_KIND.get(kind)
        message = getattr(exc, "user_message", None) or str(exc) or kind.value
        return Err(kind=kind, message=message, status_code=status, code=code)

    # Mappers
    def _intent(self, pi: Any) -> PaymentIntentView:
        f = self._field
        return PaymentIntentView(
            id=f(pi, "id"),
            status=f(pi, "status", ""),
            latest_charge=self._id_of(f(pi, "latest_charge")),
            amount=f(pi, "amount", 0),
            amount_received=f(pi, "amount_received", 0),
            currency=f(pi, "currency"),
        )

    def _charge(self, ch: Any) -> ChargeView:
        f = self._field
        return ChargeView(
            id=f(ch, "id"),
            amount=f(ch, "amount", 0),
            currency=f(ch, "currency", ""),
            paid=bool(f(ch, "paid", False)),
            refunded=bool(f(ch, "refunded", False)),
            status=f(ch, "status", ""),
            transfer_group=f(ch, "transfer_group"),
        )

    def _balance(self, bal: Any) -> BalanceView:
        available: dict[str, int] = {}
        for entry in self._field(bal, "available", []) or []:
            currency = (self._field(entry, "currency", "") or "").lower()
            available[currency] = available.get(currency, 0) + int(self._field(entry, "amount", 0))
        return BalanceView(available=available)

    def _refund(self, rf: Any) -> RefundView:
        f = self._field
        return RefundView(
            id=f(rf, "id"),
            status=f(rf, "status"),
            amount=f(rf, "amount", 0),
            created=f(rf, "created"),
            currency=f(rf, "currency"),
            charge=self._id_of(f(rf, "charge")),
            payment_intent=self._id_of(f(rf, "payment_intent")),
            balance_transaction=self._id_of(f(rf, "balance_transaction")),
        )

    def _transfer(self, tr: Any) -> TransferView:
        f = self._field
        status = f(tr, "status") or ("reversed" if f(tr, "reversed", False) else "paid")
        return TransferView(
            id=f(tr, "id"),
            amount=f(tr, "amount", 0),
            currency=f(tr, "currency", ""),
            created=f(tr, "created"),
            destination=self._id_of(f(tr, "destination")),
            status=status,
        )

    def _session(self, cs: Any) -> CheckoutSessionView:
        f = self._field
        email = f(f(cs, "customer_details"), "email") or f(cs, "customer_email")
        return CheckoutSessionView(
            id=f(cs, "id"),
            url=f(cs, "url"),
            currency=f(cs, "currency"),
            created=f(cs, "created"),
            email=email,
            amount_total=f(cs, "amount_total"),
            payment_status=f(cs, "payment_status"),
            payment_intent=self._id_of(f(cs, "payment_intent")),
        )

    def _price(self, pr: Any) -> PriceView:
        f = self._field
        return PriceView(
            id=f(pr, "id"),
            product=self._id_of(f(pr, "product")),
            unit_amount=f(pr, "unit_amount"),
            currency=f(pr, "currency"),
            active=bool(f(pr, "active", True)),
            recurring=f(pr, "recurring") is not None,
        )

    def _product(self, p: Any) -> ProductView:
        f = self._field
        return ProductView(
            id=f(p, "id"),
            name=f(p, "name", ""),
            active=bool(f(p, "active", False)),
            description=f(p, "description"),
        )

    def _customer(self, c: Any) -> CustomerView:
        f = self._field
        return CustomerView(
            id=f(c, "id"),
            email=f(c, "email"),
            name=f(c, "name"),
            phone=f(c, "phone"),
            created=f(c, "created"),
        )

    def _account(self, a: Any) -> ConnectedAccountView:
        f = self._field
        return ConnectedAccountView(
            id=f(a, "id"),
            type=f(a, "type"),
            email=f(a, "email"),
            created=f(a, "created"),
            default_currency=f(a, "default_currency"),
            details_submitted=bool(f(a, "details_submitted", False)),
            first_name=f(f(a, "individual"), "first_name"),
        )

    def _many(self, mapper):
        return lambda list_obj: [mapper(item) for item in self._items(list_obj)]

    def _deleted(self, obj: Any) -> bool:
        return bool(self._field(obj, "deleted", False))

    # Payments
    async def retrieve_payment_intent(self, intent_id: str) -> GatewayResult[PaymentIntentView]:
        return await self._call("retrieve_payment_intent", stripe.PaymentIntent.retrieve_async, self._intent, intent_id)

    async def retrieve_charge(self, charge_id: str) -> GatewayResult[ChargeView]:
        return await self._call("retrieve_charge", stripe.Charge.retrieve_async, self._charge, charge_id)

    async def retrieve_balance(self) -> GatewayResult[BalanceView]:
        return await self._call("retrieve_balance", stripe.Balance.retrieve_async, self._balance)

    async def create_refund(self, req: RefundRequest) -> GatewayResult[RefundView]:
        params: dict[str, Any] = {"payment_intent": req.payment_intent}
        if req.amount is not None:
            params["amount"] = req.amount
        if req.idempotency_key:
            params["idempotency_key"] = req.idempotency_key
        return await self._call("create_refund", stripe.Refund.create_async, self._refund, **params)

    async def create_transfer(self, req: TransferRequest) -> GatewayResult[TransferView]:
        params: dict[str, Any] = {
            "amount": req.amount,
            "currency": req.currency,
            "destination": req.destination,
        }
        if req.transfer_group:
            params["transfer_group"] = req.transfer_group
        if req.idempotency_key:
            params["idempotency_key"] = req.idempotency_key
        return await self._call("create_transfer", stripe.Transfer.create_async, self._transfer, **params)

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
    ) -> GatewayResult[CheckoutSessionView]:
        params: dict[str, Any] = {
            "mode": "payment",
            "customer": customer_id,
            "line_items": [{"price": price_id, "quantity": 1}],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
        }
        if idempotency_key:
            params["idempotency_key"] = idempotency_key
        return await self._call(
            "create_checkout_session", stripe.checkout.Session.create_async, self._session, **params
        )

    async def retrieve_checkout_session(self, session_id: str) -> GatewayResult[CheckoutSessionView]:
        return await self._call(
            "retrieve_checkout_session", stripe.checkout.Session.retrieve_async, self._session, session_id
        )

    # Catalog
    async def list_products(self) -> GatewayResult[list[ProductView]]:
        return await self._call("list_products", stripe.Product.list_async, self._many(self._product), limit=100)

    async def retrieve_product(self, product_id: str) -> GatewayResult[ProductView]:
        return await self._call("retrieve_product", stripe.Product.retrieve_async, self._product, product_id)

    async def create_product(self, *, name: str, description: Optional[str], active: bool) -> GatewayResult[ProductView]:
        params: dict[str, Any] = {"name": name, "active": active}
        if description:
            params["description"] = description
        return await self._call("create_product", stripe.Product.create_async, self._product, **params)

    async def update_product(self, product_id: str, **fields: Any) -> GatewayResult[ProductView]:
        return await self._call("update_product", stripe.Product.modify_async, self._product, product_id, **fields)

    async def retrieve_price(self, price_id: str) -> GatewayResult[PriceView]:
        return await self._call("retrieve_price", stripe.Price.retrieve_async, self._price, price_id)

    async def list_prices(self, *, product_id: str, active: bool = True) -> GatewayResult[list[PriceView]]:
        return await self._call(
            "list_prices", stripe.Price.list_async, self._many(self._price), product=product_id, active=active
        )

    async def create_price(self, *, product_id: str, unit_amount: int, currency: str) -> GatewayResult[PriceView]:
        return await self._call(
            "create_price",
            stripe.Price.create_async,
            self._price,
            product=product_id,
            unit_amount=unit_amount,
            currency=currency,
        )

    async def deactivate_price(self, price_id: str) -> GatewayResult[PriceView]:
        return await self._call("deactivate_price", stripe.Price.modify_async, self._price, price_id, active=False)

    # Customers
    async def search_customers(self, query: str) -> GatewayResult[list[CustomerView]]:
        return await self._call("search_customers", stripe.Customer.search_async, self._many(self._customer), query=query)

    async def list_customers(self, limit: Optional[int] = None) -> GatewayResult[list[CustomerView]]:
        params = {"limit": limit} if limit else {}
        return await self._call("list_customers", stripe.Customer.list_async, self._many(self._customer), **params)

    async def retrieve_customer(self, customer_id: str) -> GatewayResult[CustomerView]:
        return await self._call("retrieve_customer", stripe.Customer.retrieve_async, self._customer, customer_id)

    async def create_customer(self, **params: Any) -> GatewayResult[CustomerView]:
        return await self._call("create_customer", stripe.Customer.create_async, self._customer, **params)

    async def update_customer(self, customer_id: str, **params: Any) -> GatewayResult[CustomerView]:
        return await self._call("update_customer", stripe.Customer.modify_async, self._customer, customer_id, **params)

    async def delete_customer(self, customer_id: str) -> GatewayResult[bool]:
        return await self._call("delete_customer", stripe.Customer.delete_async, self._deleted, customer_id)

    # Connected accounts
    async def list_accounts(self, limit: int) -> GatewayResult[list[ConnectedAccountView]]:
        return await self._call("list_accounts", stripe.Account.list_async, self._many(self._account), limit=limit)

    async def retrieve_account(self, account_id: str) -> GatewayResult[ConnectedAccountView]:
        return await self._call("retrieve_account", stripe.Account.retrieve_async, self._account, account_id)

    async def create_express_account(
        self,
        *,
        email: str,
        first_name: str,
        country: str,
        default_currency: str,
    ) -> GatewayResult[ConnectedAccountView]:
        return await self._call(
            "create_express_account",
            stripe.Account.create_async,
            self._account,
            type="express",
            country=country,
            email=email,
            default_currency=default_currency,
            business_type="individual",
            individual={"email": email, "first_name": first_name},
            capabilities={
                "card_payments": {"requested": True},
                "transfers": {"requested": True},
            },
            metadata={"source": CONSULTANT_ACCOUNT_SOURCE},
        )

    async def create_onboarding_link(self, account_id: str, *, refresh_url: str, return_url: str) -> GatewayResult[str]:
        return await self._call(
            "create_onboarding_link",
            stripe.AccountLink.create_async,
            lambda link: self._field(link, "url"),
            account=account_id,
            refresh_url=refresh_url,
            return_url=return_url,
            type="account_onboarding",
        )

    async def delete_account(self, account_id: str) -> GatewayResult[bool]:
        return await self._call("delete_account", stripe.Account.delete_async, self._deleted, account_id)
