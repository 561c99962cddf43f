"""
Read-only views of processor objects plus the requests built locally.

Views are fetched per request and never persisted; amounts are integers in
minor currency units.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


SUCCEEDED = "succeeded"
PAID = "paid"


@dataclass(frozen=True)
class PaymentIntentView:
    id: str
    status: str
    latest_charge: Optional[str] = None
    amount: int = 0
    amount_received: int = 0
    currency: Optional[str] = None


@dataclass(frozen=True)
class ChargeView:
    id: str
    amount: int
    currency: str
    paid: bool
    refunded: bool
    status: str
    transfer_group: Optional[str] = None

    @property
    def releasable(self) -> bool:
        """Funds can only be released from a settled, unrefunded charge."""
        return self.paid and not self.refunded and self.status == SUCCEEDED


@dataclass(frozen=True)
class BalanceView:
    # lower-case currency -> available minor units
    available: dict[str, int] = field(default_factory=dict)

    def available_in(self, currency: str) -> int:
        return self.available.get((currency or "").lower(), 0)


@dataclass(frozen=True)
class RefundView:
    id: str
    status: Optional[str]
    amount: int
    created: Optional[int]
    currency: Optional[str]
    charge: Optional[str]
    payment_intent: Optional[str]
    balance_transaction: Optional[str]


@dataclass(frozen=True)
class TransferView:
    id: str
    amount: int
    currency: str
    created: Optional[int]
    destination: Optional[str]
    status: Optional[str]


@dataclass(frozen=True)
class CheckoutSessionView:
    id: str
    url: Optional[str]
    currency: Optional[str]
    created: Optional[int]
    email: Optional[str]
    amount_total: Optional[int]
    payment_status: Optional[str]
    payment_intent: Optional[str]

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PAID


@dataclass(frozen=True)
class PriceView:
    id: str
    product: Optional[str]
    unit_amount: Optional[int]
    currency: Optional[str]
    active: bool = True
    recurring: bool = False


@dataclass(frozen=True)
class ProductView:
    id: str
    name: str
    active: bool
    description: Optional[str] = None


@dataclass(frozen=True)
class CustomerView:
    id: str
    email: Optional[str]
    name: Optional[str] = None
    phone: Optional[str] = None
    created: Optional[int] = None


@dataclass(frozen=True)
class ConnectedAccountView:
    id: str
    type: Optional[str]
    email: Optional[str]
    created: Optional[int]
    default_currency: Optional[str]
    details_submitted: bool = False
    first_name: Optional[str] = None


@dataclass(frozen=True)
class TransferRequest:
    amount: int
    currency: str
    destination: str
    transfer_group: Optional[str] = None
    idempotency_key: Optional[str] = None


@dataclass(frozen=True)
class RefundRequest:
    payment_intent: str
    # None refunds the full amount
    amount: Optional[int] = None
    idempotency_key: Optional[str] = None
