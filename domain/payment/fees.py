"""
Fee-split and refund arithmetic over integer minor currency units.

All functions are pure. Percentages may be ints or floats; they are converted
through ``Decimal(str(...))`` so that e.g. ``12.5`` is applied exactly.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Union

from domain.common.exceptions import DomainValidationException


Percent = Union[int, float, Decimal]

DEFAULT_PLATFORM_FEE_PERCENT = 10
DEFAULT_PARTIAL_REFUND_PERCENT = 90

# ISO-4217 currencies the processor treats as having no minor unit
ZERO_DECIMAL_CURRENCIES = frozenset({
    "BIF", "CLP", "DJF", "GNF", "JPY", "KMF", "KRW", "MGA",
    "PYG", "RWF", "UGX", "VND", "VUV", "XAF", "XOF", "XPF",
})


@dataclass(frozen=True)
class FeeSplit:
    platform_fee: int
    transfer_amount: int


def _as_decimal(percent: Percent) -> Decimal:
    return percent if isinstance(percent, Decimal) else Decimal(str(percent))


def _floor_percent_of(amount: int, percent: Decimal) -> int:
    return int((Decimal(amount) * percent / Decimal(100)).to_integral_value(rounding=ROUND_FLOOR))


def _check_amount(amount: int, field: str) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise DomainValidationException(f"{field} must be an integer in minor units", field=field)
    if amount < 0:
        raise DomainValidationException(f"{field} must not be negative", field=field)


def split_platform_fee(amount: int, percent: Percent | None = None) -> FeeSplit:
    """Split a charge amount into the platform fee and the consultant's share.

    ``platform_fee = floor(amount * percent / 100)`` and the remainder is the
    transfer amount, so the two always add up to ``amount``.
    ``percent`` defaults to 10 and must lie in (0, 100].
    """
    _check_amount(amount, "amount")
    pct = _as_decimal(DEFAULT_PLATFORM_FEE_PERCENT if percent is None else percent)
    if not (Decimal(0) < pct <= Decimal(100)):
        raise DomainValidationException(
            "Platform fee percent must be greater than 0 and at most 100",
            field="platform_fee_percent",
            details={"platform_fee_percent": str(pct)},
        )
    platform_fee = _floor_percent_of(amount, pct)
    return FeeSplit(platform_fee=platform_fee, transfer_amount=amount - platform_fee)


def transfer_amount(amount: int, percent: Percent | None = None) -> int:
    return split_platform_fee(amount, percent).transfer_amount


def partial_refund_amount(amount_received: int, percent: Percent | None = None) -> int:
    """Amount to refund for a partial refund: ``floor(amount_received * percent / 100)``.

    ``percent`` defaults to 90 and must lie in (1, 100].
    """
    _check_amount(amount_received, "amount_received")
    pct = _as_decimal(DEFAULT_PARTIAL_REFUND_PERCENT if percent is None else percent)
    if not (Decimal(1) < pct <= Decimal(100)):
        raise DomainValidationException(
            "Refund percentage must be greater than 1 and at most 100",
            field="percentage",
            details={"percentage": str(pct)},
        )
    return _floor_percent_of(amount_received, pct)


def currency_exponent(currency: str) -> int:
    return 0 if (currency or "").upper() in ZERO_DECIMAL_CURRENCIES else 2


def to_minor_units(amount: Percent, currency: str) -> int:
    """Convert a human-facing amount (e.g. 12.34 USD) into minor units (1234)."""
    scaled = _as_decimal(amount) * (Decimal(10) ** currency_exponent(currency))
    return int(scaled.to_integral_value(rounding=ROUND_HALF_UP))


def to_major_units(amount: int | None, currency: str) -> float | None:
    """Convert minor units back to a human-facing amount."""
    if amount is None:
        return None
    exponent = currency_exponent(currency)
    if exponent == 0:
        return float(amount)
    return float(Decimal(amount) / (Decimal(10) ** exponent))
