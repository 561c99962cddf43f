"""
Catalog use-cases: products and their current one-time price.
"""
from __future__ import annotations

from typing import Optional

from application.dtos.products import (
    ProductArchiveResult,
    ProductCreatePayload,
    ProductResult,
    ProductUpdatePayload,
)
from application.ports.payment_gateway import PaymentGateway
from application.services.gateway_result import unwrap
from core.logging_config import get_logger
from core.settings import payment_settings
from domain.common.exceptions import ValidationException
from domain.payment.entity import PriceView, ProductView
from domain.payment.fees import to_major_units, to_minor_units
from domain.payment.result import Err
from shared.codes import ResponseMessage


logger = get_logger(__name__)

PRODUCT_ID_PREFIX = "prod_"
INVALID_PRODUCT_ID = "Valid product ID should start with prod_"


def ensure_product_id(product_id: str) -> None:
    if not product_id or not product_id.startswith(PRODUCT_ID_PREFIX):
        raise ValidationException(INVALID_PRODUCT_ID, field="id")


def to_product_result(product: ProductView, price: Optional[PriceView]) -> ProductResult:
    return ProductResult(
        product_id=product.id,
        price_id=price.id if price else None,
        name=product.name,
        description=product.description,
        active=product.active,
        price=to_major_units(price.unit_amount, price.currency or "") if price else None,
    )


class ProductService:
    def __init__(self, gateway: PaymentGateway) -> None:
        self.gateway = gateway

    def _unwrap(self, result):
        return unwrap(result, not_found_message=ResponseMessage.NOT_FOUND)

    async def _first_active_price(self, product_id: str) -> Optional[PriceView]:
        prices = self._unwrap(await self.gateway.list_prices(product_id=product_id, active=True))
        return prices[0] if prices else None

    async def _create_price(self, product_id: str, amount: float) -> PriceView:
        currency = payment_settings.catalog.currency
        return self._unwrap(
            await self.gateway.create_price(
                product_id=product_id,
                unit_amount=to_minor_units(amount, currency),
                currency=currency,
            )
        )

    async def list(self) -> list[ProductResult]:
        products = self._unwrap(await self.gateway.list_products())
        results = []
        for product in products:
            results.append(to_product_result(product, await self._first_active_price(product.id)))
        return results

    async def get(self, product_id: str) -> ProductResult:
        ensure_product_id(product_id)
        product = self._unwrap(await self.gateway.retrieve_product(product_id))
        return to_product_result(product, await self._first_active_price(product.id))

    async def create(self, payload: ProductCreatePayload) -> ProductResult:
        product = self._unwrap(
            await self.gateway.create_product(
                name=payload.name,
                description=payload.description,
                active=payload.active,
            )
        )
        price = await self._create_price(product.id, payload.price)
        logger.info("product_created", product_id=product.id, price_id=price.id)
        return to_product_result(product, price)

    async def update(self, product_id: str, payload: ProductUpdatePayload) -> ProductResult:
        """Update product fields; a new price replaces every active price."""
        ensure_product_id(product_id)
        fields = payload.model_dump(exclude_none=True, exclude={"price"})
        if fields:
            product = self._unwrap(await self.gateway.update_product(product_id, **fields))
        else:
            product = self._unwrap(await self.gateway.retrieve_product(product_id))

        if payload.price is None:
            return to_product_result(product, await self._first_active_price(product_id))

        existing = self._unwrap(await self.gateway.list_prices(product_id=product_id, active=True))
        for old in existing:
            result = await self.gateway.deactivate_price(old.id)
            if isinstance(result, Err):
                # an old price left active does not block the new one
                logger.warning("price_deactivate_failed", price_id=old.id, error=result.message)
        price = await self._create_price(product_id, payload.price)
        logger.info("product_price_replaced", product_id=product_id, price_id=price.id, replaced=len(existing))
        return to_product_result(product, price)

    async def archive(self, product_id: str) -> ProductArchiveResult:
        ensure_product_id(product_id)
        product = self._unwrap(await self.gateway.update_product(product_id, active=False))
        return ProductArchiveResult(
            product_id=product.id,
            status="active" if product.active else "archived",
        )
