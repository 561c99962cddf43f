"""
Customer use-cases backed by the processor's customer API.

There is no route of its own; checkout uses ``find_or_create_by_email``.
"""
from __future__ import annotations

from typing import Any, Literal, Optional

from application.ports.payment_gateway import PaymentGateway
from application.services.gateway_result import unwrap
from core.logging_config import get_logger
from domain.common.exceptions import ValidationException
from domain.payment.entity import CustomerView


logger = get_logger(__name__)

SearchField = Literal["email", "name", "phone"]
SEARCH_FIELDS = ("email", "name", "phone")


def build_search_query(field: str, value: str) -> str:
    """Build a processor search query such as ``email:"a@b.c"``."""
    if field not in SEARCH_FIELDS:
        raise ValidationException(
            f"Unsupported customer search field: {field}",
            field="field",
            details={"allowed": list(SEARCH_FIELDS)},
        )
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'{field}:"{escaped}"'


class CustomerService:
    def __init__(self, gateway: PaymentGateway) -> None:
        self.gateway = gateway

    async def search(self, field: SearchField = "email", value: str = "") -> list[CustomerView]:
        return unwrap(await self.gateway.search_customers(build_search_query(field, value)))

    async def all(self, limit: Optional[int] = None) -> list[CustomerView]:
        return unwrap(await self.gateway.list_customers(limit))

    async def single(self, customer_id: str) -> CustomerView:
        return unwrap(await self.gateway.retrieve_customer(customer_id))

    async def create(self, email: str, name: Optional[str] = None, **params: Any) -> CustomerView:
        if name:
            params["name"] = name
        customer = unwrap(await self.gateway.create_customer(email=email, **params))
        logger.info("customer_created", customer_id=customer.id)
        return customer

    async def update(self, customer_id: str, **params: Any) -> CustomerView:
        return unwrap(await self.gateway.update_customer(customer_id, **params))

    async def delete(self, customer_id: str) -> bool:
        return unwrap(await self.gateway.delete_customer(customer_id))

    async def find_or_create_by_email(self, email: str) -> CustomerView:
        """First customer whose email matches, or a newly created one."""
        existing = await self.search("email", email)
        if existing:
            return existing[0]
        return await self.create(email)
