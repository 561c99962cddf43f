"""Pytest bootstrap configuration.

Ensure mandatory environment variables are set before test collection
and module imports that depend on application settings.
"""
import os
import tempfile

# Mandatory secret key for settings validation
os.environ.setdefault("SECRET_KEY", "test-secret-key")
# Non-debug so unhandled errors go through the 500 handler instead of the debug page
os.environ["DEBUG"] = "false"
os.environ["DATABASE__URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="escrow-tests-"), "test.db"
)
os.environ.setdefault("STRIPE__SECRET_KEY", "sk_test_dummy")

from typing import Any, Optional

import httpx
import pytest
import pytest_asyncio

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
from domain.payment.result import Err, Ok
from shared.codes.payment_codes import GatewayErrorKind, RESOURCE_MISSING


def missing(what: str, ident: str) -> Err:
    return Err(
        kind=GatewayErrorKind.NOT_FOUND,
        message=f"No such {what}: '{ident}'",
        status_code=404,
        code=RESOURCE_MISSING,
    )


class FakeGateway:
    """In-memory PaymentGateway recording every call."""

    provider = "fake"

    def __init__(self) -> None:
        self.intents: dict[str, PaymentIntentView] = {}
        self.charges: dict[str, ChargeView] = {}
        self.balance = BalanceView(available={})
        self.prices: dict[str, PriceView] = {}
        self.products: dict[str, ProductView] = {}
        self.customers: dict[str, CustomerView] = {}
        self.accounts: dict[str, ConnectedAccountView] = {}
        self.sessions: dict[str, CheckoutSessionView] = {}
        # operation name -> Err returned instead of the normal result
        self.failures: dict[str, Err] = {}
        self.calls: list[tuple[str, Any]] = []
        self._seq = 0

    def _next(self, prefix: str) -> str:
        self._seq += 1
        return f"{prefix}_{self._seq:04d}"

    def _record(self, op: str, arg: Any = None) -> Optional[Err]:
        self.calls.append((op, arg))
        return self.failures.get(op)

    def called(self, op: str) -> list:
        return [arg for name, arg in self.calls if name == op]

    # Payments
    async def retrieve_payment_intent(self, intent_id):
        if err := self._record("retrieve_payment_intent", intent_id):
            return err
        intent = self.intents.get(intent_id)
        return Ok(intent) if intent else missing("payment_intent", intent_id)

    async def retrieve_charge(self, charge_id):
        if err := self._record("retrieve_charge", charge_id):
            return err
        charge = self.charges.get(charge_id)
        return Ok(charge) if charge else missing("charge", charge_id)

    async def retrieve_balance(self):
        if err := self._record("retrieve_balance"):
            return err
        return Ok(self.balance)

    async def create_refund(self, req: RefundRequest):
        if err := self._record("create_refund", req):
            return err
        intent = self.intents.get(req.payment_intent)
        if intent is None:
            return missing("payment_intent", req.payment_intent)
        return Ok(
            RefundView(
                id=self._next("re"),
                status="succeeded",
                amount=req.amount if req.amount is not None else intent.amount_received,
                created=1700000000,
                currency=intent.currency,
                charge=intent.latest_charge,
                payment_intent=intent.id,
                balance_transaction=self._next("txn"),
            )
        )

    async def create_transfer(self, req: TransferRequest):
        if err := self._record("create_transfer", req):
            return err
        return Ok(
            TransferView(
                id=self._next("tr"),
                amount=req.amount,
                currency=req.currency,
                created=1700000000,
                destination=req.destination,
                status="paid",
            )
        )

    # Checkout
    async def create_checkout_session(self, *, customer_id, price_id, success_url, cancel_url, metadata,
                                      idempotency_key=None):
        if err := self._record("create_checkout_session", dict(
            customer_id=customer_id, price_id=price_id, success_url=success_url,
            cancel_url=cancel_url, metadata=metadata, idempotency_key=idempotency_key,
        )):
            return err
        sid = self._next("cs_test")
        session = CheckoutSessionView(
            id=sid,
            url=f"https://checkout.example.com/{sid}",
            currency="usd",
            created=1700000000,
            email=metadata.get("customerEmail"),
            amount_total=None,
            payment_status="unpaid",
            payment_intent=None,
        )
        self.sessions[sid] = session
        return Ok(session)

    async def retrieve_checkout_session(self, session_id):
        if err := self._record("retrieve_checkout_session", session_id):
            return err
        session = self.sessions.get(session_id)
        return Ok(session) if session else missing("checkout.session", session_id)

    # Catalog
    async def list_products(self):
        if err := self._record("list_products"):
            return err
        return Ok(list(self.products.values()))

    async def retrieve_product(self, product_id):
        if err := self._record("retrieve_product", product_id):
            return err
        product = self.products.get(product_id)
        return Ok(product) if product else missing("product", product_id)

    async def create_product(self, *, name, description, active):
        if err := self._record("create_product", name):
            return err
        product = ProductView(id=self._next("prod"), name=name, active=active, description=description)
        self.products[product.id] = product
        return Ok(product)

    async def update_product(self, product_id, **fields):
        if err := self._record("update_product", (product_id, fields)):
            return err
        product = self.products.get(product_id)
        if product is None:
            return missing("product", product_id)
        product = ProductView(
            id=product.id,
            name=fields.get("name", product.name),
            active=fields.get("active", product.active),
            description=fields.get("description", product.description),
        )
        self.products[product_id] = product
        return Ok(product)

    async def retrieve_price(self, price_id):
        if err := self._record("retrieve_price", price_id):
            return err
        price = self.prices.get(price_id)
        return Ok(price) if price else missing("price", price_id)

    async def list_prices(self, *, product_id, active=True):
        if err := self._record("list_prices", product_id):
            return err
        return Ok([p for p in self.prices.values() if p.product == product_id and p.active == active])

    async def create_price(self, *, product_id, unit_amount, currency):
        if err := self._record("create_price", (product_id, unit_amount, currency)):
            return err
        price = PriceView(id=self._next("price"), product=product_id, unit_amount=unit_amount, currency=currency)
        self.prices[price.id] = price
        return Ok(price)

    async def deactivate_price(self, price_id):
        if err := self._record("deactivate_price", price_id):
            return err
        old = self.prices[price_id]
        price = PriceView(id=old.id, product=old.product, unit_amount=old.unit_amount,
                          currency=old.currency, active=False, recurring=old.recurring)
        self.prices[price_id] = price
        return Ok(price)

    # Customers
    async def search_customers(self, query):
        if err := self._record("search_customers", query):
            return err
        field, _, quoted = query.partition(":")
        value = quoted.strip('"')
        return Ok([c for c in self.customers.values() if getattr(c, field) == value])

    async def list_customers(self, limit=None):
        if err := self._record("list_customers", limit):
            return err
        customers = list(self.customers.values())
        return Ok(customers[:limit] if limit else customers)

    async def retrieve_customer(self, customer_id):
        if err := self._record("retrieve_customer", customer_id):
            return err
        customer = self.customers.get(customer_id)
        return Ok(customer) if customer else missing("customer", customer_id)

    async def create_customer(self, **params):
        if err := self._record("create_customer", params):
            return err
        customer = CustomerView(id=self._next("cus"), email=params.get("email"), name=params.get("name"),
                                phone=params.get("phone"), created=1700000000)
        self.customers[customer.id] = customer
        return Ok(customer)

    async def update_customer(self, customer_id, **params):
        if err := self._record("update_customer", (customer_id, params)):
            return err
        old = self.customers.get(customer_id)
        if old is None:
            return missing("customer", customer_id)
        customer = CustomerView(
            id=old.id,
            email=params.get("email", old.email),
            name=params.get("name", old.name),
            phone=params.get("phone", old.phone),
            created=old.created,
        )
        self.customers[customer_id] = customer
        return Ok(customer)

    async def delete_customer(self, customer_id):
        if err := self._record("delete_customer", customer_id):
            return err
        if self.customers.pop(customer_id, None) is None:
            return missing("customer", customer_id)
        return Ok(True)

    # Connected accounts
    async def list_accounts(self, limit):
        if err := self._record("list_accounts", limit):
            return err
        return Ok(list(self.accounts.values())[:limit])

    async def retrieve_account(self, account_id):
        if err := self._record("retrieve_account", account_id):
            return err
        account = self.accounts.get(account_id)
        return Ok(account) if account else missing("account", account_id)

    async def create_express_account(self, *, email, first_name, country, default_currency):
        if err := self._record("create_express_account", dict(email=email, first_name=first_name,
                                                               country=country,
                                                               default_currency=default_currency)):
            return err
        account = ConnectedAccountView(
            id=self._next("acct"),
            type="express",
            email=email,
            created=1700000000,
            default_currency=default_currency,
            details_submitted=False,
            first_name=first_name,
        )
        self.accounts[account.id] = account
        return Ok(account)

    async def create_onboarding_link(self, account_id, *, refresh_url, return_url):
        if err := self._record("create_onboarding_link", account_id):
            return err
        if account_id not in self.accounts:
            return missing("account", account_id)
        return Ok(f"https://connect.example.com/setup/{account_id}")

    async def delete_account(self, account_id):
        if err := self._record("delete_account", account_id):
            return err
        if self.accounts.pop(account_id, None) is None:
            return missing("account", account_id)
        return Ok(True)

    # Fixture helpers
    def add_settled_charge(
        self,
        amount: int = 10000,
        currency: str = "usd",
        *,
        paid: bool = True,
        refunded: bool = False,
        status: str = "succeeded",
        transfer_group: Optional[str] = None,
        intent_id: str = "pi_test_1",
    ) -> PaymentIntentView:
        charge = ChargeView(
            id="ch_test_1",
            amount=amount,
            currency=currency,
            paid=paid,
            refunded=refunded,
            status=status,
            transfer_group=transfer_group,
        )
        intent = PaymentIntentView(
            id=intent_id,
            status="succeeded",
            latest_charge=charge.id,
            amount=amount,
            amount_received=amount if paid else 0,
            currency=currency,
        )
        self.charges[charge.id] = charge
        self.intents[intent.id] = intent
        return intent


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def app(gateway):
    from main import app as fastapi_app
    from api.dependencies import get_payment_gateway

    fastapi_app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def db():
    from infrastructure.database import create_tables, drop_tables, dispose_engine

    await create_tables()
    yield
    await drop_tables()
    # 每个测试使用独立事件循环，连接池不能跨循环复用
    await dispose_engine()


@pytest_asyncio.fixture
async def client(app, db):
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "s3cret-pass"


@pytest_asyncio.fixture
async def auth_headers(client) -> dict:
    """Bootstrap the first user and log in."""
    resp = await client.post(
        "/api/v1/auth/register",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert resp.status_code == 200, resp.text
    resp = await client.post(
        "/api/v1/auth/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['result']['token']}"}
