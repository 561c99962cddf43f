import pytest

from application.dtos.payments import ChargePayload, PartialRefundPayload, RefundPayload, ReleasePayload
from application.services import payment_service as ps
from application.services.payment_service import PaymentService
from domain.common.exceptions import GatewayException, NotFoundException, ValidationException
from domain.payment.entity import BalanceView, CheckoutSessionView, CustomerView, PriceView
from domain.payment.result import Err
from shared.codes.payment_codes import CHARGE_ALREADY_REFUNDED, GatewayErrorKind


def _release(**overrides) -> ReleasePayload:
    data = {"payment_intent": "pi_test_1", "consultant_account_id": "acct_consultant"}
    data.update(overrides)
    return ReleasePayload(**data)


@pytest.mark.asyncio
async def test_release_transfers_amount_minus_fee(gateway):
    gateway.add_settled_charge(10000, "usd")
    gateway.balance = BalanceView(available={"usd": 50000})

    result = await PaymentService(gateway).release(_release(), idempotency_key="idem-1")

    assert result.amount == 9000
    assert result.currency == "usd"
    assert result.destination == "acct_consultant"
    (req,) = gateway.called("create_transfer")
    assert req.transfer_group == "pi_test_1"
    assert req.idempotency_key == "idem-1"


@pytest.mark.asyncio
async def test_release_uses_charge_transfer_group_and_custom_fee(gateway):
    gateway.add_settled_charge(10000, "usd", transfer_group="order_42")
    gateway.balance = BalanceView(available={"usd": 10000})

    result = await PaymentService(gateway).release(_release(platform_fee_percent=25))

    assert result.amount == 7500
    assert gateway.called("create_transfer")[0].transfer_group == "order_42"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "charge_kwargs",
    [
        {"paid": False},
        {"refunded": True},
        {"status": "pending"},
    ],
)
async def test_release_rejects_unsettled_charge(gateway, charge_kwargs):
    gateway.add_settled_charge(10000, "usd", **charge_kwargs)
    gateway.balance = BalanceView(available={"usd": 50000})

    with pytest.raises(ValidationException) as exc:
        await PaymentService(gateway).release(_release())

    assert exc.value.message == ps.CHARGE_NOT_RELEASABLE
    assert gateway.called("create_transfer") == []
    assert gateway.called("retrieve_balance") == []


@pytest.mark.asyncio
async def test_release_rejects_insufficient_balance(gateway):
    gateway.add_settled_charge(10000, "usd")
    gateway.balance = BalanceView(available={"usd": 8999, "eur": 100000})

    with pytest.raises(ValidationException) as exc:
        await PaymentService(gateway).release(_release())

    assert exc.value.code == 400
    assert exc.value.message == ps.INSUFFICIENT_BALANCE
    assert gateway.called("create_transfer") == []


@pytest.mark.asyncio
async def test_release_with_exact_balance_succeeds(gateway):
    gateway.add_settled_charge(10000, "usd")
    gateway.balance = BalanceView(available={"usd": 9000})

    result = await PaymentService(gateway).release(_release())
    assert result.amount == 9000


@pytest.mark.asyncio
async def test_release_without_charge(gateway):
    intent = gateway.add_settled_charge(10000, "usd")
    gateway.intents[intent.id] = type(intent)(id=intent.id, status="requires_payment_method")

    with pytest.raises(ValidationException) as exc:
        await PaymentService(gateway).release(_release())
    assert exc.value.message == ps.NO_CHARGE


@pytest.mark.asyncio
async def test_release_nothing_left_after_full_fee(gateway):
    gateway.add_settled_charge(10000, "usd")
    gateway.balance = BalanceView(available={"usd": 50000})

    with pytest.raises(ValidationException) as exc:
        await PaymentService(gateway).release(_release(platform_fee_percent=100))

    assert exc.value.message == ps.NOTHING_TO_RELEASE
    assert gateway.called("create_transfer") == []


@pytest.mark.asyncio
async def test_release_unknown_intent_is_not_found(gateway):
    with pytest.raises(NotFoundException) as exc:
        await PaymentService(gateway).release(_release(payment_intent="pi_missing"))
    assert "pi_missing" in exc.value.message


@pytest.mark.asyncio
async def test_partial_refund_defaults_to_ninety_percent(gateway):
    gateway.add_settled_charge(5000, "usd")

    result = await PaymentService(gateway).partial_refund(PartialRefundPayload(payment_intent="pi_test_1"))

    assert result.amount == 4500
    assert gateway.called("create_refund")[0].amount == 4500


@pytest.mark.asyncio
async def test_partial_refund_without_received_amount(gateway):
    gateway.add_settled_charge(5000, "usd", paid=False)

    with pytest.raises(ValidationException) as exc:
        await PaymentService(gateway).partial_refund(PartialRefundPayload(payment_intent="pi_test_1"))
    assert exc.value.message == ps.NO_PAYMENT_RECEIVED


@pytest.mark.asyncio
async def test_partial_refund_rounding_to_zero_is_rejected(gateway):
    gateway.add_settled_charge(1, "usd")

    with pytest.raises(ValidationException) as exc:
        await PaymentService(gateway).partial_refund(PartialRefundPayload(payment_intent="pi_test_1"))

    assert exc.value.code == 400
    assert exc.value.message == ps.NOTHING_TO_REFUND
    assert gateway.called("create_refund") == []


@pytest.mark.asyncio
async def test_full_refund_passes_no_amount(gateway):
    gateway.add_settled_charge(5000, "usd")

    result = await PaymentService(gateway).refund(RefundPayload(payment_intent="pi_test_1"), "idem-r")

    assert result.amount == 5000
    (req,) = gateway.called("create_refund")
    assert req.amount is None
    assert req.idempotency_key == "idem-r"


@pytest.mark.asyncio
async def test_refund_already_refunded_is_bad_request(gateway):
    gateway.failures["create_refund"] = Err(
        kind=GatewayErrorKind.ALREADY_REFUNDED,
        message="Charge ch_1 has already been refunded.",
        status_code=400,
        code=CHARGE_ALREADY_REFUNDED,
    )

    with pytest.raises(ValidationException) as exc:
        await PaymentService(gateway).refund(RefundPayload(payment_intent="pi_test_1"))
    assert exc.value.message == ps.ALREADY_REFUNDED


@pytest.mark.asyncio
async def test_gateway_error_status_and_message_pass_through(gateway):
    gateway.failures["create_refund"] = Err(
        kind=GatewayErrorKind.RATE_LIMIT, message="Too many requests", status_code=429, code="rate_limit"
    )

    with pytest.raises(GatewayException) as exc:
        await PaymentService(gateway).refund(RefundPayload(payment_intent="pi_test_1"))
    assert exc.value.code == 429
    assert exc.value.message == "Too many requests"


@pytest.mark.asyncio
async def test_gateway_error_without_status_is_500(gateway):
    gateway.failures["retrieve_balance"] = Err(kind=GatewayErrorKind.API, message="boom")
    gateway.add_settled_charge(10000, "usd")

    with pytest.raises(GatewayException) as exc:
        await PaymentService(gateway).release(_release())
    assert exc.value.code == 500


@pytest.mark.asyncio
async def test_charge_creates_customer_and_session(gateway):
    gateway.prices["price_one"] = PriceView(id="price_one", product="prod_1", unit_amount=2500, currency="usd")

    result = await PaymentService(gateway).charge(
        ChargePayload(customerEmail="buyer@example.com", priceId="price_one"), "idem-c"
    )

    assert result.id.startswith("cs_test")
    assert result.session_url.endswith(result.id)
    (session_args,) = gateway.called("create_checkout_session")
    assert session_args["metadata"] == {"customerEmail": "buyer@example.com", "priceId": "price_one"}
    assert session_args["idempotency_key"] == "idem-c"
    assert session_args["customer_id"] in gateway.customers


@pytest.mark.asyncio
async def test_charge_reuses_existing_customer(gateway):
    gateway.prices["price_one"] = PriceView(id="price_one", product="prod_1", unit_amount=2500, currency="usd")
    gateway.customers["cus_existing"] = CustomerView(id="cus_existing", email="buyer@example.com")

    await PaymentService(gateway).charge(ChargePayload(customerEmail="buyer@example.com", priceId="price_one"))

    assert gateway.called("create_customer") == []
    assert gateway.called("create_checkout_session")[0]["customer_id"] == "cus_existing"


@pytest.mark.asyncio
async def test_charge_rejects_recurring_price(gateway):
    gateway.prices["price_sub"] = PriceView(
        id="price_sub", product="prod_1", unit_amount=900, currency="usd", recurring=True
    )

    with pytest.raises(ValidationException) as exc:
        await PaymentService(gateway).charge(ChargePayload(customerEmail="a@example.com", priceId="price_sub"))

    assert exc.value.message == ps.RECURRING_PRICE
    assert gateway.called("create_checkout_session") == []


@pytest.mark.asyncio
async def test_verify_paid_session(gateway):
    gateway.sessions["cs_paid"] = CheckoutSessionView(
        id="cs_paid", url=None, currency="usd", created=1700000000, email="a@example.com",
        amount_total=2599, payment_status="paid", payment_intent="pi_123",
    )

    result = await PaymentService(gateway).verify("cs_paid")

    assert result.amount == 25.99
    assert result.payment_intent == "pi_123"


@pytest.mark.asyncio
async def test_verify_unpaid_session_echoes_details(gateway):
    gateway.sessions["cs_open"] = CheckoutSessionView(
        id="cs_open", url=None, currency="usd", created=1700000000, email="a@example.com",
        amount_total=2599, payment_status="unpaid", payment_intent=None,
    )

    with pytest.raises(ValidationException) as exc:
        await PaymentService(gateway).verify("cs_open")

    assert exc.value.message == ps.PAYMENT_INCOMPLETE
    assert exc.value.result.id == "cs_open"
    assert exc.value.result.payment_status == "unpaid"


@pytest.mark.asyncio
async def test_verify_requires_session_id(gateway):
    with pytest.raises(ValidationException) as exc:
        await PaymentService(gateway).verify(None)
    assert exc.value.message == ps.MISSING_SESSION_ID
    assert gateway.calls == []
