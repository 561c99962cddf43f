import pytest

from api.middleware.logging import mask_email, sanitize


def test_sanitize_redacts_credentials_and_masks_emails():
    body = {
        "email": "buyer@example.com",
        "password": "hunter22",
        "nested": [{"customerEmail": "x@shop.io", "priceId": "price_1"}],
    }

    assert sanitize(body) == {
        "email": "b***@example.com",
        "password": "***",
        "nested": [{"customerEmail": "x***@shop.io", "priceId": "price_1"}],
    }


def test_mask_email_leaves_non_emails():
    assert mask_email("not-an-email") == "not-an-email"
    assert mask_email(None) is None


@pytest.mark.asyncio
async def test_request_id_is_echoed_when_safe(client):
    resp = await client.get("/", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"
    assert "X-Process-Time" in resp.headers


@pytest.mark.asyncio
async def test_unsafe_request_id_is_replaced(client):
    resp = await client.get("/", headers={"X-Request-ID": "bad id with spaces"})
    assert resp.headers["X-Request-ID"] != "bad id with spaces"
    assert len(resp.headers["X-Request-ID"]) == 32


@pytest.mark.asyncio
async def test_error_envelope_carries_request_id(client):
    resp = await client.get("/api/v1/auth", headers={"X-Request-ID": "trace-1"})
    assert resp.status_code == 401
    assert resp.json()["error"]["request_id"] == "trace-1"
