import pytest

from domain.payment.entity import ConnectedAccountView


async def _create(client, headers, email="consultant@example.com") -> dict:
    resp = await client.post(
        "/api/v1/consultants", json={"first_name": "Dana", "email": email}, headers=headers
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["result"]


@pytest.mark.asyncio
async def test_create_express_account(client, auth_headers, gateway):
    consultant = await _create(client, auth_headers)

    assert consultant["id"].startswith("acct_")
    assert consultant["stripe_account_id"] == consultant["id"]
    assert consultant["first_name"] == "Dana"
    assert consultant["onboarded"] is False
    (args,) = gateway.called("create_express_account")
    assert args["country"] == "US"
    assert args["default_currency"] == "usd"


@pytest.mark.asyncio
async def test_list_only_express_accounts(client, auth_headers, gateway):
    consultant = await _create(client, auth_headers)
    gateway.accounts["acct_std"] = ConnectedAccountView(
        id="acct_std", type="standard", email="s@example.com", created=1, default_currency="usd"
    )

    resp = await client.get("/api/v1/consultants", headers=auth_headers)
    assert [c["id"] for c in resp.json()["result"]] == [consultant["id"]]


@pytest.mark.asyncio
async def test_show_consultant(client, auth_headers):
    consultant = await _create(client, auth_headers)

    resp = await client.get(f"/api/v1/consultants/{consultant['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["result"]["email"] == "consultant@example.com"


@pytest.mark.asyncio
async def test_show_missing_consultant(client, auth_headers):
    resp = await client.get("/api/v1/consultants/acct_missing", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["message"] == "Resource not found"


@pytest.mark.asyncio
async def test_onboarding_link(client, auth_headers):
    consultant = await _create(client, auth_headers)

    resp = await client.get(
        "/api/v1/consultants/onboarding", params={"account_id": consultant["id"]}, headers=auth_headers
    )
    assert resp.status_code == 200
    assert resp.json()["result"]["url"].endswith(consultant["id"])


@pytest.mark.asyncio
async def test_onboarding_requires_account_id(client, auth_headers, gateway):
    resp = await client.get("/api/v1/consultants/onboarding", headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Missing account_id"
    assert gateway.called("create_onboarding_link") == []


@pytest.mark.asyncio
async def test_delete_consultant(client, auth_headers, gateway):
    consultant = await _create(client, auth_headers)

    resp = await client.delete(f"/api/v1/consultants/{consultant['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["result"] == {"id": consultant["id"], "deleted": True}
    assert consultant["id"] not in gateway.accounts


@pytest.mark.asyncio
async def test_create_consultant_validation(client, auth_headers):
    resp = await client.post(
        "/api/v1/consultants", json={"first_name": "", "email": "bad"}, headers=auth_headers
    )
    assert resp.status_code == 400
