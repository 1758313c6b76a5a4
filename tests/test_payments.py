import pytest
from httpx import AsyncClient


@pytest.fixture
def payment_data():
    return {
        "amount": 50,
        "currency": "usd",
        "type": "membership",
        "purpose": "Annual membership",
        "payment_method": "zaad",
    }


@pytest.mark.asyncio
async def test_create_payment(client: AsyncClient, test_user, auth_headers, payment_data):
    response = await client.post("/api/payments", json=payment_data, headers=auth_headers)

    assert response.status_code == 201
    payment = response.json()["payment"]
    assert payment["status"] == "pending"
    assert payment["currency"] == "USD"
    assert payment["user_id"] == str(test_user.id)


@pytest.mark.asyncio
async def test_create_payment_invalid_amount(client: AsyncClient, auth_headers, payment_data):
    payment_data["amount"] = 0

    response = await client.post("/api/payments", json=payment_data, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "amount"


@pytest.mark.asyncio
async def test_my_payments(client: AsyncClient, auth_headers, other_auth_headers, payment_data):
    for _ in range(3):
        await client.post("/api/payments", json=payment_data, headers=auth_headers)
    await client.post("/api/payments", json=payment_data, headers=other_auth_headers)

    response = await client.get("/api/payments/my", params={"limit": 2}, headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert len(data["items"]) == 2
    assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}


@pytest.mark.asyncio
async def test_update_payment_status_admin_only(
    client: AsyncClient, auth_headers, admin_auth_headers, payment_data
):
    payment = (await client.post("/api/payments", json=payment_data, headers=auth_headers)).json()["payment"]
    url = f"/api/payments/{payment['id']}/status"

    forbidden = await client.put(url, json={"status": "completed"}, headers=auth_headers)
    assert forbidden.status_code == 403

    response = await client.put(
        url, json={"status": "completed", "transaction_id": "TX-1001"}, headers=admin_auth_headers
    )
    assert response.status_code == 200
    assert response.json()["payment"]["status"] == "completed"
    assert response.json()["payment"]["transaction_id"] == "TX-1001"


@pytest.mark.asyncio
async def test_update_unknown_payment(client: AsyncClient, admin_auth_headers):
    response = await client.put(
        "/api/payments/00000000-0000-0000-0000-000000000000/status",
        json={"status": "completed"},
        headers=admin_auth_headers,
    )

    assert response.status_code == 404
