import pytest
from httpx import AsyncClient


@pytest.fixture
def register_data():
    return {
        "first_name": "Amina",
        "last_name": "Hassan",
        "email": "Amina.Hassan@Example.com",
        "password": "secret123",
        "graduation_year": 2015,
        "profession": "Engineer",
    }


@pytest.mark.asyncio
async def test_register_user(client: AsyncClient, register_data):
    """Registration returns the user and a token pair"""
    response = await client.post("/api/auth/register", json=register_data)

    assert response.status_code == 201
    data = response.json()
    assert data["user"]["email"] == "amina.hassan@example.com"
    assert data["user"]["role"] == "alumni"
    assert data["user"]["profile"]["graduation_year"] == 2015
    assert data["token_type"] == "bearer"
    assert data["access_token"]
    assert data["refresh_token"]


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, register_data):
    await client.post("/api/auth/register", json=register_data)

    response = await client.post("/api/auth/register", json=register_data)

    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


@pytest.mark.asyncio
async def test_register_short_password(client: AsyncClient, register_data):
    """Validation failures come back as 400 with field level errors"""
    register_data["password"] = "123"

    response = await client.post("/api/auth/register", json=register_data)

    assert response.status_code == 400
    data = response.json()
    assert data["detail"] == "Validation failed"
    assert any(err["field"] == "password" for err in data["errors"])


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, register_data):
    await client.post("/api/auth/register", json=register_data)

    response = await client.post(
        "/api/auth/login",
        json={"email": register_data["email"], "password": register_data["password"]}
    )

    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert "refresh_token" in data
    assert data["user"]["last_login"] is not None


@pytest.mark.asyncio
async def test_login_invalid_credentials(client: AsyncClient, test_user):
    response = await client.post(
        "/api/auth/login",
        json={"email": test_user.email, "password": "wrongpassword"}
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_inactive_account(client: AsyncClient, create_user):
    user = await create_user(is_active=False)

    response = await client.post(
        "/api/auth/login",
        json={"email": user.email, "password": "testpassword123"}
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_refresh_token(client: AsyncClient, register_data):
    tokens = (await client.post("/api/auth/register", json=register_data)).json()

    response = await client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

    assert response.status_code == 200
    assert response.json()["access_token"]


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client: AsyncClient, register_data):
    tokens = (await client.post("/api/auth/register", json=register_data)).json()

    response = await client.post("/api/auth/refresh", json={"refresh_token": tokens["access_token"]})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_current_user(client: AsyncClient, test_user, auth_headers):
    response = await client.get("/api/auth/me", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == test_user.email
    assert data["preferences"] is not None


@pytest.mark.asyncio
async def test_unauthorized_access(client: AsyncClient):
    response = await client.get("/api/auth/me")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_garbage_token(client: AsyncClient):
    response = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_FAILED"


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "OK"
    assert "X-Request-ID" in response.headers
