"""Auth: sign-up, sign-in, tokens and profile."""
import jwt
import pytest

from rentwise.config import get_settings

from tests.conftest import TEST_PASSWORD


@pytest.mark.asyncio
async def test_signup_then_login(client, db_path):
    body = {"email": "new@rentwise.test", "password": "hunter22", "full_name": "New Person"}
    resp = await client.post("/api/auth?mode=signup", json=body)
    assert resp.status_code == 200
    data = resp.json()
    assert data["profile"]["role"] == "tenant"
    assert data["profile"]["full_name"] == "New Person"

    resp = await client.post("/api/auth/login", json={"email": "NEW@rentwise.test", "password": "hunter22"})
    assert resp.status_code == 200
    token = resp.json()["token"]

    resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["email"] == "new@rentwise.test"


@pytest.mark.asyncio
async def test_register_landlord(client, db_path):
    body = {"email": "owner@rentwise.test", "password": "hunter22", "role": "landlord"}
    resp = await client.post("/api/auth/register", json=body)
    assert resp.status_code == 200
    token = resp.json()["token"]

    resp = await client.get("/api/dashboard", headers={"Authorization": f"Bearer {token}"})
    assert resp.json()["role"] == "landlord"


@pytest.mark.asyncio
async def test_token_claims(client, db_path):
    resp = await client.post("/api/auth", json={"email": "tom@rentwise.test", "password": TEST_PASSWORD})
    assert resp.status_code == 200
    settings = get_settings()
    claims = jwt.decode(resp.json()["token"], settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    assert claims["sub"] == "tenant_1"
    assert claims["role"] == "tenant"
    assert claims["exp"] - claims["iat"] == settings.jwt_expiration


@pytest.mark.asyncio
async def test_wrong_password(client, db_path):
    resp = await client.post("/api/auth/login", json={"email": "tom@rentwise.test", "password": "wrong"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_duplicate_email(client, db_path):
    body = {"email": "tom@rentwise.test", "password": "hunter22"}
    resp = await client.post("/api/auth/register", json=body)
    assert resp.status_code == 400
    assert resp.json()["description"] == "Email already registered"


@pytest.mark.asyncio
async def test_admin_cannot_self_register(client, db_path):
    body = {"email": "boss@rentwise.test", "password": "hunter22", "role": "admin"}
    resp = await client.post("/api/auth?mode=signup", json=body)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_short_password(client, db_path):
    resp = await client.post("/api/auth?mode=signup", json={"email": "x@rentwise.test", "password": "abc"})
    assert resp.status_code == 400
    resp = await client.post("/api/auth/register", json={"email": "x@rentwise.test", "password": "abc"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_profile_update(client, headers):
    resp = await client.get("/api/profile", headers=headers["tenant_1"])
    assert resp.json()["full_name"] == "Tom Tenant"

    resp = await client.patch("/api/profile", json={"full_name": "Thomas Tenant"}, headers=headers["tenant_1"])
    assert resp.status_code == 200
    assert resp.json()["profile"]["full_name"] == "Thomas Tenant"
    assert resp.json()["notification"]["title"] == "Profile updated successfully"

    resp = await client.patch("/api/profile", json={"email": "tia@rentwise.test"}, headers=headers["tenant_1"])
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_profile_email_conflict_ignores_case(client, headers):
    resp = await client.patch("/api/profile", json={"email": "LENA@rentwise.test"}, headers=headers["tenant_1"])
    assert resp.status_code == 400
    assert resp.json()["description"] == "Email already registered"

    resp = await client.post("/api/auth/login", json={"email": "lena@rentwise.test", "password": TEST_PASSWORD})
    assert resp.json()["profile"]["id"] == "landlord_1"
    resp = await client.post("/api/auth/login", json={"email": "tom@rentwise.test", "password": TEST_PASSWORD})
    assert resp.json()["profile"]["id"] == "tenant_1"


@pytest.mark.asyncio
async def test_profile_email_case_change_for_self(client, headers):
    resp = await client.patch("/api/profile", json={"email": "TOM@rentwise.test"}, headers=headers["tenant_1"])
    assert resp.status_code == 200
    assert resp.json()["profile"]["email"] == "TOM@rentwise.test"
