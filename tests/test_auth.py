"""Tests for staff login, token handling and the health check."""

from datetime import timedelta

import pytest
from jose import jwt

from billtracker.core.config import get_settings
from billtracker.core.security import TOKEN_KIND_USER, create_jwt, decode_jwt


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_login_returns_company_scoped_token(client, make_company):
    acme = await make_company("acme-login")

    resp = await client.post("/api/auth/login", json={
        "email": "owner@acme-login.com",
        "password": "ownerpass1",
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "owner@acme-login.com"
    assert body["company"]["id"] == acme.company_id

    claims = decode_jwt(body["access_token"])
    assert claims["kind"] == TOKEN_KIND_USER
    assert claims["cid"] == acme.company_id
    assert claims["role"] == "admin"


@pytest.mark.asyncio
async def test_login_wrong_password(client, make_company):
    await make_company("acme-wrong")

    resp = await client.post("/api/auth/login", json={
        "email": "owner@acme-wrong.com",
        "password": "not-the-password",
    })
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_unknown_email(client):
    resp = await client.post("/api/auth/login", json={
        "email": "nobody@nowhere.com",
        "password": "whatever1",
    })
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_me(make_company):
    acme = await make_company("acme-me")

    resp = await acme.get("/api/auth/me")
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "owner@acme-me.com"
    assert resp.json()["company"]["name"] == "Acme-Me Ltd"


@pytest.mark.asyncio
async def test_garbage_token(client):
    resp = await client.get("/api/clients", headers={"Authorization": "Bearer not.a.jwt"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_expired_token(client, make_company):
    acme = await make_company("acme-expired")
    token = create_jwt(
        subject="1",
        kind=TOKEN_KIND_USER,
        company_id=acme.company_id,
        expires_delta=timedelta(minutes=-5),
    )
    resp = await client.get("/api/clients", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_without_kind_is_rejected(client):
    settings = get_settings()
    token = jwt.encode({"sub": "1"}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    resp = await client.get("/api/clients", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Malformed token payload"
