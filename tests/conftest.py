"""Shared test fixtures: async SQLite in-memory DB + test client."""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

# Import all models so metadata is populated
import billtracker.models  # noqa: E402, F401
from billtracker.core.database import get_session  # noqa: E402
from billtracker.main import app  # noqa: E402
from billtracker.services.tenants import create_admin_user  # noqa: E402
from helpers import Tenant  # noqa: E402

ADMIN_EMAIL = "root@billtracker.com"
ADMIN_PASSWORD = "rootpass123"


@pytest.fixture
async def engine():
    """A fresh in-memory database per test."""
    eng = create_async_engine("sqlite+aiosqlite://", echo=False, poolclass=StaticPool)
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def test_session_factory(engine):
    """Session factory bound to the test SQLite engine."""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(test_session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with test_session_factory() as sess:
        yield sess
        await sess.rollback()


@pytest.fixture
async def client(session) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX async test client with DB session override."""

    async def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def admin_headers(client: AsyncClient, session: AsyncSession) -> dict[str, str]:
    """Seed a super-admin and return its bearer headers."""
    await create_admin_user(session, ADMIN_EMAIL, ADMIN_PASSWORD)
    resp = await client.post("/api/admin/login", json={
        "email": ADMIN_EMAIL,
        "password": ADMIN_PASSWORD,
    })
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def make_company(
    client: AsyncClient, admin_headers: dict[str, str]
) -> Callable[[str], Awaitable[Tenant]]:
    """Provision a company through the admin console and log in as its admin."""

    async def _make(slug: str) -> Tenant:
        owner_email = f"owner@{slug}.com"
        resp = await client.post("/api/admin/companies", json={
            "name": f"{slug.title()} Ltd",
            "email": f"billing@{slug}.com",
            "admin_user": {
                "email": owner_email,
                "password": "ownerpass1",
                "first_name": "Olive",
                "last_name": slug.title(),
            },
        }, headers=admin_headers)
        assert resp.status_code == 201, resp.text
        company_id = resp.json()["company"]["id"]

        resp = await client.post("/api/auth/login", json={
            "email": owner_email,
            "password": "ownerpass1",
        })
        assert resp.status_code == 200, resp.text
        headers = {"Authorization": f"Bearer {resp.json()['access_token']}"}
        return Tenant(client=client, company_id=company_id, headers=headers)

    return _make
