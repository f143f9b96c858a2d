"""
Pytest configuration and fixtures.
"""

import sys
import os
import uuid
from decimal import Decimal
from typing import AsyncGenerator

import httpx
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path
sys.path.append(os.getcwd())

from storefront.database import Base, get_db
from storefront.models.course import Course
from storefront.models.profile import Profile
from storefront.models.site_setting import SiteSetting
from storefront.services.settings_provider import SiteSettingsProvider

# Use in-memory SQLite for tests
TEST_DB_URL = "sqlite+aiosqlite://"

BKASH_SETTINGS = {
    "bkash_app_key": "sandbox-app-key",
    "bkash_app_secret": "sandbox-app-secret",
    "bkash_username": "sandboxTokenizedUser02",
    "bkash_password": "sandbox-password",
    "bkash_is_live": False,
}

SSL_SETTINGS = {
    "ssl_store_id": "teststore",
    "ssl_store_password": "teststore@ssl",
    "ssl_is_live": "false",
}


class FakeGateway:
    """
    Answers outbound gateway calls by URL path suffix.
    Every request is recorded so tests can assert on what was sent.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def on(self, suffix: str, json=None, status_code: int = 200, text: str = ""):
        self.routes[suffix] = (status_code, json, text)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for suffix, (status_code, body, text) in self.routes.items():
            if request.url.path.endswith(suffix):
                if body is not None:
                    return httpx.Response(status_code, json=body)
                return httpx.Response(status_code, text=text)
        return httpx.Response(404, json={"error": f"no route for {request.url.path}"})

    def calls(self, suffix: str):
        return [r for r in self.requests if r.url.path.endswith(suffix)]


@pytest_asyncio.fixture
async def test_engine():
    """Create async engine for tests."""
    engine = create_async_engine(
        TEST_DB_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for a test."""
    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest_asyncio.fixture
async def http(fake_gateway) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Outbound HTTP client wired to the fake gateway."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_gateway.handler)) as client:
        yield client


@pytest_asyncio.fixture
async def profile(db) -> Profile:
    """Student profile (u1)."""
    student = Profile(
        user_id=uuid.uuid4(),
        email="student@example.com",
        full_name="Test Student",
        phone="01700000000",
    )
    db.add(student)
    await db.commit()
    return student


@pytest_asyncio.fixture
async def course(db) -> Course:
    """Paid course priced 2500."""
    paid = Course(
        title="Python for Data Analysis",
        slug="python-data-analysis",
        price=Decimal("2500"),
        is_published=True,
    )
    db.add(paid)
    await db.commit()
    return paid


@pytest_asyncio.fixture
async def free_course(db) -> Course:
    free = Course(
        title="Intro to Git",
        slug="intro-to-git",
        price=Decimal("0"),
        is_published=True,
    )
    db.add(free)
    await db.commit()
    return free


@pytest_asyncio.fixture
async def gateway_settings(db):
    """Sandbox credentials for both gateways in site_settings."""
    for key, value in {**BKASH_SETTINGS, **SSL_SETTINGS}.items():
        db.add(SiteSetting(key=key, value=value))
    await db.commit()


@pytest_asyncio.fixture
async def settings_provider(db, gateway_settings) -> SiteSettingsProvider:
    return SiteSettingsProvider(db)


@pytest_asyncio.fixture
async def client(db, http, profile) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    API client authenticated as `profile`.
    Database, outbound HTTP and the caller identity are overridden.
    """
    from storefront.main import app
    from storefront.api.deps import get_current_user_id, get_http_client

    async def override_get_db():
        yield db

    async def override_get_http_client():
        yield http

    async def override_get_current_user_id():
        return str(profile.user_id)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_http_client] = override_get_http_client
    app.dependency_overrides[get_current_user_id] = override_get_current_user_id

    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as api:
        yield api

    app.dependency_overrides.clear()
