"""Test fixtures for the Custom Domain Service test suite."""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment variables BEFORE importing app modules
os.environ.update({
    "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
    "APP_DOMAIN": "linkpop.space",
    "CNAME_TARGET": "linkpop.space",
    "DOH_ENDPOINT": "https://dns.test/dns-query",
    "DEV_HOST_ALIASES": "localhost,127.0.0.1,::1",
    "PREVIEW_HOST_SUFFIXES": "vercel.app",
    "PRO_TIERS": "pro,business",
    "DEPLOYMENT_WEBHOOK_SECRET": "test-deployment-secret",
    "ENVIRONMENT": "test",
    "LOG_LEVEL": "WARNING",
})

from custom_domains.database import Base, get_session  # noqa: E402
from custom_domains.main import create_app  # noqa: E402
from custom_domains.models import Account  # noqa: E402
from custom_domains.utils.rate_limiter import domain_rate_limiter  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Start every test with an empty rate limit window."""
    domain_rate_limiter.reset()
    yield
    domain_rate_limiter.reset()


@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """Provide a session on a fresh in-memory database for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    async with factory() as session:
        yield session
        await session.rollback()
    await engine.dispose()


@pytest.fixture
def make_account(db: AsyncSession) -> Callable[..., Awaitable[Account]]:
    """Factory for test accounts (Pro tier by default)."""

    async def _make_account(
        tier: str = "pro",
        username: str | None = None,
        subdomain: str | None = None,
    ) -> Account:
        name = username or f"user{uuid4().hex[:8]}"
        account = Account(
            id=uuid4(),
            username=name,
            subdomain=subdomain,
            subscription_tier=tier,
        )
        db.add(account)
        await db.flush()
        return account

    return _make_account


@pytest.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client with database session override."""
    app = create_app()

    async def override_get_session():
        yield db

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

