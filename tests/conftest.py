from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from storemanager.db.session import Base, get_db
from storemanager.logging import LoggingSettings, configure_logging
from storemanager.main import create_app
from storemanager.security import InMemoryCredentialStore, Role
from tests.factories import ADMIN, CUSTOMER

# Fixtures outside conftest.py are only visible when registered as plugins.
pytest_plugins = ["tests.seeds"]

# Uncached loggers pick up the processors installed by structlog.testing.capture_logs.
configure_logging(LoggingSettings(LOG_CACHE_LOGGERS=False))

# In-memory SQLite; StaticPool keeps the single connection (and so the data) alive for the test.
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture(scope="session")
def credentials() -> InMemoryCredentialStore:
    """The two default accounts, hashed with the cheapest bcrypt cost."""
    return InMemoryCredentialStore.from_plaintext(
        {
            CUSTOMER[0]: (CUSTOMER[1], [Role.CUSTOMER]),
            ADMIN[0]: (ADMIN[1], [Role.CUSTOMER, Role.ADMIN]),
        },
        rounds=4,
    )


@pytest_asyncio.fixture
async def db() -> AsyncIterator[AsyncSession]:
    """Create tables in a fresh in-memory database and yield a session."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_sessionmaker(engine, expire_on_commit=False)() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def app(credentials: InMemoryCredentialStore) -> FastAPI:
    return create_app(credentials=credentials)


@pytest_asyncio.fixture
async def client(app: FastAPI, db: AsyncSession) -> AsyncIterator[AsyncClient]:
    """HTTP client whose requests all share the test database session."""

    async def override_get_db() -> AsyncIterator[AsyncSession]:
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
