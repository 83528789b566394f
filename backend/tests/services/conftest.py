"""Service test fixtures — async DB, bootstrapped ledger service, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session
    - db_manager and ledger_service singletons patched and restored per test
    - Genesis: alice holds the whole initial supply of 1000

Design Decisions:
    - SQLite in-memory with StaticPool: one shared connection, so every
      session sees the same database
    - Lifespan not run by ASGITransport: fixtures perform the bootstrap directly
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from tokenledger.db.base import Base
from tokenledger.infrastructure.database import get_db, DatabaseSessionManager
from tokenledger.services.ledger_repository import SqlLedgerRepository
from tokenledger.services.ledger_service import LedgerService
import tokenledger.infrastructure.database as db_module
import tokenledger.services.ledger_service as ledger_module
from tokenledger.main import app

GENESIS_SUPPLY = 1000
GENESIS_ACCOUNT = "alice"


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def repository(test_db):
    return SqlLedgerRepository(test_db)


@pytest.fixture
async def service(repository):
    """Ledger service bootstrapped from genesis into the test DB."""
    return await LedgerService.bootstrap(
        repository, GENESIS_SUPPLY, GENESIS_ACCOUNT,
    )


@pytest.fixture
async def client(test_engine, test_session_factory, service):
    """FastAPI test client with DB dependency and singletons overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    original_service = ledger_module.ledger_service
    db_module.db_manager = DatabaseSessionManager.from_engine(test_engine)
    ledger_module.ledger_service = service

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
    ledger_module.ledger_service = original_service
