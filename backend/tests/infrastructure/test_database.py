"""Database session manager — error mapping, schema bootstrap, health check."""

import pytest
from sqlalchemy import text

from tokenledger.core.errors import DatabaseError
from tokenledger.infrastructure.database import DatabaseSessionManager
from tokenledger.models import BalanceRow


@pytest.fixture
async def manager():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    await manager.create_schema()
    yield manager
    await manager.dispose()


async def test_health_check_passes(manager):
    assert await manager.health_check() is True


async def test_integrity_error_maps_to_database_error(manager):
    async with manager.session() as db:
        db.add(BalanceRow(account="alice", amount=1))
        await db.commit()
    with pytest.raises(DatabaseError) as exc_info:
        async with manager.session() as db:
            db.add(BalanceRow(account="alice", amount=2))
            await db.commit()
    assert exc_info.value.code == "DATABASE_ERROR"
    assert exc_info.value.operation == "commit"
    assert exc_info.value.http_status == 503


async def test_bad_sql_maps_to_database_error(manager):
    with pytest.raises(DatabaseError):
        async with manager.session() as db:
            await db.execute(text("SELECT * FROM no_such_table"))


async def test_non_database_errors_pass_through(manager):
    with pytest.raises(KeyError):
        async with manager.session():
            raise KeyError("x")
