# This project was developed with assistance from AI tools.
"""DatabaseService and session dependency tests (no running PostgreSQL)."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from db.database import DatabaseService, get_db


def _engine(connect_side_effect=None, version="PostgreSQL 16.4"):
    conn = AsyncMock()
    result = MagicMock()
    result.scalar.return_value = version
    conn.execute.return_value = result

    ctx = AsyncMock()
    ctx.__aenter__.return_value = conn
    engine = MagicMock()
    engine.connect.return_value = ctx
    if connect_side_effect is not None:
        engine.connect.side_effect = connect_side_effect
    engine.dispose = AsyncMock()
    return engine


@pytest.mark.asyncio
async def test_health_check_healthy():
    health = await DatabaseService(_engine()).health_check()
    assert health == {"status": "healthy", "version": "PostgreSQL 16.4"}


@pytest.mark.asyncio
async def test_health_check_reports_connection_failure():
    error = OperationalError("SELECT version()", {}, Exception("connection refused"))
    health = await DatabaseService(_engine(connect_side_effect=error)).health_check()
    assert health["status"] == "unhealthy"
    assert "connection refused" in health["error"]


@pytest.mark.asyncio
async def test_close_disposes_engine():
    engine = _engine()
    await DatabaseService(engine).close()
    engine.dispose.assert_awaited_once()


@pytest.mark.asyncio
async def test_get_db_rolls_back_on_error(monkeypatch):
    import db.database as db_mod

    session = AsyncMock()
    factory_ctx = AsyncMock()
    factory_ctx.__aenter__.return_value = session
    factory_ctx.__aexit__.return_value = False
    monkeypatch.setattr(db_mod, "SessionLocal", MagicMock(return_value=factory_ctx))

    gen = get_db()
    assert await gen.__anext__() is session
    with pytest.raises(RuntimeError):
        await gen.athrow(RuntimeError("boom"))
    session.rollback.assert_awaited_once()
