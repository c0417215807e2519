# This project was developed with assistance from AI tools.
"""Integration test fixtures -- real PostgreSQL, no mocks.

A session-scoped container provides PostgreSQL with the Alembic schema
(including the immutability triggers). Function-scoped fixtures give each
test an isolated DB session with savepoint rollback so tests don't leak
state.

Postgres ``now()`` is the transaction start time and every test runs inside
one outer transaction, so rows that must be ordered against a receipt get
explicit ``created_at`` values.
"""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from testcontainers.postgres import PostgresContainer

pytestmark = pytest.mark.integration

DB_PACKAGE = Path(__file__).resolve().parents[3] / "db"


def _container_url(pg: PostgresContainer, drivername: str) -> URL:
    return URL.create(
        drivername,
        username=pg.username,
        password=pg.password,
        host=pg.get_container_host_ip(),
        port=int(pg.get_exposed_port(5432)),
        database=pg.dbname,
    )


@pytest.fixture(scope="session")
def pg_container():
    with PostgresContainer(
        "postgres:16", username="heirvault", password="heirvault", dbname="heirvault"
    ) as pg:
        yield pg


@pytest.fixture(scope="session")
def migrated_db(pg_container) -> URL:
    """Apply every Alembic revision (schema plus triggers); returns the asyncpg URL."""
    from alembic import command
    from alembic.config import Config

    cfg = Config(str(DB_PACKAGE / "alembic.ini"))
    cfg.set_main_option("script_location", str(DB_PACKAGE / "alembic"))
    cfg.set_main_option(
        "sqlalchemy.url",
        _container_url(pg_container, "postgresql+psycopg2").render_as_string(hide_password=False),
    )
    command.upgrade(cfg, "head")
    return _container_url(pg_container, "postgresql+asyncpg")


@pytest.fixture(scope="session")
def async_engine(migrated_db):
    return create_async_engine(migrated_db, poolclass=NullPool)


@pytest.fixture(scope="session", autouse=True)
def _bind_db_package(async_engine):
    """Rebind the db package globals so readiness checks reach the container."""
    import db.database as db_mod

    db_mod.engine = async_engine
    db_mod.SessionLocal = async_sessionmaker(async_engine, expire_on_commit=False, autoflush=False)
    db_mod.db_service = db_mod.DatabaseService(engine=async_engine)


@pytest_asyncio.fixture
async def db_session(async_engine):
    """Session inside an outer transaction; commits become savepoints."""
    async with async_engine.connect() as conn:
        outer = await conn.begin()
        session = AsyncSession(
            bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False
        )
        try:
            yield session
        finally:
            await session.close()
            await outer.rollback()


@pytest.fixture
def client_factory(db_session):
    """``await client_factory(user)`` gives an httpx client bound to ``db_session``."""
    import db.database as db_mod
    from db.database import get_db, get_db_service

    from src.main import app
    from src.middleware.auth import get_current_user

    async def _session():
        yield db_session

    async def _service():
        return db_mod.db_service

    async def _make(user):
        async def _user():
            return user

        app.dependency_overrides.update(
            {get_db: _session, get_db_service: _service, get_current_user: _user}
        )
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app, raise_app_exceptions=False),
            base_url="http://test",
        )

    yield _make
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def seeded_client(db_session):
    """A client with two policies created before the current transaction.

    Returns ``(client, [older_policy, newer_policy])``. The attorney persona
    from ``tests.functional.personas`` holds an active grant on the client.
    """
    from db.models import AttorneyClientAccess, Client, Insurer, Policy

    from tests.functional.personas import ATTORNEY_USER_ID

    now = datetime.now(UTC)
    client = Client(first_name="Eleanor", last_name="Vance", email="eleanor@example.com")
    insurer = Insurer(name="Acme Life")
    db_session.add_all([client, insurer])
    await db_session.flush()

    older = Policy(
        client_id=client.id,
        insurer_id=insurer.id,
        policy_number="POL-111111",
        created_at=now - timedelta(days=2),
    )
    newer = Policy(
        client_id=client.id,
        carrier_name_raw="Mutual of Nowhere",
        policy_number="POL-222222",
        created_at=now - timedelta(days=1),
    )
    db_session.add_all(
        [older, newer, AttorneyClientAccess(attorney_id=ATTORNEY_USER_ID, client_id=client.id)]
    )
    await db_session.flush()
    return client, [older, newer]
