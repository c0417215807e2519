# This project was developed with assistance from AI tools.
"""Async engine, session factory, and FastAPI dependencies."""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import db_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

engine = create_async_engine(
    db_settings.DATABASE_URL,
    echo=db_settings.SQL_ECHO,
    pool_size=db_settings.POOL_SIZE,
    max_overflow=db_settings.MAX_OVERFLOW,
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class DatabaseService:
    """Thin wrapper around the engine for health checks and shutdown."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def health_check(self) -> dict:
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(text("SELECT version()"))
                version = result.scalar()
            return {"status": "healthy", "version": version}
        except Exception as exc:
            logger.warning("Database health check failed: %s", exc)
            return {"status": "unhealthy", "error": str(exc)}

    async def close(self) -> None:
        await self.engine.dispose()


db_service = DatabaseService(engine=engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a request-scoped session."""
    async with SessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def get_db_service() -> DatabaseService:
    return db_service
