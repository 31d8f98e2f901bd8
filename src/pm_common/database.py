"""Async engine, session factory and the per-request session dependency.

Pool sizing comes from settings. Every repository issues raw ``text()`` SQL
on the session it is handed; mutating services own commit and rollback.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def check_database() -> None:
    """Fail fast at startup when PostgreSQL is unreachable or unmigrated."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1 FROM protocol_config WHERE id = 1"))


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        yield session
