"""PostgreSQL access: one async engine per process, one session per request.

Repositories issue raw text() SQL on the session they are handed; the ORM
classes deriving from Base only describe the tables for Alembic and typing.
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
    """Declarative base for users, accounts, events, event_options, bets, ledger_entries."""


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


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one AsyncSession per request, closed afterwards.

    Services own the transaction: they commit once at the end of a mutating
    operation and roll back on any exception.
    """
    async with async_session_factory() as session:
        yield session


async def ping_database() -> None:
    """Fail fast at startup when PostgreSQL is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
