"""
Proposal store engine and sessions.

One async engine per process; every request and job works in its own
session, committed on success and rolled back on database errors.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tradepool.config import settings
from tradepool.models.db import Base


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for the proposal store."""
    return create_async_engine(url, echo=echo, pool_pre_ping=True)


engine = build_engine(settings.database_url, echo=settings.debug)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a proposal store session.

    Commits when the endpoint returns normally; rolls back and re-raises
    on database errors.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create the users, proposals and pending trade tables if missing."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(bind: AsyncEngine | None = None) -> None:
    """Drop every table. Test use only."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
