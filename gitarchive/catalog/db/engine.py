"""Async SQLAlchemy engine and session factory.

PostgreSQL is reached through psycopg3 (``postgresql+psycopg://``), which
supports both sync and async with the same URL.  SQLite is reached through
aiosqlite (``sqlite+aiosqlite://``) for single-host deployments and tests.
"""

from __future__ import annotations

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from gitarchive.catalog.db.tables import Base


def create_engine(database_url: str, **kwargs: object) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    Server databases get pooled connections:

    - **pool_size=5**: baseline connections kept open.
    - **max_overflow=10**: burst capacity above pool_size.
    - **pool_pre_ping=True**: test connections before checkout to handle
      server-side disconnects.
    - **pool_recycle=3600**: recycle connections after 1 hour.

    SQLite picks its own pool class, so only ``echo`` is defaulted there.
    All defaults can be overridden via *kwargs*.
    """
    defaults: dict[str, object] = {"echo": False}
    if make_url(database_url).get_backend_name() != "sqlite":
        defaults.update(
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
    defaults.update(kwargs)
    return create_async_engine(database_url, **defaults)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to *engine*.

    ``expire_on_commit=False`` so that ORM instances remain usable after
    commit without triggering lazy loads (implicit IO is forbidden in async
    code).
    """
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_schema(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet.

    Production schemas are managed by Alembic; this is the shortcut used by
    ``gitarchive db init`` and the test suite.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
