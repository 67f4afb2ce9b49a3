"""Integration tests against PostgreSQL.

Verifies the testcontainers + Alembic migration pipeline and the
``ON CONFLICT`` tag upsert on the PostgreSQL dialect.  Requires Docker.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine
from testcontainers.postgres import PostgresContainer

from gitarchive.catalog.context import CatalogContext, build_sql_context
from gitarchive.catalog.db.engine import create_engine, create_session_factory
from gitarchive.catalog.git.mirror import WorkspaceDirectory
from gitarchive.catalog.models.enums import SyncStatus
from gitarchive.catalog.settings import _get_settings_cached

pytestmark = pytest.mark.integration


@pytest.fixture(scope="session")
def pg_container() -> Iterator[PostgresContainer]:
    """Start a PostgreSQL 17 container for the test session."""
    with PostgresContainer(
        image="postgres:17",
        username="test",
        password="test",
        dbname="gitarchive_test",
        driver="psycopg",
    ) as pg:
        yield pg


@pytest.fixture(scope="session")
def pg_url(pg_container: PostgresContainer) -> str:
    """PostgreSQL URL (psycopg3 dialect) with Alembic migrations applied."""
    url = pg_container.get_connection_url()
    os.environ["GITARCHIVE_DATABASE_URL"] = url
    _get_settings_cached.cache_clear()

    # Apply all migrations using the packaged alembic.ini (same config as CLI).
    from alembic import command
    from alembic.config import Config

    ini_path = Path(__file__).parent.parent / "gitarchive" / "catalog" / "alembic.ini"
    command.upgrade(Config(str(ini_path)), "head")

    return url


@pytest.fixture
async def pg_engine(pg_url: str) -> AsyncIterator[AsyncEngine]:
    engine = create_engine(pg_url)
    yield engine
    async with engine.begin() as conn:
        await conn.execute(text("TRUNCATE workspace_tags, workspace_syncs, workspaces RESTART IDENTITY CASCADE"))
    await engine.dispose()


@pytest.fixture
def pg_catalog(pg_engine: AsyncEngine, tmp_path: Path) -> CatalogContext:
    return build_sql_context(create_session_factory(pg_engine), WorkspaceDirectory(tmp_path / "mirrors"))


async def test_alembic_migrations_applied(pg_engine: AsyncEngine) -> None:
    """All tables from the initial migration should exist."""
    async with pg_engine.connect() as conn:
        result = await conn.execute(
            text("SELECT table_name FROM information_schema.tables WHERE table_schema = 'public' ORDER BY table_name")
        )
        tables = sorted(row[0] for row in result)
    assert "workspaces" in tables
    assert "workspace_syncs" in tables
    assert "workspace_tags" in tables


async def test_tag_upsert_on_postgres(pg_catalog: CatalogContext) -> None:
    ws_id = await pg_catalog.workspaces.add("https://example.com/a.git", "pg", "")

    first = await pg_catalog.tags.upsert(ws_id, "refs/tags/v1", "a" * 40)
    again = await pg_catalog.tags.upsert(ws_id, "refs/tags/v1", "a" * 40)

    assert first == again
    assert len(await pg_catalog.tags.list(ws_id)) == 1


async def test_sync_end_to_end_on_postgres(pg_catalog: CatalogContext, source_repo) -> None:
    ws_id = await pg_catalog.workspaces.add(source_repo.url, "pg", "")
    workspace = await pg_catalog.workspaces.get(ws_id)

    await pg_catalog.synchronizer.synchronize(workspace)

    [attempt] = await pg_catalog.ledger.list(ws_id)
    assert attempt.status == SyncStatus.COMPLETED
    assert len(await pg_catalog.tags.list(ws_id)) == 2
