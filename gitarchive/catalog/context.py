"""Catalog wiring.

``CatalogContext`` holds one instance of every collaborator: the three
persistence stores, the workspace directory and the git engine services
built on top of them.  Both host layers (CLI and HTTP app) build it once
from ``ArchiveSettings`` and pass its members explicitly; nothing in the
engine reaches for global state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from gitarchive.catalog.db.engine import create_engine, create_session_factory
from gitarchive.catalog.git.mirror import WorkspaceDirectory
from gitarchive.catalog.git.resolver import ObjectResolver
from gitarchive.catalog.git.sync import Synchronizer
from gitarchive.catalog.git.tags import TagIndexer
from gitarchive.catalog.store.sql import SqlSyncLedger, SqlTagStore, SqlWorkspaceStore

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

    from gitarchive.catalog.settings import ArchiveSettings
    from gitarchive.catalog.store.base import SyncLedger, TagStore, WorkspaceStore


@dataclass
class CatalogContext:
    """Everything a host layer needs to serve catalog operations."""

    # -- Persistence -----------------------------------------------------------
    workspaces: WorkspaceStore
    ledger: SyncLedger
    tags: TagStore

    # -- Git engine ------------------------------------------------------------
    directory: WorkspaceDirectory
    synchronizer: Synchronizer
    indexer: TagIndexer
    resolver: ObjectResolver

    engine: AsyncEngine | None = None
    """Owned engine, disposed by ``aclose`` (``None`` when injected externally)."""

    async def aclose(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None


def build_context(
    *,
    workspaces: WorkspaceStore,
    ledger: SyncLedger,
    tags: TagStore,
    directory: WorkspaceDirectory,
    engine: AsyncEngine | None = None,
) -> CatalogContext:
    """Assemble the git engine around the given stores."""
    indexer = TagIndexer(directory, tags)
    return CatalogContext(
        workspaces=workspaces,
        ledger=ledger,
        tags=tags,
        directory=directory,
        synchronizer=Synchronizer(directory, ledger, indexer),
        indexer=indexer,
        resolver=ObjectResolver(directory),
        engine=engine,
    )


def build_sql_context(
    session_factory: async_sessionmaker[AsyncSession],
    directory: WorkspaceDirectory,
    engine: AsyncEngine | None = None,
) -> CatalogContext:
    return build_context(
        workspaces=SqlWorkspaceStore(session_factory),
        ledger=SqlSyncLedger(session_factory),
        tags=SqlTagStore(session_factory),
        directory=directory,
        engine=engine,
    )


def context_from_settings(settings: ArchiveSettings) -> CatalogContext:
    """Create the engine and SQL stores described by *settings*."""
    engine = create_engine(settings.require_database_url())
    directory = WorkspaceDirectory(settings.git_root)
    logger.info("Mirror root: {}", directory.root)
    return build_sql_context(create_session_factory(engine), directory, engine=engine)
