"""Shared test fixtures: a temporary SQLite catalog and pygit2 source repos.

Unit tests run against a fresh SQLite database (aiosqlite) per test and
against throwaway git repositories built with pygit2 under ``tmp_path``.
Remotes are plain local paths, so no network access is needed.

The PostgreSQL integration tests bring their own fixtures (see
``test_db_integration.py``) and are marked ``@pytest.mark.integration``.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from pathlib import Path

import pygit2
import pytest
from pygit2.enums import FileMode, ObjectType
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from gitarchive.catalog.context import CatalogContext, build_sql_context
from gitarchive.catalog.db.engine import create_engine, create_session_factory, init_schema
from gitarchive.catalog.git.mirror import WorkspaceDirectory
from gitarchive.catalog.settings import _get_settings_cached
from gitarchive.catalog.store.sql import SqlSyncLedger, SqlTagStore, SqlWorkspaceStore


def _set_env(key: str, value: str) -> None:
    """Set an env var and invalidate the settings cache."""
    os.environ[key] = value
    _get_settings_cached.cache_clear()


# ---------------------------------------------------------------------------
# Source repositories (the "remotes" that workspaces point at)
# ---------------------------------------------------------------------------


class SourceRepo:
    """A non-bare repository that tests commit into and mirrors clone from."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.repo = pygit2.init_repository(str(path), bare=False)
        self.signature = pygit2.Signature("Test Author", "author@example.com")

    @property
    def url(self) -> str:
        return str(self.path)

    @property
    def head(self) -> str:
        return str(self.repo.head.target)

    def commit(self, files: dict[str, bytes], message: str = "commit") -> str:
        """Write *files* (relative path -> content) and commit them on HEAD."""
        for rel_path, content in files.items():
            target = self.path / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)

        index = self.repo.index
        index.add_all()
        index.write()
        tree = index.write_tree()
        parents = [] if self.repo.head_is_unborn else [self.repo.head.target]
        oid = self.repo.create_commit("HEAD", self.signature, self.signature, message, tree, parents)
        return str(oid)

    def lightweight_tag(self, name: str, commit_id: str | None = None) -> None:
        self.repo.references.create(f"refs/tags/{name}", pygit2.Oid(hex=commit_id or self.head))

    def annotated_tag(self, name: str, commit_id: str | None = None, message: str = "release") -> None:
        self.repo.create_tag(name, pygit2.Oid(hex=commit_id or self.head), ObjectType.COMMIT, self.signature, message)

    def gitlink(self, name: str, commit_id: str, message: str = "add submodule") -> str:
        """Commit a submodule entry at the root pointing to *commit_id* of another repository."""
        parent = self.repo.head.peel(pygit2.Commit)
        builder = self.repo.TreeBuilder(parent.tree)
        builder.insert(name, pygit2.Oid(hex=commit_id), FileMode.COMMIT)
        oid = self.repo.create_commit("HEAD", self.signature, self.signature, message, builder.write(), [parent.id])
        return str(oid)


@pytest.fixture
def source_repo(tmp_path: Path) -> SourceRepo:
    """A source repository with a small nested tree, one binary file and two tags.

    Layout at HEAD::

        README.md
        docs/guide.md
        src/pkg/main.py
        assets/logo.bin
    """
    source = SourceRepo(tmp_path / "source")
    source.commit({"README.md": b"# demo\n"}, "initial")
    source.commit(
        {
            "docs/guide.md": b"guide\n",
            "src/pkg/main.py": b"print('hello')\n",
            "assets/logo.bin": b"\x89PNG\x00\x01\x02\x03\x00\xff",
        },
        "add tree",
    )
    source.lightweight_tag("v1.0")
    source.annotated_tag("v1.1")
    return source


# ---------------------------------------------------------------------------
# Catalog: SQLite database, stores, mirror directory
# ---------------------------------------------------------------------------


@pytest.fixture
async def async_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Async engine on a fresh SQLite file with all tables created."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    await init_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(async_engine)


@pytest.fixture
def workspace_store(session_factory: async_sessionmaker[AsyncSession]) -> SqlWorkspaceStore:
    return SqlWorkspaceStore(session_factory)


@pytest.fixture
def sync_ledger(session_factory: async_sessionmaker[AsyncSession]) -> SqlSyncLedger:
    return SqlSyncLedger(session_factory)


@pytest.fixture
def tag_store(session_factory: async_sessionmaker[AsyncSession]) -> SqlTagStore:
    return SqlTagStore(session_factory)


@pytest.fixture
def directory(tmp_path: Path) -> WorkspaceDirectory:
    return WorkspaceDirectory(tmp_path / "mirrors")


@pytest.fixture
def catalog(session_factory: async_sessionmaker[AsyncSession], directory: WorkspaceDirectory) -> CatalogContext:
    """Catalog context over the test database; the engine is owned by ``async_engine``."""
    return build_sql_context(session_factory, directory)
