"""Tests for clone-or-fetch synchronization and its ledger rows."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pygit2
import pytest

from gitarchive.catalog.context import CatalogContext, build_context
from gitarchive.catalog.git.errors import InvalidMirrorError, TransportError
from gitarchive.catalog.git.mirror import open_bare
from gitarchive.catalog.models.enums import SyncStatus
from gitarchive.catalog.models.workspace import WorkspaceRecord
from gitarchive.catalog.store.sql import SqlSyncLedger


async def _register(catalog: CatalogContext, url: str) -> WorkspaceRecord:
    ws_id = await catalog.workspaces.add(url, "test workspace", "")
    return await catalog.workspaces.get(ws_id)


async def test_first_sync_clones_bare_mirror(catalog: CatalogContext, source_repo) -> None:
    workspace = await _register(catalog, source_repo.url)

    attempt_id = await catalog.synchronizer.synchronize(workspace)

    mirror_path = catalog.directory.path_for(workspace.id)
    repo = open_bare(mirror_path)
    assert repo is not None
    try:
        assert repo.is_bare
        assert str(repo.revparse_single("HEAD").id) == source_repo.head
        assert "refs/tags/v1.0" in list(repo.references)
    finally:
        repo.free()

    [attempt] = await catalog.ledger.list(workspace.id)
    assert attempt.id == attempt_id
    assert attempt.status == SyncStatus.COMPLETED
    assert attempt.end is not None


async def test_second_sync_fetches_into_same_mirror(catalog: CatalogContext, source_repo) -> None:
    workspace = await _register(catalog, source_repo.url)

    await catalog.synchronizer.synchronize(workspace)
    await catalog.synchronizer.synchronize(workspace)

    attempts = await catalog.ledger.list(workspace.id)
    assert [a.status for a in attempts] == [SyncStatus.COMPLETED, SyncStatus.COMPLETED]
    assert [p.name for p in catalog.directory.root.iterdir()] == [str(workspace.id)]


async def test_fetch_picks_up_new_commits_and_tags(catalog: CatalogContext, source_repo) -> None:
    workspace = await _register(catalog, source_repo.url)
    await catalog.synchronizer.synchronize(workspace)

    new_head = source_repo.commit({"CHANGELOG.md": b"v2\n"}, "release 2")
    source_repo.lightweight_tag("v2.0")
    await catalog.synchronizer.synchronize(workspace)

    info = catalog.resolver.pathinfo(workspace)
    assert info.commit_id == new_head
    tag_names = {t.name for t in await catalog.tags.list(workspace.id)}
    assert "refs/tags/v2.0" in tag_names


async def test_sync_indexes_tags(catalog: CatalogContext, source_repo) -> None:
    workspace = await _register(catalog, source_repo.url)

    await catalog.synchronizer.synchronize(workspace)

    tags = {t.name: t.commit_id for t in await catalog.tags.list(workspace.id)}
    assert tags == {"refs/tags/v1.0": source_repo.head, "refs/tags/v1.1": source_repo.head}


async def test_sync_into_empty_directory_clones(catalog: CatalogContext, source_repo) -> None:
    workspace = await _register(catalog, source_repo.url)
    catalog.directory.path_for(workspace.id).mkdir(parents=True)

    await catalog.synchronizer.synchronize(workspace)

    [attempt] = await catalog.ledger.list(workspace.id)
    assert attempt.status == SyncStatus.COMPLETED


async def test_sync_refuses_foreign_data(catalog: CatalogContext, source_repo) -> None:
    workspace = await _register(catalog, source_repo.url)
    mirror_path = catalog.directory.path_for(workspace.id)
    mirror_path.parent.mkdir(parents=True)
    mirror_path.write_text("not a repository")

    with pytest.raises(InvalidMirrorError):
        await catalog.synchronizer.synchronize(workspace)

    assert mirror_path.read_text() == "not a repository"
    [attempt] = await catalog.ledger.list(workspace.id)
    assert attempt.status == SyncStatus.ERROR
    assert "Invalid data at local" in attempt.message


async def test_sync_refuses_non_bare_repository(catalog: CatalogContext, source_repo) -> None:
    workspace = await _register(catalog, source_repo.url)
    pygit2.init_repository(str(catalog.directory.path_for(workspace.id)), bare=False)

    with pytest.raises(InvalidMirrorError, match="working tree"):
        await catalog.synchronizer.synchronize(workspace)

    [attempt] = await catalog.ledger.list(workspace.id)
    assert attempt.status == SyncStatus.ERROR


async def test_sync_unreachable_remote(catalog: CatalogContext, tmp_path: Path) -> None:
    workspace = await _register(catalog, str(tmp_path / "does-not-exist"))

    with pytest.raises(TransportError, match="Failed to clone"):
        await catalog.synchronizer.synchronize(workspace)

    [attempt] = await catalog.ledger.list(workspace.id)
    assert attempt.status == SyncStatus.ERROR
    assert attempt.end is not None
    assert attempt.message.startswith("Failed to clone")


async def test_failed_then_successful_sync(catalog: CatalogContext, source_repo, tmp_path: Path) -> None:
    workspace = await _register(catalog, source_repo.url)
    broken = WorkspaceRecord(id=workspace.id, url=str(tmp_path / "missing"))

    with pytest.raises(TransportError):
        await catalog.synchronizer.synchronize(broken)
    await catalog.synchronizer.synchronize(workspace)

    statuses = [a.status for a in await catalog.ledger.list(workspace.id)]
    assert statuses == [SyncStatus.ERROR, SyncStatus.COMPLETED]


async def test_concurrent_syncs_are_serialized(catalog: CatalogContext, source_repo) -> None:
    workspace = await _register(catalog, source_repo.url)

    attempt_ids = await asyncio.gather(*(catalog.synchronizer.synchronize(workspace) for _ in range(3)))

    assert len(set(attempt_ids)) == 3
    attempts = await catalog.ledger.list(workspace.id)
    assert sorted(a.id for a in attempts) == sorted(attempt_ids)
    assert all(a.status == SyncStatus.COMPLETED for a in attempts)
    assert [p.name for p in catalog.directory.root.iterdir()] == [str(workspace.id)]


class BrokenFailLedger(SqlSyncLedger):
    """Ledger whose ``fail`` cannot be written."""

    async def fail(self, attempt_id: int, message: str) -> None:
        msg = "database is locked"
        raise RuntimeError(msg)


async def test_ledger_failure_keeps_git_error(catalog: CatalogContext, session_factory, tmp_path: Path) -> None:
    workspace = await _register(catalog, str(tmp_path / "does-not-exist"))
    broken = build_context(
        workspaces=catalog.workspaces,
        ledger=BrokenFailLedger(session_factory),
        tags=catalog.tags,
        directory=catalog.directory,
    )

    with pytest.raises(TransportError, match="Failed to clone"):
        await broken.synchronizer.synchronize(workspace)

    [attempt] = await catalog.ledger.list(workspace.id)
    assert attempt.status == SyncStatus.RUNNING
