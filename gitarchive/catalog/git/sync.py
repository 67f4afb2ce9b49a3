"""Sync orchestrator -- clone-or-fetch a workspace mirror.

One call to ``Synchronizer.synchronize`` is one sync attempt:

1. Open a ``RUNNING`` attempt in the ledger (before any network I/O).
2. Probe ``{git_root}/{id}``:
   - bare mirror present -> fetch ``origin`` with its configured refspecs;
   - nothing there -> clone the workspace URL as a new bare mirror;
   - anything else -> ``InvalidMirrorError``, never cloned over.
3. On failure, close the attempt as ``ERROR`` and re-raise.
4. On success, close the attempt as ``COMPLETED`` and index tags.

Mirrors are cloned with a ``+refs/*:refs/*`` fetch refspec so that a plain
fetch keeps every branch and tag (and therefore ``HEAD``) current.

Clone and fetch are blocking libgit2 calls and run on a worker thread via
``anyio.to_thread``.  Calls for the same workspace are serialized by an
in-process lock; separate processes sharing a mirror root are not
coordinated.
"""

from __future__ import annotations

import asyncio
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

import pygit2
from anyio import to_thread
from loguru import logger

from gitarchive.catalog.git.errors import InvalidMirrorError, TransportError
from gitarchive.catalog.git.mirror import open_bare
from gitarchive.catalog.models.enums import SyncStatus

if TYPE_CHECKING:
    from gitarchive.catalog.git.mirror import WorkspaceDirectory
    from gitarchive.catalog.git.tags import TagIndexer
    from gitarchive.catalog.models.workspace import WorkspaceRecord
    from gitarchive.catalog.store.base import SyncLedger

MIRROR_REFSPEC = "+refs/*:refs/*"
REMOTE_NAME = "origin"


class Synchronizer:
    """Keeps workspace mirrors current and records every attempt.

    Stateless beyond its collaborators and the per-workspace locks.
    """

    def __init__(self, directory: WorkspaceDirectory, ledger: SyncLedger, indexer: TagIndexer) -> None:
        self._directory = directory
        self._ledger = ledger
        self._indexer = indexer
        # One lock per workspace id ever synced; bounded by the registered workspaces.
        self._locks: dict[int, asyncio.Lock] = {}

    def _lock_for(self, workspace_id: int) -> asyncio.Lock:
        return self._locks.setdefault(workspace_id, asyncio.Lock())

    async def synchronize(self, workspace: WorkspaceRecord) -> int:
        """Clone or fetch the workspace mirror.  Returns the attempt id.

        Raises ``TransportError`` or ``InvalidMirrorError`` after recording the
        attempt as ``ERROR``.
        """
        async with self._lock_for(workspace.id):
            repo_dir = self._directory.path_for(workspace.id)
            logger.info("Syncing local {} with remote <{}>...", repo_dir, workspace.url)

            attempt_id = await self._ledger.begin(workspace.id)
            try:
                await to_thread.run_sync(partial(_clone_or_fetch, workspace.url, repo_dir))
            except Exception as exc:
                logger.warning("Sync attempt {} for workspace {} failed: {}", attempt_id, workspace.id, exc)
                try:
                    await self._ledger.fail(attempt_id, str(exc))
                except Exception:
                    logger.exception("Could not record failure of sync attempt {}", attempt_id)
                raise

            await self._ledger.complete(attempt_id, SyncStatus.COMPLETED)
            logger.info("Sync attempt {} for workspace {} completed", attempt_id, workspace.id)

            try:
                await self._indexer.index_tags(workspace)
            except Exception:
                # Tag rows are a rebuildable cache; the sync itself succeeded.
                logger.exception("Tag indexing after sync of workspace {} failed", workspace.id)

            return attempt_id


# -- Sync helpers (run in thread pool) -----------------------------------------


def _clone_or_fetch(url: str, repo_dir: Path) -> None:
    repo = open_bare(repo_dir)
    if repo is None:
        _clone(url, repo_dir)
        return
    try:
        _fetch(repo, repo_dir)
    finally:
        repo.free()


def _fetch(repo: pygit2.Repository, repo_dir: Path) -> None:
    logger.info("Found existing repo at {}, synchronizing...", repo_dir)
    try:
        remote = repo.remotes[REMOTE_NAME]
    except KeyError:
        raise InvalidMirrorError(repo_dir, f"no '{REMOTE_NAME}' remote configured") from None
    try:
        remote.fetch()
    except pygit2.GitError as exc:
        msg = f"Failed to synchronize: {exc}"
        raise TransportError(msg) from exc
    logger.info("Repository synchronized")


def _clone(url: str, repo_dir: Path) -> None:
    logger.info("Cloning new repository at {}...", repo_dir)
    repo_dir.parent.mkdir(parents=True, exist_ok=True)
    try:
        repo = pygit2.clone_repository(url, str(repo_dir), bare=True, remote=_create_mirror_remote)
    except (pygit2.GitError, KeyError, ValueError) as exc:
        msg = f"Failed to clone: {exc}"
        raise TransportError(msg) from exc
    repo.free()
    logger.info("Repository cloned")


def _create_mirror_remote(repo: pygit2.Repository, name: str | bytes, url: str | bytes) -> pygit2.Remote:
    """Clone callback: create ``origin`` with a mirroring fetch refspec."""
    return repo.remotes.create(name, url, MIRROR_REFSPEC)
