"""Tag indexer -- copies a mirror's tags into the tag store.

Tags are enumerated on a worker thread, then every upsert is issued
concurrently and joined.  A failed upsert is logged and does not affect its
siblings: the tag index is derived data that the next sync rebuilds.
"""

from __future__ import annotations

import asyncio
from functools import partial
from typing import TYPE_CHECKING

import pygit2
from anyio import to_thread
from loguru import logger

if TYPE_CHECKING:
    from gitarchive.catalog.git.mirror import WorkspaceDirectory
    from gitarchive.catalog.models.workspace import WorkspaceRecord
    from gitarchive.catalog.store.base import TagStore

TAG_PREFIX = "refs/tags/"


class TagIndexer:
    def __init__(self, directory: WorkspaceDirectory, store: TagStore) -> None:
        self._directory = directory
        self._store = store

    async def index_tags(self, workspace: WorkspaceRecord) -> None:
        """Upsert every tag of the workspace mirror.

        Raises ``MirrorNotFoundError`` / ``InvalidMirrorError`` if the mirror
        cannot be opened; per-tag failures are only logged.
        """
        tags = await to_thread.run_sync(partial(self._collect, workspace.id))
        logger.debug("Workspace {}: indexing {} tags", workspace.id, len(tags))
        await asyncio.gather(*(self._index_one(workspace.id, name, commit_id) for name, commit_id in tags))

    def _collect(self, workspace_id: int) -> list[tuple[str, str]]:
        with self._directory.open(workspace_id) as mirror:
            return list_tags(mirror.repo)

    async def _index_one(self, workspace_id: int, name: str, commit_id: str) -> None:
        try:
            await self._store.upsert(workspace_id, name, commit_id)
        except Exception as exc:
            logger.warning("tagging error: workspace {} tag {}: {!r}", workspace_id, name, exc)
        else:
            logger.info("indexed tag: {}", name)


def list_tags(repo: pygit2.Repository) -> list[tuple[str, str]]:
    """Return ``(reference name, commit hex)`` for every tag in *repo*.

    Annotated tags are peeled to the commit they designate.  Tags that do not
    lead to a commit (tagged trees or blobs) are skipped.
    """
    tags: list[tuple[str, str]] = []
    for ref_name in repo.references:
        if not ref_name.startswith(TAG_PREFIX):
            continue
        try:
            commit = repo.references[ref_name].peel(pygit2.Commit)
        except (pygit2.GitError, ValueError, KeyError) as exc:
            logger.warning("Skipping tag {}: not a commit ({})", ref_name, exc)
            continue
        tags.append((ref_name, str(commit.id)))
    return tags
