"""SQLAlchemy implementations of the persistence capabilities.

Each store wraps an ``async_sessionmaker`` and opens a fresh session per
call, so concurrent calls (the tag indexer fans out upserts) never share an
``AsyncSession``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite

from gitarchive.catalog.db.tables import Workspace as WorkspaceRow
from gitarchive.catalog.db.tables import WorkspaceSync as WorkspaceSyncRow
from gitarchive.catalog.db.tables import WorkspaceTag as WorkspaceTagRow
from gitarchive.catalog.models.enums import SyncStatus
from gitarchive.catalog.models.workspace import SyncAttemptRecord, TagRecord, WorkspaceRecord
from gitarchive.catalog.store.base import WorkspaceNotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


def _now() -> datetime:
    return datetime.now(UTC)


class SqlWorkspaceStore:
    """``WorkspaceStore`` backed by the ``workspaces`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add(self, url: str, description: str, long_description: str) -> int:
        row = WorkspaceRow(
            url=url,
            description=description,
            long_description=long_description,
            created_at=_now(),
        )
        async with self._session_factory() as db:
            db.add(row)
            await db.commit()
            return row.id

    async def update(self, workspace_id: int, description: str, long_description: str) -> bool:
        async with self._session_factory() as db:
            result = await db.execute(
                update(WorkspaceRow)
                .where(WorkspaceRow.id == workspace_id)
                .values(description=description, long_description=long_description)
            )
            await db.commit()
            return result.rowcount > 0

    async def list(self) -> list[WorkspaceRecord]:
        async with self._session_factory() as db:
            result = await db.execute(select(WorkspaceRow).order_by(WorkspaceRow.id))
            return [WorkspaceRecord.model_validate(row) for row in result.scalars()]

    async def get(self, workspace_id: int) -> WorkspaceRecord:
        async with self._session_factory() as db:
            row = await db.get(WorkspaceRow, workspace_id)
        if row is None:
            raise WorkspaceNotFoundError(workspace_id)
        return WorkspaceRecord.model_validate(row)


class SqlSyncLedger:
    """``SyncLedger`` backed by the ``workspace_syncs`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def begin(self, workspace_id: int) -> int:
        row = WorkspaceSyncRow(workspace_id=workspace_id, start=_now(), status=SyncStatus.RUNNING)
        async with self._session_factory() as db:
            db.add(row)
            await db.commit()
            return row.id

    async def complete(self, attempt_id: int, status: SyncStatus) -> bool:
        return await self._close(attempt_id, status, None)

    async def fail(self, attempt_id: int, message: str) -> None:
        await self._close(attempt_id, SyncStatus.ERROR, message)

    async def list(self, workspace_id: int) -> list[SyncAttemptRecord]:
        stmt = select(WorkspaceSyncRow).where(WorkspaceSyncRow.workspace_id == workspace_id).order_by(WorkspaceSyncRow.id)
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            rows = list(result.scalars())
        return [
            SyncAttemptRecord(
                id=row.id,
                workspace_id=row.workspace_id,
                start=row.start,
                end=row.end,
                status=SyncStatus(row.status),
                message=row.message,
            )
            for row in rows
        ]

    async def _close(self, attempt_id: int, status: SyncStatus, message: str | None) -> bool:
        async with self._session_factory() as db:
            result = await db.execute(
                update(WorkspaceSyncRow)
                .where(WorkspaceSyncRow.id == attempt_id)
                .values(end=_now(), status=status, message=message)
            )
            await db.commit()
            return result.rowcount > 0


class SqlTagStore:
    """``TagStore`` backed by the ``workspace_tags`` table.

    Upserts use ``INSERT .. ON CONFLICT DO NOTHING`` on the
    ``(workspace_id, name, commit_id)`` unique constraint.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def upsert(self, workspace_id: int, name: str, commit_id: str) -> int:
        async with self._session_factory() as db:
            insert = _dialect_insert(db.get_bind().dialect.name)
            stmt = (
                insert(WorkspaceTagRow)
                .values(workspace_id=workspace_id, name=name, commit_id=commit_id)
                .on_conflict_do_nothing(index_elements=["workspace_id", "name", "commit_id"])
                .returning(WorkspaceTagRow.id)
            )
            tag_id = (await db.execute(stmt)).scalar_one_or_none()
            if tag_id is None:
                # Duplicate triple: nothing inserted, report the existing row.
                tag_id = (
                    await db.execute(
                        select(WorkspaceTagRow.id).where(
                            WorkspaceTagRow.workspace_id == workspace_id,
                            WorkspaceTagRow.name == name,
                            WorkspaceTagRow.commit_id == commit_id,
                        )
                    )
                ).scalar_one()
            await db.commit()
        return tag_id

    async def list(self, workspace_id: int) -> list[TagRecord]:
        stmt = select(WorkspaceTagRow).where(WorkspaceTagRow.workspace_id == workspace_id).order_by(WorkspaceTagRow.id)
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            return [TagRecord.model_validate(row) for row in result.scalars()]


def _dialect_insert(dialect_name: str):  # noqa: ANN202
    """Return the dialect-specific ``insert`` supporting ``on_conflict_do_nothing``."""
    if dialect_name == "postgresql":
        return postgresql.insert
    if dialect_name == "sqlite":
        return sqlite.insert
    msg = f"Tag upsert is not supported on dialect '{dialect_name}'"
    raise NotImplementedError(msg)
