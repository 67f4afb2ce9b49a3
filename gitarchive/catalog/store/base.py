"""Persistence capabilities consumed by the git engine.

The engine never touches a database connection directly.  It is handed three
narrow stores, each an async protocol that any backend can implement:

- ``WorkspaceStore``: registered repositories
- ``SyncLedger``: one row per synchronization attempt
- ``TagStore``: derived tag -> commit index

All three are append/upsert-only from the engine's point of view.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from gitarchive.catalog.models.enums import SyncStatus
from gitarchive.catalog.models.workspace import SyncAttemptRecord, TagRecord, WorkspaceRecord


class WorkspaceNotFoundError(LookupError):
    """Raised when a workspace id is not registered."""

    def __init__(self, workspace_id: int) -> None:
        super().__init__(f"Workspace {workspace_id} not found")
        self.workspace_id = workspace_id


@runtime_checkable
class WorkspaceStore(Protocol):
    async def add(self, url: str, description: str, long_description: str) -> int:
        """Register a workspace and return its id."""
        ...

    async def update(self, workspace_id: int, description: str, long_description: str) -> bool:
        """Replace the description fields.  Returns ``False`` for an unknown id."""
        ...

    async def list(self) -> list[WorkspaceRecord]:
        """All workspaces ordered by id."""
        ...

    async def get(self, workspace_id: int) -> WorkspaceRecord:
        """Fetch by id.  Raises ``WorkspaceNotFoundError`` if missing."""
        ...


@runtime_checkable
class SyncLedger(Protocol):
    async def begin(self, workspace_id: int) -> int:
        """Open a ``RUNNING`` attempt and return its id."""
        ...

    async def complete(self, attempt_id: int, status: SyncStatus) -> bool:
        """Close an attempt with *status*.  Returns ``False`` for an unknown id."""
        ...

    async def fail(self, attempt_id: int, message: str) -> None:
        """Close an attempt as ``ERROR``, recording *message*.

        The caller is responsible for raising the failure afterwards.
        """
        ...

    async def list(self, workspace_id: int) -> list[SyncAttemptRecord]:
        """All attempts of a workspace, oldest first."""
        ...


@runtime_checkable
class TagStore(Protocol):
    async def upsert(self, workspace_id: int, name: str, commit_id: str) -> int:
        """Insert a tag row, or return the existing row's id for a duplicate triple."""
        ...

    async def list(self, workspace_id: int) -> list[TagRecord]:
        """All tags of a workspace ordered by id."""
        ...
