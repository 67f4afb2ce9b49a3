"""Workspace, sync attempt and tag records.

A workspace is a registered remote repository; its mirror lives at
``{git_root}/{id}``.  These are the read-only value objects the persistence
stores hand to the git engine.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from gitarchive.catalog.models.enums import SyncStatus


class WorkspaceRecord(BaseModel):
    """Workspace row."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    url: str
    description: str | None = None
    long_description: str | None = None
    created_at: datetime | None = None

    def __str__(self) -> str:
        return f"{self.id} - {self.url} - {self.description or '<empty>'}"


class SyncAttemptRecord(BaseModel):
    """One execution of ``synchronize`` and its outcome."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    workspace_id: int
    start: datetime
    end: datetime | None = None
    status: SyncStatus
    message: str | None = None

    def __str__(self) -> str:
        end = self.end.isoformat() if self.end is not None else "<nil>"
        line = f"{self.start.isoformat()} - {end} - {self.status}"
        if self.message:
            line += f" - {self.message}"
        return line


class TagRecord(BaseModel):
    """Tag name -> commit mapping for a workspace."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    workspace_id: int
    name: str
    commit_id: str

    def __str__(self) -> str:
        return f"{self.commit_id} - {self.name}"
