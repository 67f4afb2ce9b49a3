"""Data models for the catalog."""

from gitarchive.catalog.models.api import (
    SyncResponse,
    WorkspaceCreate,
    WorkspaceUpdate,
)
from gitarchive.catalog.models.enums import ObjectKind, SyncStatus
from gitarchive.catalog.models.objects import (
    CommitInfo,
    FileInfo,
    ObjectInfo,
    ObjectSummary,
    PathInfo,
    TreeEntryInfo,
    TreeInfo,
)
from gitarchive.catalog.models.workspace import SyncAttemptRecord, TagRecord, WorkspaceRecord

__all__ = [
    "CommitInfo",
    "FileInfo",
    "ObjectInfo",
    "ObjectKind",
    "ObjectSummary",
    "PathInfo",
    "SyncAttemptRecord",
    "SyncResponse",
    "SyncStatus",
    "TagRecord",
    "TreeEntryInfo",
    "TreeInfo",
    "WorkspaceCreate",
    "WorkspaceRecord",
    "WorkspaceUpdate",
]
