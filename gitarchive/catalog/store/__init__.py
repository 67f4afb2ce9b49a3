"""Persistence capabilities and their SQL implementations."""

from gitarchive.catalog.store.base import SyncLedger, TagStore, WorkspaceNotFoundError, WorkspaceStore
from gitarchive.catalog.store.sql import SqlSyncLedger, SqlTagStore, SqlWorkspaceStore

__all__ = [
    "SqlSyncLedger",
    "SqlTagStore",
    "SqlWorkspaceStore",
    "SyncLedger",
    "TagStore",
    "WorkspaceNotFoundError",
    "WorkspaceStore",
]
