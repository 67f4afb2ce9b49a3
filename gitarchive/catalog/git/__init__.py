"""Git engine: mirror synchronization, tag indexing and object resolution."""

from gitarchive.catalog.git.errors import (
    InvalidMirrorError,
    MirrorError,
    MirrorNotFoundError,
    NotABlobError,
    NotACommitError,
    PathNotFoundError,
    RefNotFoundError,
    ResolveError,
    SyncError,
    TransportError,
)
from gitarchive.catalog.git.mirror import Mirror, MirrorClosedError, WorkspaceDirectory
from gitarchive.catalog.git.resolver import ObjectResolver, ResolvedObject, describe, lookup_object, resolve
from gitarchive.catalog.git.sync import Synchronizer
from gitarchive.catalog.git.tags import TagIndexer, list_tags

__all__ = [
    "InvalidMirrorError",
    "Mirror",
    "MirrorClosedError",
    "MirrorError",
    "MirrorNotFoundError",
    "NotABlobError",
    "NotACommitError",
    "ObjectResolver",
    "PathNotFoundError",
    "RefNotFoundError",
    "ResolveError",
    "ResolvedObject",
    "SyncError",
    "Synchronizer",
    "TagIndexer",
    "TransportError",
    "WorkspaceDirectory",
    "describe",
    "list_tags",
    "lookup_object",
    "resolve",
]
