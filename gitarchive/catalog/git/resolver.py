"""Object resolver -- commit-ish + path -> git object -> description.

Resolution order:

1. Parse the commit reference with git revision syntax (default ``HEAD``).
2. Require a commit; tags, trees and blobs are rejected.
3. Take the commit's root tree.
4. Descend the tree along the path (empty path = root tree).

The result is a ``ResolvedObject`` bound to the ``Mirror`` it came from.
One resolution can be projected several ways (``to_info`` for a structured
summary, ``read_raw`` for blob bytes) without walking the tree again.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import pygit2
from pygit2.enums import ObjectType

from gitarchive.catalog.git.errors import (
    NotABlobError,
    NotACommitError,
    PathNotFoundError,
    RefNotFoundError,
)
from gitarchive.catalog.models.enums import ObjectKind
from gitarchive.catalog.models.objects import (
    CommitInfo,
    FileInfo,
    ObjectInfo,
    ObjectSummary,
    PathInfo,
    TreeEntryInfo,
    TreeInfo,
)

if TYPE_CHECKING:
    from gitarchive.catalog.git.mirror import Mirror, WorkspaceDirectory
    from gitarchive.catalog.models.workspace import WorkspaceRecord

DEFAULT_REF = "HEAD"


@dataclass(frozen=True)
class ResolvedObject:
    """An object reached from a commit, valid while its mirror is open."""

    mirror: Mirror
    commit: pygit2.Commit
    path: str
    target: pygit2.Object

    @property
    def commit_id(self) -> str:
        return str(self.commit.id)

    @property
    def object_id(self) -> str:
        return str(self.target.id)

    @property
    def kind(self) -> ObjectKind:
        return ObjectKind(self.target.type_str)

    def to_info(self) -> ObjectInfo | None:
        """Describe the target; ``None`` for tags and for submodule commits.

        A submodule entry (gitlink) names a commit of another repository, so
        its id resolves but the object is absent from this mirror.
        """
        if self.target.id not in self.mirror.repo:
            return None
        return describe(self.target)

    def read_raw(self) -> bytes:
        """Return the blob's stored bytes.  Raises ``NotABlobError`` otherwise."""
        self.mirror.ensure_open()
        if self.target.type != ObjectType.BLOB:
            raise NotABlobError(self.path, self.target.type_str)
        return self.target.data


# ---------------------------------------------------------------------------
# Resolution against an open mirror
# ---------------------------------------------------------------------------


def resolve(mirror: Mirror, commit_ref: str | None = None, path: str | None = None) -> ResolvedObject:
    """Resolve *commit_ref* and *path* inside *mirror*.

    Raises ``RefNotFoundError``, ``NotACommitError`` or ``PathNotFoundError``.
    """
    spec = commit_ref or DEFAULT_REF
    obj = _revparse(mirror.repo, spec)
    if obj.type != ObjectType.COMMIT:
        raise NotACommitError(spec)
    commit: pygit2.Commit = obj
    tree = commit.tree

    rel_path = normalize_path(path)
    if not rel_path:
        return ResolvedObject(mirror=mirror, commit=commit, path="", target=tree)
    try:
        target = tree[rel_path]
    except KeyError:
        raise PathNotFoundError(rel_path, str(commit.id)) from None
    return ResolvedObject(mirror=mirror, commit=commit, path=rel_path, target=target)


def lookup_object(mirror: Mirror, spec: str) -> ObjectSummary:
    """Look up any object by revision specification, without path walking."""
    obj = _revparse(mirror.repo, spec)
    return ObjectSummary(kind=ObjectKind(obj.type_str), id=str(obj.id), info=describe(obj))


def normalize_path(path: str | None) -> str:
    """Strip surrounding slashes; ``None``, ``""`` and ``"/"`` all mean the root."""
    if not path:
        return ""
    return "/".join(part for part in path.split("/") if part and part != ".")


def _revparse(repo: pygit2.Repository, spec: str) -> pygit2.Object:
    try:
        return repo.revparse_single(spec)
    except (KeyError, ValueError, pygit2.GitError) as exc:
        raise RefNotFoundError(spec) from exc


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


def describe(obj: pygit2.Object) -> ObjectInfo | None:
    """Project a git object onto its ``ObjectInfo`` variant.

    Tags (and anything unrecognised) have no variant and yield ``None``.
    """
    match obj.type:
        case ObjectType.BLOB:
            return FileInfo(size=obj.size, binary=obj.is_binary)
        case ObjectType.TREE:
            entries = [
                TreeEntryInfo(
                    filemode=format(entry.filemode, "06o"),
                    kind=ObjectKind(entry.type_str),
                    id=str(entry.id),
                    name=entry.name,
                )
                for entry in obj
            ]
            return TreeInfo(filecount=len(entries), entries=entries)
        case ObjectType.COMMIT:
            return CommitInfo(
                commit_id=str(obj.id),
                author=_format_signature(obj.author),
                committer=_format_signature(obj.committer),
            )
        case _:
            return None


def _format_signature(sig: pygit2.Signature) -> str:
    return f"{sig.name} <{sig.email}>"


# ---------------------------------------------------------------------------
# Workspace-level facade
# ---------------------------------------------------------------------------


class ObjectResolver:
    """Resolves objects in workspace mirrors.

    All methods are synchronous local reads; async callers should run them
    on a worker thread.
    """

    def __init__(self, directory: WorkspaceDirectory) -> None:
        self._directory = directory

    @contextmanager
    def open(self, workspace: WorkspaceRecord) -> Iterator[Mirror]:
        """Open the workspace mirror for the duration of the block."""
        with self._directory.open(workspace.id) as mirror:
            yield mirror

    def pathinfo(
        self,
        workspace: WorkspaceRecord,
        commit_ref: str | None = None,
        path: str | None = None,
    ) -> PathInfo:
        """Resolve and project in one step."""
        with self.open(workspace) as mirror:
            resolved = resolve(mirror, commit_ref, path)
            return PathInfo(
                commit_id=resolved.commit_id,
                path=resolved.path,
                object_id=resolved.object_id,
                kind=resolved.kind,
                info=resolved.to_info(),
            )

    def read_raw(self, workspace: WorkspaceRecord, commit_ref: str | None = None, path: str | None = None) -> bytes:
        with self.open(workspace) as mirror:
            return resolve(mirror, commit_ref, path).read_raw()

    def lookup(self, workspace: WorkspaceRecord, spec: str) -> ObjectSummary:
        with self.open(workspace) as mirror:
            return lookup_object(mirror, spec)

