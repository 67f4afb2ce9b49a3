"""Structured descriptions of resolved git objects.

``ObjectInfo`` is a closed union discriminated by ``kind``:

- ``FileInfo`` for blobs
- ``TreeInfo`` for trees, listing immediate children in native tree order
- ``CommitInfo`` for commits

Annotated tags have no variant; projections return ``None`` for them.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from gitarchive.catalog.models.enums import ObjectKind


class FileInfo(BaseModel):
    kind: Literal["file"] = "file"
    size: int
    binary: bool
    """Content heuristic (NUL bytes / non-text), not a stored attribute."""


class TreeEntryInfo(BaseModel):
    filemode: str = Field(description="Permission/type bits as an octal string, e.g. '100644'.")
    kind: ObjectKind
    id: str
    name: str


class TreeInfo(BaseModel):
    kind: Literal["tree"] = "tree"
    filecount: int
    entries: list[TreeEntryInfo] = Field(default_factory=list)


class CommitInfo(BaseModel):
    kind: Literal["commit"] = "commit"
    commit_id: str
    author: str
    committer: str


ObjectInfo = Annotated[FileInfo | TreeInfo | CommitInfo, Field(discriminator="kind")]


class ObjectSummary(BaseModel):
    """Result of a direct lookup by revision specification."""

    kind: ObjectKind
    id: str
    info: ObjectInfo | None = None


class PathInfo(BaseModel):
    """A resolved object together with where it was found."""

    commit_id: str
    path: str
    object_id: str
    kind: ObjectKind
    info: ObjectInfo | None = None
