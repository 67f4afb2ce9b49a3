"""Mirror endpoints (RPC-style): synchronize, tags and object inspection.

Thin HTTP adapter -- delegates to the git engine on the catalog context.
Object reads are blocking libgit2 calls and run on a worker thread.
"""

from __future__ import annotations

from functools import partial

from anyio import to_thread
from fastapi import APIRouter, HTTPException, Query, Response, status

from gitarchive.catalog.deps import Catalog, CurrentWorkspace
from gitarchive.catalog.git.errors import (
    InvalidMirrorError,
    MirrorError,
    NotABlobError,
    NotACommitError,
    TransportError,
)
from gitarchive.catalog.models.api import SyncResponse
from gitarchive.catalog.models.objects import ObjectSummary, PathInfo
from gitarchive.catalog.models.workspace import SyncAttemptRecord, TagRecord

router = APIRouter(prefix="/workspaces", tags=["mirrors"])


def _to_http(exc: MirrorError) -> HTTPException:
    """Translate an engine failure into an HTTP error, keeping its message."""
    if isinstance(exc, TransportError):
        code = status.HTTP_502_BAD_GATEWAY
    elif isinstance(exc, InvalidMirrorError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, NotACommitError | NotABlobError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, LookupError):
        code = status.HTTP_404_NOT_FOUND
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(code, detail=str(exc))


# -- Sync ----------------------------------------------------------------------


@router.post("/{workspace_id}/sync", response_model=SyncResponse)
async def handle_sync(workspace: CurrentWorkspace, catalog: Catalog) -> SyncResponse:
    try:
        attempt_id = await catalog.synchronizer.synchronize(workspace)
    except MirrorError as exc:
        raise _to_http(exc) from None
    return SyncResponse(attempt_id=attempt_id)


@router.get("/{workspace_id}/syncs", response_model=list[SyncAttemptRecord])
async def handle_list_syncs(workspace: CurrentWorkspace, catalog: Catalog) -> list[SyncAttemptRecord]:
    return await catalog.ledger.list(workspace.id)


# -- Tags ----------------------------------------------------------------------


@router.get("/{workspace_id}/tags", response_model=list[TagRecord])
async def handle_list_tags(workspace: CurrentWorkspace, catalog: Catalog) -> list[TagRecord]:
    return await catalog.tags.list(workspace.id)


@router.post("/{workspace_id}/tags/index", response_model=list[TagRecord])
async def handle_index_tags(workspace: CurrentWorkspace, catalog: Catalog) -> list[TagRecord]:
    """Re-index tags from the existing mirror, then return the stored index."""
    try:
        await catalog.indexer.index_tags(workspace)
    except MirrorError as exc:
        raise _to_http(exc) from None
    return await catalog.tags.list(workspace.id)


# -- Objects -------------------------------------------------------------------


@router.get("/{workspace_id}/pathinfo", response_model=PathInfo)
async def handle_pathinfo(
    workspace: CurrentWorkspace,
    catalog: Catalog,
    commit: str | None = Query(None, description="Revision specification; defaults to HEAD."),
    path: str | None = Query(None, description="Path inside the commit tree; empty = root."),
) -> PathInfo:
    try:
        return await to_thread.run_sync(partial(catalog.resolver.pathinfo, workspace, commit, path))
    except MirrorError as exc:
        raise _to_http(exc) from None


@router.get("/{workspace_id}/raw")
async def handle_raw(
    workspace: CurrentWorkspace,
    catalog: Catalog,
    commit: str | None = Query(None, description="Revision specification; defaults to HEAD."),
    path: str = Query(..., description="Path of a file inside the commit tree."),
) -> Response:
    try:
        data = await to_thread.run_sync(partial(catalog.resolver.read_raw, workspace, commit, path))
    except MirrorError as exc:
        raise _to_http(exc) from None
    return Response(content=data, media_type="application/octet-stream")


@router.get("/{workspace_id}/object", response_model=ObjectSummary)
async def handle_object(
    workspace: CurrentWorkspace,
    catalog: Catalog,
    spec: str = Query(..., description="Any revision specification (branch, tag, hash, rev:path)."),
) -> ObjectSummary:
    try:
        return await to_thread.run_sync(partial(catalog.resolver.lookup, workspace, spec))
    except MirrorError as exc:
        raise _to_http(exc) from None
