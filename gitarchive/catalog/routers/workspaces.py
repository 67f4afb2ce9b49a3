"""Workspace registry endpoints (RPC-style).

All write operations use POST; reads use GET.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from gitarchive.catalog.deps import Catalog, CurrentWorkspace
from gitarchive.catalog.models.api import WorkspaceCreate, WorkspaceUpdate
from gitarchive.catalog.models.workspace import WorkspaceRecord

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


@router.post("/register", response_model=WorkspaceRecord, status_code=status.HTTP_201_CREATED)
async def register_workspace(body: WorkspaceCreate, catalog: Catalog) -> WorkspaceRecord:
    """Register a new remote repository."""
    workspace_id = await catalog.workspaces.add(body.url, body.description, body.long_description)
    return await catalog.workspaces.get(workspace_id)


@router.get("/list", response_model=list[WorkspaceRecord])
async def list_workspaces(catalog: Catalog) -> list[WorkspaceRecord]:
    """List all workspaces, ordered by id."""
    return await catalog.workspaces.list()


@router.get("/{workspace_id}/get", response_model=WorkspaceRecord)
async def get_workspace(workspace: CurrentWorkspace) -> WorkspaceRecord:
    """Get a single workspace by id."""
    return workspace


@router.post("/{workspace_id}/update", response_model=WorkspaceRecord)
async def update_workspace(workspace_id: int, body: WorkspaceUpdate, catalog: Catalog) -> WorkspaceRecord:
    """Replace the description fields of a workspace."""
    updated = await catalog.workspaces.update(workspace_id, body.description, body.long_description)
    if not updated:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Workspace {workspace_id} not found.")
    return await catalog.workspaces.get(workspace_id)
