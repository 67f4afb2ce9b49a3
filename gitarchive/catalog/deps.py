"""FastAPI dependency injection for the catalog context.

Usage in route handlers::

    @router.get("/{workspace_id}/tags")
    async def list_tags(catalog: Catalog, workspace: CurrentWorkspace) -> list[TagRecord]:
        ...

Dependencies raise HTTP 503 if the database was not configured
(GITARCHIVE_DATABASE_URL unset) and 404 for unknown workspace ids.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from gitarchive.catalog.context import CatalogContext
from gitarchive.catalog.models.workspace import WorkspaceRecord
from gitarchive.catalog.store.base import WorkspaceNotFoundError


def get_catalog(request: Request) -> CatalogContext:
    """Return the catalog context built during the app lifespan."""
    catalog: CatalogContext | None = request.app.state.catalog
    if catalog is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not configured (GITARCHIVE_DATABASE_URL is unset).",
        )
    return catalog


Catalog = Annotated[CatalogContext, Depends(get_catalog)]
"""Annotated dependency: the shared catalog context."""


async def get_workspace(workspace_id: int, catalog: Catalog) -> WorkspaceRecord:
    """Load the workspace named by the ``workspace_id`` path parameter."""
    try:
        return await catalog.workspaces.get(workspace_id)
    except WorkspaceNotFoundError:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Workspace {workspace_id} not found.") from None


CurrentWorkspace = Annotated[WorkspaceRecord, Depends(get_workspace)]
"""Annotated dependency: the workspace addressed by the request path."""
