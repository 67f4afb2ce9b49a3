"""API request / response schemas.

These thin schemas sit between HTTP and the stores:

- **Create** schemas validate user input and provide defaults.
- **Update** schemas carry the mutable description fields.
- **Response** schemas reuse the record models where they already fit.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class WorkspaceCreate(BaseModel):
    """Input for registering a new workspace."""

    url: str = Field(min_length=1)
    description: str = ""
    long_description: str = ""


class WorkspaceUpdate(BaseModel):
    """Replacement description fields; url and id are immutable."""

    description: str
    long_description: str = ""


class SyncResponse(BaseModel):
    attempt_id: int

