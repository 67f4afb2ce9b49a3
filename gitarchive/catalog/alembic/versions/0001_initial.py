"""initial schema: workspaces, workspace_syncs, workspace_tags

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "workspaces",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("long_description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_workspaces")),
    )
    op.create_table(
        "workspace_syncs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("workspace_id", sa.Integer(), nullable=False),
        sa.Column("start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["workspace_id"], ["workspaces.id"], name="fk_workspace_syncs_workspace_id"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_workspace_syncs")),
    )
    op.create_index("ix_workspace_syncs_workspace_id", "workspace_syncs", ["workspace_id"], unique=False)
    op.create_table(
        "workspace_tags",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("workspace_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("commit_id", sa.String(), nullable=False),
        sa.ForeignKeyConstraint(["workspace_id"], ["workspaces.id"], name="fk_workspace_tags_workspace_id"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_workspace_tags")),
        sa.UniqueConstraint("workspace_id", "name", "commit_id", name="uq_workspace_tags_workspace_id_name_commit_id"),
    )
    op.create_index("ix_workspace_tags_workspace_id", "workspace_tags", ["workspace_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_workspace_tags_workspace_id", table_name="workspace_tags")
    op.drop_table("workspace_tags")
    op.drop_index("ix_workspace_syncs_workspace_id", table_name="workspace_syncs")
    op.drop_table("workspace_syncs")
    op.drop_table("workspaces")
