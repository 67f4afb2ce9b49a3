"""SQLAlchemy ORM models.

These are the single source of truth for the database schema. Alembic reads
``Base.metadata`` to autogenerate migration scripts.

Uses SQLAlchemy 2.0 declarative style with ``Mapped`` type annotations.
Column types are portable so the same models serve SQLite and PostgreSQL.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Timezone-aware timestamp type for all datetime columns.
TimestampTZ = DateTime(timezone=True)


class Base(DeclarativeBase):
    """Declarative base with naming convention for constraints."""

    pass


# Apply naming convention to the metadata for deterministic constraint names.
Base.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Workspace(Base):
    __tablename__ = "workspaces"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    long_description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, nullable=False)


class WorkspaceSync(Base):
    __tablename__ = "workspace_syncs"
    __table_args__ = (Index("ix_workspace_syncs_workspace_id", "workspace_id"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    workspace_id: Mapped[int] = mapped_column(
        ForeignKey("workspaces.id", name="fk_workspace_syncs_workspace_id"),
    )
    start: Mapped[datetime] = mapped_column(TimestampTZ, nullable=False)
    end: Mapped[datetime | None] = mapped_column(TimestampTZ)
    status: Mapped[str] = mapped_column(nullable=False)
    message: Mapped[str | None] = mapped_column(Text)


class WorkspaceTag(Base):
    __tablename__ = "workspace_tags"
    __table_args__ = (
        UniqueConstraint("workspace_id", "name", "commit_id", name="uq_workspace_tags_workspace_id_name_commit_id"),
        Index("ix_workspace_tags_workspace_id", "workspace_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    workspace_id: Mapped[int] = mapped_column(
        ForeignKey("workspaces.id", name="fk_workspace_tags_workspace_id"),
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    commit_id: Mapped[str] = mapped_column(nullable=False)
