import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from typing import TypeVar

import click

T = TypeVar("T")


@click.group()
def main() -> None:
    """gitarchive - Mirror remote git repositories and inspect their contents."""


def _run(action: Callable[..., Awaitable[T]]) -> T:
    """Build the catalog from settings, run *action* with it and dispose it."""
    from gitarchive.catalog.context import context_from_settings
    from gitarchive.catalog.log import setup_logging
    from gitarchive.catalog.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level, json=settings.log_json)

    async def _main() -> T:
        catalog = context_from_settings(settings)
        try:
            return await action(catalog)
        finally:
            await catalog.aclose()

    return asyncio.run(_main())


def _fail(exc: Exception) -> None:
    raise click.ClickException(str(exc)) from exc


# ---------------------------------------------------------------------------
# Workspace registry
# ---------------------------------------------------------------------------


@main.group()
def workspace() -> None:
    """Register and describe remote repositories."""


@workspace.command("register")
@click.argument("url")
@click.argument("description")
@click.option("-l", "--longdesc", default="", help="Long description.")
def workspace_register(url: str, description: str, longdesc: str) -> None:
    """Register URL as a new workspace."""

    async def action(catalog):
        workspace_id = await catalog.workspaces.add(url, description, longdesc)
        return await catalog.workspaces.get(workspace_id)

    click.echo(str(_run(action)))


@workspace.command("update")
@click.argument("workspace_id", type=int)
@click.argument("description")
@click.option("-l", "--longdesc", default="", help="Long description.")
def workspace_update(workspace_id: int, description: str, longdesc: str) -> None:
    """Replace the descriptions of a workspace."""

    async def action(catalog):
        return await catalog.workspaces.update(workspace_id, description, longdesc)

    if not _run(action):
        raise click.ClickException(f"Workspace {workspace_id} not found")
    click.echo(f"Workspace {workspace_id} updated.")


@workspace.command("list")
def workspace_list() -> None:
    """List registered workspaces."""

    async def action(catalog):
        return await catalog.workspaces.list()

    for record in _run(action):
        click.echo(str(record))


# ---------------------------------------------------------------------------
# Mirrors
# ---------------------------------------------------------------------------


@main.command()
@click.argument("workspace_id", type=int)
def sync(workspace_id: int) -> None:
    """Clone or fetch the mirror of a workspace."""
    from gitarchive.catalog.git.errors import MirrorError
    from gitarchive.catalog.store.base import WorkspaceNotFoundError

    async def action(catalog):
        record = await catalog.workspaces.get(workspace_id)
        return await catalog.synchronizer.synchronize(record)

    try:
        attempt_id = _run(action)
    except (MirrorError, WorkspaceNotFoundError) as exc:
        _fail(exc)
    click.echo(f"Sync attempt {attempt_id} completed.")


@main.command()
@click.argument("workspace_id", type=int)
def syncs(workspace_id: int) -> None:
    """Show the sync history of a workspace."""

    async def action(catalog):
        return await catalog.ledger.list(workspace_id)

    for attempt in _run(action):
        click.echo(str(attempt))


@main.command()
@click.argument("workspace_id", type=int)
@click.option("--reindex", is_flag=True, default=False, help="Rebuild the index from the mirror first.")
def tags(workspace_id: int, reindex: bool) -> None:
    """List the indexed tags of a workspace."""
    from gitarchive.catalog.git.errors import MirrorError
    from gitarchive.catalog.store.base import WorkspaceNotFoundError

    async def action(catalog):
        if reindex:
            record = await catalog.workspaces.get(workspace_id)
            await catalog.indexer.index_tags(record)
        return await catalog.tags.list(workspace_id)

    try:
        records = _run(action)
    except (MirrorError, WorkspaceNotFoundError) as exc:
        _fail(exc)
    for record in records:
        click.echo(str(record))


@main.command()
@click.argument("workspace_id", type=int)
@click.option("--commit", "commit_ref", default=None, help="Revision specification (default: HEAD).")
@click.option("--path", default=None, help="Path inside the commit tree (default: root).")
@click.option("--raw", is_flag=True, default=False, help="Write the blob's bytes to stdout.")
def pathinfo(workspace_id: int, commit_ref: str | None, path: str | None, raw: bool) -> None:
    """Describe (or dump) the object at PATH in a commit."""
    from gitarchive.catalog.git.errors import MirrorError
    from gitarchive.catalog.store.base import WorkspaceNotFoundError

    async def action(catalog):
        record = await catalog.workspaces.get(workspace_id)
        if raw:
            return catalog.resolver.read_raw(record, commit_ref, path)
        return catalog.resolver.pathinfo(record, commit_ref, path)

    try:
        result = _run(action)
    except (MirrorError, WorkspaceNotFoundError) as exc:
        _fail(exc)
    if raw:
        sys.stdout.buffer.write(result)
        sys.stdout.buffer.flush()
    else:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))


@main.command("object")
@click.argument("workspace_id", type=int)
@click.argument("spec")
def object_(workspace_id: int, spec: str) -> None:
    """Look up any object by revision specification."""
    from gitarchive.catalog.git.errors import MirrorError
    from gitarchive.catalog.store.base import WorkspaceNotFoundError

    async def action(catalog):
        record = await catalog.workspaces.get(workspace_id)
        return catalog.resolver.lookup(record, spec)

    try:
        summary = _run(action)
    except (MirrorError, WorkspaceNotFoundError) as exc:
        _fail(exc)
    click.echo(json.dumps(summary.model_dump(mode="json"), indent=2))


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind host (default: from GITARCHIVE_HOST or 127.0.0.1).")
@click.option("--port", default=None, type=int, help="Bind port (default: from GITARCHIVE_PORT or 8000).")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development.")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the catalog HTTP server."""
    import uvicorn

    from gitarchive.catalog.settings import ArchiveSettings

    settings = ArchiveSettings()

    uvicorn.run(
        "gitarchive.catalog.app:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level="warning",  # uvicorn's own logging is intercepted by loguru
    )


# ---------------------------------------------------------------------------
# Database management
# ---------------------------------------------------------------------------


def _alembic_config():
    """Build an Alembic Config from the package's alembic.ini.

    Both alembic.ini and the alembic/ directory live inside the package,
    so this works whether running from source or from an installed package.
    """
    from pathlib import Path

    from alembic.config import Config

    ini_path = Path(__file__).parent / "catalog" / "alembic.ini"
    cfg = Config(str(ini_path))
    return cfg


@main.group()
def db() -> None:
    """Database migration and management commands."""


@db.command()
def init() -> None:
    """Create all tables directly from the models (no migration history)."""
    from gitarchive.catalog.db.engine import init_schema

    async def action(catalog):
        await init_schema(catalog.engine)

    _run(action)
    click.echo("Database schema created.")


@db.command()
@click.option("--revision", default="head", help="Target revision (default: head).")
def upgrade(revision: str) -> None:
    """Run database migrations forward."""
    from alembic import command

    command.upgrade(_alembic_config(), revision)
    click.echo(f"Database upgraded to {revision}.")


@db.command()
@click.option("--revision", default="-1", help="Target revision (default: -1, one step back).")
def downgrade(revision: str) -> None:
    """Roll back database migrations."""
    from alembic import command

    command.downgrade(_alembic_config(), revision)
    click.echo(f"Database downgraded to {revision}.")


@db.command()
@click.argument("message")
def migrate(message: str) -> None:
    """Autogenerate a new migration from model changes."""
    from alembic import command

    command.revision(_alembic_config(), message=message, autogenerate=True)
    click.echo(f"Migration generated: {message}")


@db.command()
def current() -> None:
    """Show current database revision."""
    from alembic import command

    command.current(_alembic_config(), verbose=True)


@db.command()
def history() -> None:
    """Show migration history."""
    from alembic import command

    command.history(_alembic_config(), verbose=True)


if __name__ == "__main__":
    main()
