"""On-disk mirror layout and repository handles.

Each workspace owns exactly one bare mirror::

    {git_root}/{workspace_id}

``Mirror`` is the owning handle for an opened repository.  Everything
derived from it (commits, trees, ``ResolvedObject``) borrows the handle and
must not be used once the mirror is closed.
"""

from __future__ import annotations

from pathlib import Path
from types import TracebackType

import pygit2
from pygit2.enums import RepositoryOpenFlag

from gitarchive.catalog.git.errors import InvalidMirrorError, MirrorNotFoundError


class MirrorClosedError(RuntimeError):
    """Raised when a closed mirror (or an object derived from it) is used."""


class WorkspaceDirectory:
    """Maps workspace ids to mirror paths under a single root."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, workspace_id: int) -> Path:
        return self._root / str(workspace_id)

    def open(self, workspace_id: int) -> Mirror:
        """Open the mirror of a synchronized workspace.

        Raises ``MirrorNotFoundError`` when nothing has been cloned yet and
        ``InvalidMirrorError`` when the path holds something else.
        """
        path = self.path_for(workspace_id)
        repo = open_bare(path)
        if repo is None:
            raise MirrorNotFoundError(workspace_id, path)
        return Mirror(workspace_id, path, repo)


class Mirror:
    """Owning context for an opened bare repository."""

    def __init__(self, workspace_id: int, path: Path, repo: pygit2.Repository) -> None:
        self.workspace_id = workspace_id
        self.path = path
        self._repo: pygit2.Repository | None = repo

    @property
    def repo(self) -> pygit2.Repository:
        self.ensure_open()
        return self._repo

    def ensure_open(self) -> None:
        if self._repo is None:
            msg = f"Mirror of workspace {self.workspace_id} is closed"
            raise MirrorClosedError(msg)

    @property
    def closed(self) -> bool:
        return self._repo is None

    def close(self) -> None:
        if self._repo is not None:
            self._repo.free()
            self._repo = None

    def __enter__(self) -> Mirror:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def open_bare(path: Path) -> pygit2.Repository | None:
    """Open the bare repository at *path*.

    Returns ``None`` when there is nothing to open (missing path or empty
    directory), which is the signal to clone.  Anything else that is not a
    bare repository raises ``InvalidMirrorError``; such paths are never
    cloned over.
    """
    if not path.exists() or (path.is_dir() and not any(path.iterdir())):
        return None
    try:
        # NO_SEARCH: never fall back to a repository in a parent directory.
        repo = pygit2.Repository(str(path), RepositoryOpenFlag.NO_SEARCH)
    except (pygit2.GitError, KeyError, ValueError, OSError) as exc:
        raise InvalidMirrorError(path) from exc
    if not repo.is_bare:
        repo.free()
        raise InvalidMirrorError(path, "repository has a working tree")
    return repo
