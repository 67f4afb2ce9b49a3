"""Exceptions raised by the git engine.

Every terminal failure is distinguishable by class so that callers can
decide between retrying (``TransportError``) and stopping (everything else).
"""

from __future__ import annotations

from pathlib import Path


class MirrorError(Exception):
    """Base class for git engine failures."""


# ---------------------------------------------------------------------------
# Synchronization
# ---------------------------------------------------------------------------


class SyncError(MirrorError):
    """A synchronization attempt failed; the attempt is recorded as ``ERROR``."""


class TransportError(SyncError):
    """Clone or fetch against the remote failed (network, auth, protocol)."""


class InvalidMirrorError(SyncError):
    """The mirror path holds something other than a bare repository."""

    def __init__(self, path: Path, reason: str = "expected bare repo") -> None:
        super().__init__(f"Invalid data at local {str(path)!r} - {reason}")
        self.path = path


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class ResolveError(MirrorError, LookupError):
    """A reference or path could not be resolved inside a mirror."""


class MirrorNotFoundError(ResolveError):
    """No usable mirror exists yet for the workspace."""

    def __init__(self, workspace_id: int, path: Path) -> None:
        super().__init__(f"Workspace {workspace_id} has no mirror at {str(path)!r}; synchronize it first")
        self.workspace_id = workspace_id


class RefNotFoundError(ResolveError):
    def __init__(self, spec: str) -> None:
        super().__init__(f"'{spec}' does not name an object")
        self.spec = spec


class NotACommitError(ResolveError):
    def __init__(self, spec: str) -> None:
        super().__init__(f"'{spec}' does not refer to a valid commit")
        self.spec = spec


class PathNotFoundError(ResolveError):
    def __init__(self, path: str, commit_id: str) -> None:
        super().__init__(f"Path '{path}' not found in tree of commit {commit_id}")
        self.path = path
        self.commit_id = commit_id


class NotABlobError(ResolveError):
    def __init__(self, path: str, kind: str) -> None:
        super().__init__(f"Target '{path or '/'}' is a {kind}, not a blob")
        self.path = path
        self.kind = kind
