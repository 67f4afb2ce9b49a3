"""Shared enumerations used across the catalog."""

from __future__ import annotations

from enum import StrEnum

# -- Sync ----------------------------------------------------------------------


class SyncStatus(StrEnum):
    """Durable status of a synchronization attempt.

    ``UNKNOWN`` is never written; it is what an unrecognised stored value
    decodes to.
    """

    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> SyncStatus:
        return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (SyncStatus.COMPLETED, SyncStatus.ERROR)


# -- Objects -------------------------------------------------------------------


class ObjectKind(StrEnum):
    """Git object kinds as reported by ``type_str``."""

    COMMIT = "commit"
    TREE = "tree"
    BLOB = "blob"
    TAG = "tag"
