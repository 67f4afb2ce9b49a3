"""Service configuration loaded from GITARCHIVE_* environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ArchiveSettings(BaseSettings):
    """gitarchive catalog settings.

    All fields are read from environment variables with the ``GITARCHIVE_``
    prefix.  For example, ``GITARCHIVE_GIT_ROOT=/srv/mirrors`` maps to
    ``git_root``.
    """

    model_config = SettingsConfigDict(
        env_prefix="GITARCHIVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"
    log_json: bool = False
    """Emit one JSON object per log record instead of coloured text."""

    # -- Infrastructure --------------------------------------------------------
    database_url: str | None = None
    """SQLAlchemy async URL (``sqlite+aiosqlite://`` or ``postgresql+psycopg://``)."""

    # -- Mirrors ---------------------------------------------------------------
    git_root: Path = Path("./data/mirrors")
    """Directory holding one bare mirror per workspace, named by workspace id."""

    # -- Server ----------------------------------------------------------------
    host: str = "127.0.0.1"
    port: int = 8000

    def require_database_url(self) -> str:
        """Return the database URL or raise if it is not configured."""
        if not self.database_url:
            msg = "GITARCHIVE_DATABASE_URL is not set."
            raise RuntimeError(msg)
        return self.database_url


def get_settings() -> ArchiveSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``_get_settings_cached.cache_clear()`` in tests to
    force a re-read after overriding env vars.
    """
    return _get_settings_cached()


def _get_settings_cached() -> ArchiveSettings:
    """Inner function wrapped by lru_cache (allows type-safe cache_clear)."""
    return ArchiveSettings()


# Apply lru_cache at runtime so the function is only called once.
from functools import lru_cache  # noqa: E402

_get_settings_cached = lru_cache(maxsize=1)(_get_settings_cached)
