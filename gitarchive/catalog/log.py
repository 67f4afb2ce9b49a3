"""loguru setup for the CLI and the HTTP app.

Records from the standard library (SQLAlchemy, alembic, uvicorn, aiosqlite)
are forwarded into loguru, so one sink carries both the catalog's own
messages and its dependencies'.  With ``json=True`` each record is written
as one JSON object per line.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from loguru import logger

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Chatty dependency loggers capped at WARNING.
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "aiosqlite", "sqlalchemy.engine.Engine")


class StdlibBridge(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so loguru reports the caller.
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO", *, json: bool = False, sink: TextIO | None = None) -> int:
    """Replace every loguru handler with a single *sink* (stderr by default).

    Returns the loguru handler id.
    """
    level = level.upper()

    logger.remove()
    handler_id = logger.add(
        sink if sink is not None else sys.stderr,
        level=level,
        format="{message}" if json else TEXT_FORMAT,
        serialize=json,
        backtrace=False,
        diagnose=False,
    )

    logging.basicConfig(handlers=[StdlibBridge()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging to {} at {}", "json" if json else "text", level)
    return handler_id
