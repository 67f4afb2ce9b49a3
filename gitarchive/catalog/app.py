from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.routing import APIRouter
from loguru import logger

from gitarchive.catalog.context import context_from_settings
from gitarchive.catalog.log import setup_logging
from gitarchive.catalog.settings import get_settings


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # -- Startup ---------------------------------------------------------------
    settings = get_settings()
    setup_logging(settings.log_level, json=settings.log_json)

    logger.info("Catalog starting (host={}, port={})", settings.host, settings.port)

    _app.state.catalog = None
    if settings.database_url:
        _app.state.catalog = context_from_settings(settings)
        logger.info("Database: connected")
    else:
        logger.warning("GITARCHIVE_DATABASE_URL not set -- catalog endpoints disabled")

    yield

    # -- Shutdown --------------------------------------------------------------
    if _app.state.catalog is not None:
        await _app.state.catalog.aclose()
        logger.info("Database: disposed")


app = FastAPI(title="gitarchive catalog", lifespan=lifespan)

# ---------------------------------------------------------------------------
# API router -- all backend endpoints live under /api
# ---------------------------------------------------------------------------
api = APIRouter(prefix="/api")


@api.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


from gitarchive.catalog.routers.mirrors import router as mirrors_router  # noqa: E402
from gitarchive.catalog.routers.workspaces import router as workspaces_router  # noqa: E402

api.include_router(workspaces_router)
api.include_router(mirrors_router)

app.include_router(api)
