"""
widgetboard FastAPI application.

Entry point for the API server:

    uvicorn backend.main:app
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.config import settings
from backend.models.location import HealthResponse
from backend.repos.location_store import open_location_store
from backend.routes import locations as location_routes

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Startup selects the persistence backend once for the process lifetime;
    shutdown closes it. A store already placed on app.state (tests) is kept.
    """
    owned = getattr(app.state, "store", None) is None
    if owned:
        app.state.store = await open_location_store(settings)
    logger.info("Location store ready: %s", app.state.store.backend)

    yield

    if owned:
        await app.state.store.close()
        app.state.store = None
        logger.info("Location store closed")


app = FastAPI(
    title="widgetboard",
    docs_url=None,
    redoc_url=None,
    lifespan=lifespan,
)

# Register routes
app.include_router(location_routes.router)


@app.get("/health")
async def health() -> HealthResponse:
    """Health check endpoint for uptime monitoring."""
    store = getattr(app.state, "store", None)
    return HealthResponse(status="ok", backend=store.backend if store else "none")
