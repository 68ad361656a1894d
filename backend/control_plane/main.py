"""Pipeline Control Plane API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ControlPlaneError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - The database session manager is created by the lifespan and stored on
      app.state; shutdown disposes its engine

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py so tests can build a bare app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from control_plane.api.error_handlers import register_error_handlers
from control_plane.api.routes import health, pipelines, references, topics, workspaces
from control_plane.config import get_settings
from control_plane.infrastructure.database import DatabaseSessionManager
from control_plane.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    app.state.db_manager = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Control plane API started")
    yield
    logger.info("Control plane API shutting down")
    await app.state.db_manager.dispose()


app = FastAPI(
    title="Pipeline Control Plane API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(workspaces.router)
app.include_router(pipelines.router)
app.include_router(references.router)
app.include_router(topics.router)

register_error_handlers(app)
