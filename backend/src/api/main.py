"""FastAPI application main entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .middleware import register_error_handlers
from .routes import graph, projects
from ..services.config import get_config
from ..services.graph_service import get_graph_service
from ..services.seed import init_and_seed

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler to run startup and shutdown tasks."""
    logger.info("Running startup: initializing layout database and seeding demo project...")
    try:
        init_and_seed()
        logger.info("Startup complete: layout database and project store ready")
    except (OSError, ValueError) as exc:
        logger.exception("Startup failed: %s", exc)
        logger.error("App starting without demo data due to initialization error")

    yield

    get_graph_service().reset()


app = FastAPI(
    title="Blueprint Codex Graph API",
    description="Knowledge graph over Unreal documentation pages and the assets they reference",
    version="0.1.0",
    lifespan=lifespan,
)

config = get_config()

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(projects.router, tags=["projects"])
app.include_router(graph.router, tags=["graph"])


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


__all__ = ["app"]
