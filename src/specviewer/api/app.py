"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from specviewer import __version__
from specviewer.api.routes import pages, ws
from specviewer.config import ServerConfig
from specviewer.events import ConnectionRegistry
from specviewer.reload import ReloadCoordinator

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    config: ServerConfig = app.state.config
    registry: ConnectionRegistry = app.state.registry

    # Startup; a WatcherError here aborts serving
    logger.info("Starting Spec Viewer...")
    coordinator: ReloadCoordinator | None = None
    if config.watch:
        coordinator = ReloadCoordinator(config.folder, registry)
        await coordinator.start()
    app.state.coordinator = coordinator

    yield

    # Shutdown
    logger.info("Shutting down Spec Viewer...")
    if coordinator is not None:
        await coordinator.stop(timeout=config.shutdown_grace)
    await registry.close_all()
    logger.info("Spec Viewer stopped")


def create_app(config: ServerConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Spec Viewer",
        description="Live-reloading viewer for markdown specs",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.config = config or ServerConfig()
    app.state.registry = ConnectionRegistry()
    app.state.coordinator = None

    app.include_router(pages.router, tags=["pages"])
    app.include_router(ws.router, tags=["websocket"])
    app.mount("/public", StaticFiles(directory=STATIC_DIR), name="public")

    @app.exception_handler(StarletteHTTPException)
    async def html_not_found(request: Request, exc: StarletteHTTPException) -> Response:
        if exc.status_code == 404:
            return pages.not_found_page(request)
        return await http_exception_handler(request, exc)

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app
