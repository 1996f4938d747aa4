"""FastAPI application factory for the SnipIt service."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..config import AppSettings
from ..error_handler import configure_logging
from ..mcpserver import create_server
from ..query import use_system_collation
from ..settings import SettingsStore, initialize
from .route import router


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or AppSettings.from_env()
    mcp_app = create_server(settings).http_app("/")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        use_system_collation()
        app.state.settings_store = await initialize(
            settings.home,
            store=SettingsStore(settings.settings_path),
            default_collection_path=settings.default_collection_path,
        )
        async with mcp_app.lifespan(app):
            yield

    app = FastAPI(
        title="SnipIt API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.include_router(router)

    app.mount("/mcp", mcp_app)

    return app


__all__ = ["create_app"]
