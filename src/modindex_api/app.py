# SPDX-License-Identifier: MIT
"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .config import APIConfig
from .db import Database
from .logging import get_logger
from .registry import Registry

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the database and registry on startup and dispose them on shutdown.

    A registry already placed on ``app.state`` (e.g. by tests) is used as is.
    """
    config: APIConfig = app.state.config

    if getattr(app.state, "registry", None) is not None:
        yield
        return

    database = Database(config.database)
    await database.create_all()
    app.state.database = database
    app.state.registry = Registry.from_config(config, database)
    logger.info(
        "registry started",
        database=database.url,
        downloads_path=config.storage.downloads_path,
        admin_tokens=len(config.auth.admin_tokens),
    )

    try:
        yield
    finally:
        await database.dispose()
        app.state.registry = None
        app.state.database = None


def create_app(config: Optional[APIConfig] = None, registry: Optional[Registry] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: API configuration. If None, loads from environment.
        registry: Prebuilt registry. If None, one is built from ``config``
            when the application starts.

    Use ``uvicorn --factory modindex_api.app:create_app`` to serve an app
    configured from the environment.

    Returns:
        Configured FastAPI application instance.
    """
    if config is None:
        config = APIConfig.from_env()

    app = FastAPI(
        title=config.title,
        description=config.description,
        version=config.version,
        debug=config.debug,
        docs_url=config.docs_url,
        openapi_url=config.openapi_url,
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.registry = registry

    from .middleware import RequestLoggingMiddleware, add_error_handlers

    add_error_handlers(app, catch_all=not config.debug)
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy", "version": config.version}

    from .routes import keys, mods

    app.include_router(keys.router, tags=["keys"])
    app.include_router(mods.router, tags=["mods"])

    return app
