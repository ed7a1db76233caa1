"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from shortlink_app.api.errors import register_exception_handlers
from shortlink_app.api.v1 import urls, redirect
from shortlink_app.config import Settings, get_settings
from shortlink_app.logging_config import configure_logging
from shortlink_app.middleware import RequestIdMiddleware
from shortlink_app.services.alias_strategies import AliasStrategy, RandomAliasStrategy
from shortlink_app.storage.factory import StoreBackend, URLStoreFactory
from shortlink_app.storage.strategies import URLStoreStrategy

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[URLStoreStrategy] = None,
    alias_strategy: Optional[AliasStrategy] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The application owns the URL store: it initializes the schema on startup
    and closes the store on shutdown.

    Args:
        settings: Configuration (defaults to environment / .env)
        store: URL store (defaults to the backend named in settings)
        alias_strategy: Alias generator (defaults to random alphanumeric)

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_json)

    store = store or URLStoreFactory.create(StoreBackend(settings.storage_backend), settings)
    alias_strategy = alias_strategy or RandomAliasStrategy()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.init_schema()
        logger.info(
            "%s %s started",
            settings.app_name,
            settings.app_version,
            extra={"environment": settings.environment, "backend": store.name},
        )
        yield
        store.close()
        logger.info("url store closed", extra={"backend": store.name})

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="A URL shortener service built with FastAPI",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.url_store = store
    app.state.alias_strategy = alias_strategy

    app.add_middleware(RequestIdMiddleware)
    register_exception_handlers(app)

    @app.get("/")
    def read_root():
        """Root endpoint with API information"""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "docs": "/docs",
        }

    @app.get("/health")
    def health_check(request: Request):
        """Health check endpoint"""
        healthy = request.app.state.url_store.ping()
        return JSONResponse(
            status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "healthy" if healthy else "unhealthy",
                "environment": settings.environment,
            },
        )

    # The catch-all redirect route goes last so it cannot shadow the routes above
    app.include_router(urls.router, prefix="/api/v1")
    app.include_router(redirect.router)

    return app
