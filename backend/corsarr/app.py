"""Application entry point for Corsarr."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from corsarr.core.config import Settings, get_settings
from corsarr.core.indexers.corsaro import CorsaroIndexer
from corsarr.core.logging import setup_logging
from corsarr.core.metrics import setup_metrics
from corsarr.core.middleware import TracingMiddleware
from corsarr.core.routes import create_app_router
from corsarr.routes.general import APP_VERSION

logger = structlog.get_logger("corsarr.app")


def create_indexer(settings: Settings) -> CorsaroIndexer:
    """Build the corsaro.red client from settings."""
    return CorsaroIndexer(
        base_url=settings.indexer_base_url,
        timeout=settings.request_timeout,
        retries=settings.request_retries,
        page_error_policy=settings.page_error_policy,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "Starting Corsarr application",
        version=APP_VERSION,
        env=settings.env,
        host=settings.host_bind_address,
        port=settings.host_port,
        indexer=settings.indexer_base_url,
    )

    yield

    logger.info("Shutting down Corsarr application")
    indexer = getattr(app.state, "indexer", None)
    if indexer is not None:
        await indexer.aclose()
        logger.info("Indexer client closed")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    setup_logging(debug=settings.is_debug, logs_dir=None if settings.is_testing else settings.logs_dir)

    app = FastAPI(
        title="Corsarr",
        description="Torznab-style adapter for the corsaro.red torrent index",
        version=APP_VERSION,
        lifespan=lifespan,
    )

    # Created synchronously so routes work without running the lifespan
    app.state.indexer = create_indexer(settings)

    app.add_middleware(TracingMiddleware)
    setup_metrics(app, APP_VERSION)
    app.include_router(create_app_router())

    return app


def main() -> None:
    """Main entry point."""
    from corsarr.core.config import reload_settings

    current_settings = reload_settings()
    app = create_app()

    import uvicorn

    logger.info(
        "Starting uvicorn server",
        host=current_settings.host_bind_address,
        port=current_settings.host_port,
    )

    uvicorn.run(
        app,
        host=current_settings.host_bind_address,
        port=current_settings.host_port,
        log_config=None,  # We use structlog
        reload=False,
    )


if __name__ == "__main__":
    main()
