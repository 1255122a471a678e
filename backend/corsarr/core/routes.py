"""Application routes."""

from __future__ import annotations

import structlog
from fastapi import APIRouter

from corsarr.routes import general, indexer

logger = structlog.get_logger("corsarr.routes")


def create_app_router() -> APIRouter:
    """Create and configure main application router.

    Returns:
        Configured APIRouter instance
    """
    router = APIRouter()
    router.include_router(general.router, tags=["general"])
    router.include_router(indexer.router, tags=["indexer"])
    logger.debug("Application router created", routes_count=len(router.routes))
    return router
