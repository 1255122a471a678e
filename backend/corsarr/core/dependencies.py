"""FastAPI dependencies."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from corsarr.core.indexers.corsaro import CorsaroIndexer


def get_indexer(request: Request) -> CorsaroIndexer:
    """Return the indexer client owned by the application.

    Raises:
        HTTPException: If the application has no indexer configured
    """
    indexer = getattr(request.app.state, "indexer", None)
    if indexer is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Indexer not configured",
        )
    return indexer
