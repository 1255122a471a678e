"""Indexer API routes."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from corsarr.core.dependencies import get_indexer
from corsarr.core.indexers.corsaro import CorsaroIndexer
from corsarr.core.indexers.errors import ParseError, RemoteError
from corsarr.core.search.models import Query as SearchQuery
from corsarr.core.search.models import Release
from corsarr.core.tracing import get_trace_id

router = APIRouter(prefix="/api/indexer")
logger = structlog.get_logger("corsarr.routes.indexer")


class ConnectionTestResponse(BaseModel):
    """Result of the configuration check."""

    success: bool
    message: str


def _parse_categories(cat: str | None) -> frozenset[int]:
    if not cat:
        return frozenset()
    try:
        return frozenset(int(part) for part in cat.split(",") if part.strip())
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid category list: {cat}",
        ) from e


@router.get("", response_model=dict[str, Any])
async def get_indexer_info(indexer: CorsaroIndexer = Depends(get_indexer)) -> dict[str, Any]:
    """Describe the indexer and its category table."""
    return indexer.info()


@router.get("/search", response_model=list[Release])
async def search(
    q: str | None = Query(default=None, description="Search term; empty returns the latest releases"),
    cat: str | None = Query(default=None, description="Comma separated Torznab category codes"),
    indexer: CorsaroIndexer = Depends(get_indexer),
) -> list[Release]:
    """Search the indexer, or list its latest releases when no term is given."""
    query = SearchQuery(term=q, categories=_parse_categories(cat))
    try:
        return await indexer.query(query)
    except RemoteError as e:
        logger.error("Indexer search failed", error=str(e), trace_id=get_trace_id())
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Indexer error: {e}",
        ) from e
    except ParseError as e:
        logger.error(
            "Indexer returned an unexpected response",
            error=e.message,
            payload=e.payload_preview,
            trace_id=get_trace_id(),
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Unexpected indexer response: {e.message}",
        ) from e


@router.post("/test", response_model=ConnectionTestResponse)
async def test_indexer(indexer: CorsaroIndexer = Depends(get_indexer)) -> ConnectionTestResponse:
    """Check that the indexer answers with at least one release."""
    success, message = await indexer.verify_configuration()
    if success:
        logger.info("Indexer configuration check successful", message=message)
    else:
        logger.warning("Indexer configuration check failed", message=message)
    return ConnectionTestResponse(success=success, message=message)
