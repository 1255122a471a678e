"""Prometheus metrics configuration."""

from __future__ import annotations

import structlog
from fastapi import FastAPI
from prometheus_client import Counter, Gauge
from prometheus_fastapi_instrumentator import Instrumentator

logger = structlog.get_logger("corsarr.metrics")

# Application info
app_info = Gauge(
    "app_info",
    "Application information",
    ["version"],
)

# Search pagination metrics
search_pages_requested_total = Counter(
    "corsarr_search_pages_requested_total",
    "Total number of search result pages requested from the indexer",
)
search_pages_skipped_total = Counter(
    "corsarr_search_pages_skipped_total",
    "Total number of search result pages discarded because they failed to parse",
    ["policy"],  # policy: skip, abort
)

# Item normalization metrics
items_skipped_total = Counter(
    "corsarr_items_skipped_total",
    "Total number of malformed items dropped while building releases",
)


def setup_metrics(app: FastAPI, app_version: str) -> None:
    """Setup Prometheus metrics using prometheus-fastapi-instrumentator.

    Args:
        app: FastAPI application instance
        app_version: Application version
    """
    if getattr(app.state, "_metrics_initialized", False):
        logger.debug("Metrics already initialized for this app instance, skipping")
        return

    instrumentator = Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=[
            "/metrics",
            "/docs",
            "/openapi.json",
            "/redoc",
        ],
    )

    # Adds the HTTP middleware and the /metrics route
    instrumentator.instrument(app).expose(app, endpoint="/metrics")

    app.state._metrics_initialized = True

    app_info.labels(version=app_version).set(1)

    logger.info("Metrics initialized", version=app_version)
