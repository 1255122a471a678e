"""FastAPI middleware for request/response handling."""

from __future__ import annotations

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from corsarr.core.tracing import trace_context

logger = structlog.get_logger("corsarr.middleware")

TRACE_HEADER = "X-Trace-ID"


class TracingMiddleware(BaseHTTPMiddleware):
    """Middleware to add trace IDs to all requests."""

    async def dispatch(self, request: Request, call_next):
        """Bind a trace ID for the request and echo it in the response.

        Reuses the X-Trace-ID request header when present, so a caller can
        correlate its own logs with the indexer queries made on its behalf.
        """
        with trace_context(request.headers.get(TRACE_HEADER) or None) as trace_id:
            logger.debug("Processing request", method=request.method, path=request.url.path)

            response = await call_next(request)
            response.headers[TRACE_HEADER] = trace_id

            logger.debug(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )
            return response
