"""Trace and query context carried through structlog contextvars."""

from __future__ import annotations

import uuid
from collections.abc import Generator
from contextlib import contextmanager

import structlog.contextvars as contextvars


def generate_trace_id() -> str:
    """Generate a unique trace ID.

    Returns:
        Hexadecimal trace ID (32 characters)
    """
    return uuid.uuid4().hex


def get_trace_id() -> str | None:
    """Get the current trace ID from context, or None if not set."""
    return contextvars.get_contextvars().get("trace_id")


@contextmanager
def trace_context(trace_id: str | None = None) -> Generator[str]:
    """Bind a trace ID for the duration of the block.

    Any context bound before entering is restored on exit.

    Args:
        trace_id: Optional trace ID to use. If None, generates a new one.

    Yields:
        The trace ID being used

    Example:
        >>> with trace_context() as trace_id:
        ...     logger.info("Processing request")  # Will include trace_id
    """
    if trace_id is None:
        trace_id = generate_trace_id()

    with contextvars.bound_contextvars(trace_id=trace_id):
        yield trace_id


@contextmanager
def query_context(mode: str, term: str) -> Generator[None]:
    """Bind the mode (feed/search) and term of the query being executed."""
    with contextvars.bound_contextvars(query_mode=mode, query_term=term):
        yield
