"""Base abstract class for indexer clients."""

from __future__ import annotations

from abc import ABC, abstractmethod

import structlog

from corsarr.core.search.models import Query, Release


class IndexerClient(ABC):
    """Abstract base class for indexer clients."""

    def __init__(self, name: str) -> None:
        """Initialize indexer client.

        Args:
            name: Name of the indexer (for logging)
        """
        self.name = name
        self.logger = structlog.get_logger(f"corsarr.indexers.{name.lower()}")

    @abstractmethod
    async def search(self, query: Query) -> list[Release]:
        """Search for releases.

        Args:
            query: Search term (blank for the latest feed) and internal category codes

        Returns:
            Normalized releases. A failed query yields an empty list; the
            failure itself is logged.
        """
        pass

    @abstractmethod
    async def test_connection(self) -> bool:
        """Test connection to the indexer.

        Returns:
            True if connection is successful, False otherwise
        """
        pass
