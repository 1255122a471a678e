"""Client for the corsaro.red JSON API."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from corsarr.core.indexers.base import IndexerClient
from corsarr.core.indexers.categories import CategoryMapper, TorznabCategory
from corsarr.core.indexers.errors import IndexerError, RemoteError
from corsarr.core.search.models import Query, Release, SearchRequest
from corsarr.core.search.pagination import MAX_SEARCH_PAGE_LIMIT, PageErrorPolicy
from corsarr.core.search.service import QueryDispatcher

logger = structlog.get_logger("corsarr.indexers.corsaro")

DEFAULT_SITE_LINK = "https://corsaro.red/"
NO_RELEASES_MESSAGE = "Could not find any release from this source."

API_HEADERS = {"Content-Type": "application/json"}


class CorsaroIndexer(IndexerClient):
    """Indexer client for corsaro.red, a public Italian torrent site."""

    description = "Italian Torrents"
    language = "it-it"
    privacy = "public"
    encoding = "utf-8"

    def __init__(
        self,
        name: str = "Corsaro.red",
        base_url: str = DEFAULT_SITE_LINK,
        timeout: float = 30,
        retries: int = 1,
        max_pages: int = MAX_SEARCH_PAGE_LIMIT,
        page_error_policy: PageErrorPolicy = "skip",
        category_mapper: CategoryMapper | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the corsaro.red client.

        Args:
            name: Name of the indexer (for logging)
            base_url: Site link; API endpoints are resolved against it
            timeout: Request timeout in seconds
            retries: Connection retries performed by the HTTP transport
            max_pages: Page cap for searches
            page_error_policy: ``skip`` or ``abort`` on a search page that fails to parse
            category_mapper: Category table (defaults to the corsaro.red table)
            transport: Custom httpx transport (tests use ``httpx.MockTransport``)
        """
        super().__init__(name)
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self.category_mapper = category_mapper or CategoryMapper()
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            default_encoding=self.encoding,
            transport=transport or httpx.AsyncHTTPTransport(retries=retries),
            headers={**API_HEADERS, "Referer": self.base_url},
        )
        self.dispatcher = QueryDispatcher(
            self.fetch_latest,
            self.fetch_search_page,
            category_mapper=self.category_mapper,
            max_pages=max_pages,
            page_error_policy=page_error_policy,
        )

    async def __aenter__(self) -> CorsaroIndexer:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    @property
    def api_latest_url(self) -> str:
        return f"{self.base_url}api/latests"

    @property
    def api_search_url(self) -> str:
        return f"{self.base_url}api/search"

    async def _request(self, method: str, url: str, **kwargs: Any) -> str:
        """Send a request and return the body text.

        Raises:
            RemoteError: On connection failure, timeout or non-2xx status
        """
        try:
            self.logger.debug("Making corsaro.red API request", method=method, url=url)
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.text
        except httpx.HTTPStatusError as e:
            self.logger.error(
                "corsaro.red API HTTP error",
                url=url,
                status_code=e.response.status_code,
            )
            raise RemoteError(f"HTTP {e.response.status_code} error", payload=e.response.text) from e
        except httpx.TimeoutException as e:
            self.logger.error("corsaro.red API timeout", url=url, error=str(e))
            raise RemoteError(f"Request to indexer timed out: {e}") from e
        except httpx.HTTPError as e:
            self.logger.error("corsaro.red API connection error", url=url, error=str(e))
            raise RemoteError(f"Failed to connect to indexer: {e}") from e

    async def fetch_latest(self) -> str:
        """Fetch the raw latest-items feed."""
        return await self._request("GET", self.api_latest_url)

    async def fetch_search_page(self, request: SearchRequest) -> str:
        """Fetch the raw payload of one search page."""
        return await self._request("POST", self.api_search_url, json=dict(request.to_params()))

    async def query(self, query: Query) -> list[Release]:
        """Run a query and let RemoteError/ParseError propagate."""
        return await self.dispatcher.run(query)

    async def search(self, query: Query) -> list[Release]:
        """Search corsaro.red; a failed query yields no results."""
        try:
            return await self.query(query)
        except IndexerError as e:
            self.logger.error(
                "corsaro.red query failed",
                term=query.search_term,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

    async def verify_configuration(self) -> tuple[bool, str]:
        """Check that the site answers with at least one release.

        Returns:
            Tuple of (success: bool, message: str)
        """
        try:
            releases = await self.query(Query())
        except IndexerError as e:
            self.logger.warning("Configuration check failed", error=str(e))
            return False, NO_RELEASES_MESSAGE

        if not releases:
            return False, NO_RELEASES_MESSAGE
        return True, f"Found {len(releases)} releases"

    async def test_connection(self) -> bool:
        """Test the connection to the indexer.

        Returns:
            True if the latest feed yields at least one release, False otherwise
        """
        success, _ = await self.verify_configuration()
        return success

    def info(self) -> dict[str, Any]:
        """Describe the indexer and its category table."""
        return {
            "name": self.name,
            "description": self.description,
            "site_link": self.base_url,
            "language": self.language,
            "encoding": self.encoding,
            "type": self.privacy,
            "categories": [
                {
                    "native_id": mapping.native_id,
                    "category": mapping.internal_code,
                    "category_name": TorznabCategory.name_of(mapping.internal_code),
                    "description": mapping.description,
                }
                for mapping in self.category_mapper.mappings
            ],
        }
