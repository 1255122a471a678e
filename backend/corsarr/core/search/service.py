"""Query dispatcher choosing between the latest feed and a paginated search."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog

from corsarr.core.indexers.categories import CategoryMapper
from corsarr.core.search.models import Query, Release
from corsarr.core.search.normalizer import ReleaseBuilder
from corsarr.core.search.pagination import (
    MAX_SEARCH_PAGE_LIMIT,
    PageErrorPolicy,
    PageFetcher,
    PaginationController,
)
from corsarr.core.search.parser import ResponseParser
from corsarr.core.tracing import query_context

logger = structlog.get_logger("corsarr.search.service")

FeedFetcher = Callable[[], Awaitable[str | bytes]]


class QueryDispatcher:
    """Entry point turning a Query into a list of Releases."""

    def __init__(
        self,
        fetch_latest: FeedFetcher,
        fetch_page: PageFetcher,
        category_mapper: CategoryMapper | None = None,
        max_pages: int = MAX_SEARCH_PAGE_LIMIT,
        page_error_policy: PageErrorPolicy = "skip",
    ) -> None:
        """Initialize dispatcher.

        Args:
            fetch_latest: Coroutine returning the raw latest-feed payload
            fetch_page: Coroutine returning the raw payload of one search page
            category_mapper: Category table (defaults to the corsaro.red table)
            max_pages: Page cap for searches
            page_error_policy: What to do with a search page that fails to parse
        """
        self.fetch_latest = fetch_latest
        self.category_mapper = category_mapper or CategoryMapper()
        self.parser = ResponseParser()
        self.builder = ReleaseBuilder(self.category_mapper)
        self.pagination = PaginationController(
            fetch_page,
            parser=self.parser,
            builder=self.builder,
            max_pages=max_pages,
            page_error_policy=page_error_policy,
        )
        self.logger = structlog.get_logger("corsarr.search.service")

    async def run(self, query: Query) -> list[Release]:
        """Execute a query.

        A blank term reads the latest feed (no category filter is sent);
        otherwise the term is searched page by page.

        Raises:
            RemoteError: The transport failed or the server reported an error
            ParseError: The latest feed was not a JSON array
        """
        mode = "feed" if query.is_feed else "search"
        with query_context(mode, query.search_term):
            if query.is_feed:
                releases = await self._run_feed()
            else:
                category_filter = self.category_mapper.to_native_filter(query.categories)
                releases = await self.pagination.search(query.search_term, category_filter)

            self.logger.info("Query completed", results_count=len(releases))
            return releases

    async def _run_feed(self) -> list[Release]:
        payload = await self.fetch_latest()
        items = self.parser.parse_feed(payload)
        return self.builder.build_all(items, source="latest")
