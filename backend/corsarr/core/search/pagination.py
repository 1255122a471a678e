"""Page-fetch loop for term searches."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Literal

import structlog

from corsarr.core.indexers.errors import ParseError
from corsarr.core.metrics import search_pages_requested_total, search_pages_skipped_total
from corsarr.core.search.models import Release, SearchRequest
from corsarr.core.search.normalizer import ReleaseBuilder
from corsarr.core.search.parser import ResponseParser

logger = structlog.get_logger("corsarr.search.pagination")

# The site pages at 25 items, so this caps a search at 200 releases
MAX_SEARCH_PAGE_LIMIT = 8

PageErrorPolicy = Literal["skip", "abort"]
PageFetcher = Callable[[SearchRequest], Awaitable[str | bytes]]


@dataclass
class PageState:
    """Progress of one search; never shared between searches."""

    page_number: int = 1
    accumulated: list[Release] = field(default_factory=list)
    done: bool = False
    requests_issued: int = 0
    failed_pages: list[int] = field(default_factory=list)


class PaginationController:
    """Drives the sequential page requests of a search.

    Pages are requested one at a time: page N+1 is only requested once page N
    came back non-empty. The loop stops on the first empty page, after
    ``max_pages`` requests, or on a page that fails to parse when the policy
    is ``abort``. With the ``skip`` policy a malformed page is logged and the
    loop moves on to the next page number. RemoteError always propagates.
    """

    def __init__(
        self,
        fetch_page: PageFetcher,
        parser: ResponseParser | None = None,
        builder: ReleaseBuilder | None = None,
        max_pages: int = MAX_SEARCH_PAGE_LIMIT,
        page_error_policy: PageErrorPolicy = "skip",
    ) -> None:
        if max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        if page_error_policy not in ("skip", "abort"):
            raise ValueError(f"Unknown page error policy: {page_error_policy}")
        self.fetch_page = fetch_page
        self.parser = parser or ResponseParser()
        self.builder = builder or ReleaseBuilder()
        self.max_pages = max_pages
        self.page_error_policy = page_error_policy
        self.logger = structlog.get_logger("corsarr.search.pagination")

    async def search(self, term: str, category_filter: str) -> list[Release]:
        """Fetch and normalize every page of results for a term.

        Args:
            term: Search term (non-blank)
            category_filter: Comma-joined native category ids, or the all-categories sentinel

        Returns:
            Releases from all pages, in page order

        Raises:
            RemoteError: The transport failed or the server reported an error
        """
        state = PageState()
        base_request = SearchRequest(term=term, category=category_filter)

        while not state.done:
            request = base_request.for_page(state.page_number)
            payload = await self.fetch_page(request)
            state.requests_issued += 1
            search_pages_requested_total.inc()

            try:
                items = self.parser.parse_page(payload)
            except ParseError as e:
                state.failed_pages.append(request.page)
                search_pages_skipped_total.labels(policy=self.page_error_policy).inc()
                self.logger.error(
                    "Failed to parse search page",
                    page=request.page,
                    policy=self.page_error_policy,
                    error=e.message,
                    payload=e.payload_preview,
                )
                if self.page_error_policy == "abort":
                    state.done = True
                    continue
            else:
                if not items:
                    self.logger.debug("Empty page, end of results", page=request.page)
                    state.done = True
                    continue
                state.accumulated.extend(self.builder.build_all(items, page=request.page))

            state.page_number += 1
            state.done = state.page_number > self.max_pages

        self.logger.info(
            "Search pagination finished",
            term=term,
            category=category_filter,
            pages_requested=state.requests_issued,
            failed_pages=state.failed_pages,
            results_count=len(state.accumulated),
        )
        return state.accumulated
