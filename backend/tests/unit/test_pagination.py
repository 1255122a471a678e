"""Tests for the search page loop."""

from __future__ import annotations

import json
from typing import Any

import pytest

from corsarr.core.indexers.errors import RemoteError
from corsarr.core.search.models import SearchRequest
from corsarr.core.search.pagination import MAX_SEARCH_PAGE_LIMIT, PaginationController


class FakePages:
    """Serves canned payloads per page number and records every request."""

    def __init__(self, pages: dict[int, Any], default: Any = None) -> None:
        self.pages = pages
        self.default = {"results": []} if default is None else default
        self.requests: list[SearchRequest] = []

    async def __call__(self, request: SearchRequest) -> str:
        self.requests.append(request)
        payload = self.pages.get(request.page, self.default)
        if isinstance(payload, Exception):
            raise payload
        if isinstance(payload, str):
            return payload
        return json.dumps(payload)

    @property
    def page_numbers(self) -> list[int]:
        return [request.page for request in self.requests]


@pytest.mark.asyncio
async def test_stops_on_first_empty_page(page_of) -> None:
    """25 results on page 1 and none on page 2: 25 releases, 2 requests."""
    fetch = FakePages({1: {"results": page_of(25)}, 2: {"results": []}})
    controller = PaginationController(fetch)

    releases = await controller.search("matrix", "2")

    assert len(releases) == 25
    assert fetch.page_numbers == [1, 2]


@pytest.mark.asyncio
async def test_request_parameters(page_of) -> None:
    fetch = FakePages({1: {"results": page_of(1)}})
    await PaginationController(fetch).search("matrix", "1,2")

    assert fetch.requests[0].to_params() == [
        ("term", "matrix"),
        ("category", "1,2"),
        ("page", "1"),
    ]
    assert fetch.requests[1].page == 2
    assert fetch.requests[1].term == "matrix"


@pytest.mark.asyncio
async def test_page_cap(page_of) -> None:
    """Full pages forever: never more than 8 requests."""
    fetch = FakePages({}, default={"results": page_of(25)})
    releases = await PaginationController(fetch).search("a", "0")

    assert fetch.page_numbers == list(range(1, MAX_SEARCH_PAGE_LIMIT + 1))
    assert len(releases) == 25 * MAX_SEARCH_PAGE_LIMIT


@pytest.mark.asyncio
async def test_custom_page_cap(page_of) -> None:
    fetch = FakePages({}, default={"results": page_of(3)})
    releases = await PaginationController(fetch, max_pages=2).search("a", "0")
    assert fetch.page_numbers == [1, 2]
    assert len(releases) == 6


@pytest.mark.asyncio
async def test_results_keep_page_order(page_of) -> None:
    fetch = FakePages({1: {"results": page_of(2, start=0)}, 2: {"results": page_of(2, start=2)}})
    releases = await PaginationController(fetch).search("a", "0")
    assert [r.title for r in releases] == [f"Release {i}" for i in range(4)]


@pytest.mark.asyncio
async def test_malformed_page_is_skipped(page_of) -> None:
    """With the skip policy a page without ``results`` is logged and the next page is requested."""
    fetch = FakePages(
        {
            1: {"results": page_of(2, start=0)},
            2: {"error": "no results key"},
            3: {"results": page_of(2, start=10)},
            4: {"results": []},
        }
    )
    releases = await PaginationController(fetch, page_error_policy="skip").search("a", "0")

    assert fetch.page_numbers == [1, 2, 3, 4]
    assert [r.title for r in releases] == ["Release 0", "Release 1", "Release 10", "Release 11"]


@pytest.mark.asyncio
async def test_malformed_page_aborts_with_abort_policy(page_of) -> None:
    """With the abort policy the loop stops and keeps what earlier pages returned."""
    fetch = FakePages({1: {"results": page_of(2)}, 2: "<html>oops</html>", 3: {"results": page_of(2)}})
    releases = await PaginationController(fetch, page_error_policy="abort").search("a", "0")

    assert fetch.page_numbers == [1, 2]
    assert len(releases) == 2


@pytest.mark.asyncio
async def test_malformed_pages_still_respect_cap() -> None:
    fetch = FakePages({}, default="not json")
    releases = await PaginationController(fetch).search("a", "0")
    assert releases == []
    assert len(fetch.requests) == MAX_SEARCH_PAGE_LIMIT


@pytest.mark.asyncio
async def test_malformed_item_does_not_discard_page(page_of) -> None:
    items = page_of(3)
    del items[1]["seeders"]
    fetch = FakePages({1: {"results": items}})

    releases = await PaginationController(fetch).search("a", "0")

    assert [r.title for r in releases] == ["Release 0", "Release 2"]
    assert fetch.page_numbers == [1, 2]


@pytest.mark.asyncio
async def test_server_error_aborts_search(page_of) -> None:
    fetch = FakePages({1: {"results": page_of(25)}, 2: {"ok": False}})
    with pytest.raises(RemoteError):
        await PaginationController(fetch).search("a", "0")
    assert fetch.page_numbers == [1, 2]


@pytest.mark.asyncio
async def test_transport_error_aborts_search(page_of) -> None:
    fetch = FakePages({1: {"results": page_of(25)}, 2: RemoteError("timed out")})
    with pytest.raises(RemoteError, match="timed out"):
        await PaginationController(fetch).search("a", "0")
    assert fetch.page_numbers == [1, 2]


def test_invalid_configuration() -> None:
    fetch = FakePages({})
    with pytest.raises(ValueError):
        PaginationController(fetch, max_pages=0)
    with pytest.raises(ValueError):
        PaginationController(fetch, page_error_policy="retry")  # type: ignore[arg-type]


def test_search_request_for_page_returns_new_request() -> None:
    request = SearchRequest(term="a", category="0")
    next_request = request.for_page(2)
    assert request.page == 1
    assert next_request.page == 2
    assert next_request is not request
