"""Search module: query dispatch, pagination and release normalization."""

from corsarr.core.search.models import Query, RawItem, Release, SearchRequest
from corsarr.core.search.normalizer import ReleaseBuilder
from corsarr.core.search.pagination import MAX_SEARCH_PAGE_LIMIT, PageState, PaginationController
from corsarr.core.search.parser import ResponseParser
from corsarr.core.search.service import QueryDispatcher

__all__ = [
    "MAX_SEARCH_PAGE_LIMIT",
    "PageState",
    "PaginationController",
    "Query",
    "QueryDispatcher",
    "RawItem",
    "Release",
    "ReleaseBuilder",
    "ResponseParser",
    "SearchRequest",
]
