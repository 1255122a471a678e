"""Indexer clients and the category table of the corsaro.red API."""

from corsarr.core.indexers.errors import IndexerError, ParseError, RemoteError
from corsarr.core.indexers.categories import (
    ALL_CATEGORIES,
    CORSARO_CATEGORIES,
    CategoryMapper,
    CategoryMapping,
    TorznabCategory,
)
from corsarr.core.indexers.base import IndexerClient

__all__ = [
    "ALL_CATEGORIES",
    "CORSARO_CATEGORIES",
    "CategoryMapper",
    "CategoryMapping",
    "IndexerClient",
    "IndexerError",
    "ParseError",
    "RemoteError",
    "TorznabCategory",
]
