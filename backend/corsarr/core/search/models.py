"""Pydantic models for queries, raw indexer items and normalized releases."""

from __future__ import annotations

from datetime import datetime
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator


def _require_uri(value: str) -> str:
    parts = urlsplit(value.strip())
    if not parts.scheme or not (parts.netloc or parts.path or parts.query):
        raise ValueError(f"not an absolute URI: {value!r}")
    return value.strip()


class Query(BaseModel):
    """A generic "find items matching" request from the aggregator."""

    model_config = ConfigDict(frozen=True)

    term: str | None = Field(default=None, description="Search term; blank selects the latest feed")
    categories: frozenset[int] = Field(
        default_factory=frozenset, description="Internal category codes (empty = all)"
    )

    @property
    def is_feed(self) -> bool:
        return not (self.term and self.term.strip())

    @property
    def search_term(self) -> str:
        return (self.term or "").strip()


class RawItem(BaseModel):
    """One torrent object as returned by the corsaro.red API.

    Both the ``latests`` array and the ``results`` array of a search page
    contain objects of this shape.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: str
    link: str
    last_updated: str | None = None
    category: int
    size: int | None = None
    completed: int
    description: str | None = None
    seeders: int = Field(ge=0)
    leechers: int = Field(ge=0)
    info_hash: str | None = Field(default=None, alias="hash")
    magnet: str

    @field_validator("link", "magnet")
    @classmethod
    def _validate_uri(cls, value: str) -> str:
        return _require_uri(value)


class Release(BaseModel):
    """Canonical release record handed back to the aggregator."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Release title")
    comments_uri: str = Field(..., description="Details page on the indexer")
    publish_date: datetime | None = Field(default=None, description="Last update on the indexer")
    category: int = Field(..., description="Internal (Torznab) category code")
    size_bytes: int | None = Field(default=None, description="Total size in bytes")
    grabs: int = Field(..., description="Completed downloads")
    description: str | None = Field(default=None)
    seeders: int = Field(..., ge=0)
    peers: int = Field(..., ge=0, description="Seeders plus leechers")
    info_hash: str | None = Field(default=None)
    magnet_uri: str = Field(..., description="Magnet link")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def guid(self) -> str:
        """Unique identifier; always the comments URI."""
        return self.comments_uri

    @model_validator(mode="after")
    def _check_peers(self) -> Release:
        if self.peers < self.seeders:
            raise ValueError("peers must be greater than or equal to seeders")
        return self


class SearchRequest(BaseModel):
    """Parameters of one search page request.

    Immutable: ``for_page`` returns a new request instead of mutating this one.
    """

    model_config = ConfigDict(frozen=True)

    term: str
    category: str
    page: int = Field(default=1, ge=1)

    def for_page(self, page: int) -> SearchRequest:
        return SearchRequest(term=self.term, category=self.category, page=page)

    def to_params(self) -> list[tuple[str, str]]:
        return [("term", self.term), ("category", self.category), ("page", str(self.page))]
