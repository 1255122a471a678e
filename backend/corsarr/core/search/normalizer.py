"""Builder converting raw corsaro.red items to the canonical Release format."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

import structlog
from pydantic import ValidationError

from corsarr.core.indexers.categories import CategoryMapper
from corsarr.core.indexers.errors import ParseError
from corsarr.core.metrics import items_skipped_total
from corsarr.core.search.models import RawItem, Release

logger = structlog.get_logger("corsarr.search.normalizer")


class ReleaseBuilder:
    """Normalizes one raw API item into a Release."""

    def __init__(self, category_mapper: CategoryMapper | None = None) -> None:
        """Initialize builder.

        Args:
            category_mapper: Mapper used to translate native category ids
        """
        self.category_mapper = category_mapper or CategoryMapper()
        self.logger = structlog.get_logger("corsarr.search.normalizer")

    def build(self, item: Any) -> Release:
        """Build a Release from a raw item.

        Args:
            item: One element of a feed array or of a search page's ``results``

        Returns:
            Normalized Release

        Raises:
            ParseError: If a required field is missing or has the wrong type
        """
        if not isinstance(item, dict):
            raise ParseError(
                f"Expected a JSON object for an item, got {type(item).__name__}", _dump(item)
            )

        try:
            raw = RawItem.model_validate(item)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise ParseError(f"Invalid item ({fields})", _dump(item)) from e

        publish_date = None
        if raw.last_updated:
            publish_date = self._parse_date(raw.last_updated)
            if publish_date is None:
                self.logger.debug(
                    "Unparseable last_updated, leaving publish date unset",
                    last_updated=raw.last_updated,
                )

        return Release(
            title=raw.title,
            comments_uri=raw.link,
            publish_date=publish_date,
            category=self.category_mapper.to_internal(raw.category),
            size_bytes=raw.size,
            grabs=raw.completed,
            description=raw.description,
            seeders=raw.seeders,
            peers=raw.seeders + raw.leechers,
            info_hash=raw.info_hash,
            magnet_uri=raw.magnet,
        )

    def build_all(self, items: list[Any], **context: Any) -> list[Release]:
        """Build Releases from a list of items, skipping malformed ones.

        Args:
            items: Raw item candidates
            **context: Extra fields for the skip diagnostics (e.g. page number)

        Returns:
            Releases for the well-formed items, in input order
        """
        releases: list[Release] = []
        for index, item in enumerate(items):
            try:
                releases.append(self.build(item))
            except ParseError as e:
                # One malformed item must not discard the rest of the payload
                items_skipped_total.inc()
                self.logger.warning(
                    "Skipping malformed item",
                    index=index,
                    error=e.message,
                    payload=e.payload_preview,
                    **context,
                )
        return releases

    def _parse_date(self, date_str: str) -> datetime | None:
        """Parse date string to datetime.

        Args:
            date_str: Date string in various formats

        Returns:
            Parsed datetime or None if parsing fails
        """
        # Try ISO format first
        try:
            return datetime.fromisoformat(date_str.replace("Z", "+00:00"))
        except ValueError:
            pass

        formats = [
            "%Y-%m-%d %H:%M:%S",
            "%d/%m/%Y %H:%M:%S",
            "%d/%m/%Y",
            "%a, %d %b %Y %H:%M:%S %z",  # RFC 2822
        ]

        for fmt in formats:
            try:
                return datetime.strptime(date_str, fmt)
            except ValueError:
                continue

        return None


def _dump(item: Any) -> str:
    try:
        return json.dumps(item, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(item)
