"""Category mapping between corsaro.red native ids and Torznab categories."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import structlog

logger = structlog.get_logger("corsarr.indexers.categories")


class TorznabCategory:
    """Torznab/Newznab category codes used as the internal taxonomy."""

    MOVIES = 2000
    AUDIO = 3000
    PC = 4000
    PC_GAMES = 4050
    TV = 5000
    TV_ANIME = 5070
    OTHER = 8000

    NAMES = {
        MOVIES: "Movies",
        AUDIO: "Audio",
        PC: "PC",
        PC_GAMES: "PC/Games",
        TV: "TV",
        TV_ANIME: "TV/Anime",
        OTHER: "Other",
    }

    @staticmethod
    def parent(code: int) -> int:
        """Return the top-level category of a subcategory (e.g. 2040 -> 2000)."""
        return code - code % 1000

    @classmethod
    def name_of(cls, code: int) -> str:
        return cls.NAMES.get(code, cls.NAMES.get(cls.parent(code), "Unknown"))


# Sent as the category filter when no category restriction applies
ALL_CATEGORIES = "0"


@dataclass(frozen=True)
class CategoryMapping:
    """One row of the category table."""

    native_id: int
    internal_code: int
    description: str


# TODO: the site returns ids outside this table (e.g. 4); map them once the site documents them
CORSARO_CATEGORIES: tuple[CategoryMapping, ...] = (
    CategoryMapping(0, TorznabCategory.OTHER, "All"),
    CategoryMapping(1, TorznabCategory.TV, "TV"),
    CategoryMapping(2, TorznabCategory.MOVIES, "Movies"),
    CategoryMapping(3, TorznabCategory.AUDIO, "Music"),
    CategoryMapping(5, TorznabCategory.PC, "Software"),
    CategoryMapping(6, TorznabCategory.PC_GAMES, "Games"),
    CategoryMapping(7, TorznabCategory.TV_ANIME, "Anime"),
)


class CategoryMapper:
    """Bidirectional, read-only lookup between native ids and internal codes."""

    def __init__(self, mappings: Iterable[CategoryMapping] = CORSARO_CATEGORIES) -> None:
        self._mappings = tuple(mappings)
        self._by_native: dict[int, CategoryMapping] = {}
        for mapping in self._mappings:
            if mapping.native_id in self._by_native:
                raise ValueError(f"Duplicate native category id: {mapping.native_id}")
            self._by_native[mapping.native_id] = mapping

    @property
    def mappings(self) -> tuple[CategoryMapping, ...]:
        return self._mappings

    def to_internal(self, native_id: int) -> int:
        """Map a native category id to its internal code.

        Unknown ids fall back to ``TorznabCategory.OTHER`` instead of failing.
        """
        mapping = self._by_native.get(native_id)
        if mapping is None:
            logger.debug("Unmapped native category", native_id=native_id)
            return TorznabCategory.OTHER
        return mapping.internal_code

    def to_native_filter(self, internal_codes: Iterable[int]) -> str:
        """Build the ``category`` request parameter for a set of internal codes.

        Args:
            internal_codes: Internal codes requested by the caller. A parent
                category also matches its mapped subcategories (TV includes
                TV/Anime). A subcategory with no mapping of its own matches
                its parent category only.

        Returns:
            Comma-joined native ids in table order, or ``ALL_CATEGORIES`` when
            the input is empty or nothing in it maps to a native id.
        """
        codes = set(internal_codes)
        if not codes:
            return ALL_CATEGORIES

        mapped_codes = {mapping.internal_code for mapping in self._mappings}
        wanted: set[int] = set()
        for code in codes:
            parent = TorznabCategory.parent(code)
            if code == parent:
                wanted.add(code)
                wanted.update(c for c in mapped_codes if TorznabCategory.parent(c) == code)
            elif code in mapped_codes:
                wanted.add(code)
            else:
                wanted.add(parent)

        native_ids = [
            str(mapping.native_id)
            for mapping in self._mappings
            if mapping.internal_code in wanted
        ]
        if not native_ids:
            logger.debug("No native category for requested codes", codes=sorted(codes))
            return ALL_CATEGORIES
        return ",".join(native_ids)
