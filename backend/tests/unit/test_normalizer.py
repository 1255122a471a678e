"""Tests for building Releases from raw items."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from corsarr.core.indexers.categories import TorznabCategory
from corsarr.core.indexers.errors import ParseError
from corsarr.core.search.models import Release
from corsarr.core.search.normalizer import ReleaseBuilder


@pytest.fixture
def builder() -> ReleaseBuilder:
    return ReleaseBuilder()


def test_build_full_item(builder: ReleaseBuilder, raw_item) -> None:
    release = builder.build(raw_item(7))

    assert release.title == "Release 7"
    assert release.comments_uri == "https://corsaro.red/torrent/7"
    assert release.publish_date == datetime(2024, 3, 1, 10, 20, 30, tzinfo=UTC)
    assert release.category == TorznabCategory.MOVIES
    assert release.size_bytes == 1_073_741_824
    assert release.grabs == 10
    assert release.description == "ITA AC3"
    assert release.seeders == 3
    assert release.peers == 4
    assert release.info_hash == f"{7:040x}"
    assert release.magnet_uri == f"magnet:?xt=urn:btih:{7:040x}"


def test_guid_is_comments_uri(builder: ReleaseBuilder, raw_item) -> None:
    release = builder.build(raw_item(1))
    assert release.guid == release.comments_uri
    assert release.model_dump()["guid"] == "https://corsaro.red/torrent/1"


def test_minimal_item_leaves_optionals_unset(builder: ReleaseBuilder) -> None:
    item = {
        "title": "X",
        "link": "http://x/",
        "category": 2,
        "completed": 10,
        "seeders": 3,
        "leechers": 1,
        "magnet": "magnet:?x",
    }
    release = builder.build(item)

    assert release.title == "X"
    assert release.category == TorznabCategory.MOVIES
    assert release.grabs == 10
    assert release.peers == 4
    assert release.publish_date is None
    assert release.size_bytes is None
    assert release.description is None
    assert release.info_hash is None


def test_null_optionals_are_unset(builder: ReleaseBuilder, raw_item) -> None:
    release = builder.build(raw_item(1, size=None, hash=None, last_updated=None, description=None))
    assert release.size_bytes is None
    assert release.info_hash is None
    assert release.publish_date is None
    assert release.description is None


def test_unmapped_category_is_other(builder: ReleaseBuilder, raw_item) -> None:
    assert builder.build(raw_item(1, category=4)).category == TorznabCategory.OTHER


def test_numeric_strings_are_accepted(builder: ReleaseBuilder, raw_item) -> None:
    release = builder.build(raw_item(1, seeders="5", leechers="2", category="1"))
    assert release.seeders == 5
    assert release.peers == 7
    assert release.category == TorznabCategory.TV


@pytest.mark.parametrize(
    "missing", ["title", "link", "category", "completed", "seeders", "leechers", "magnet"]
)
def test_missing_required_field(builder: ReleaseBuilder, raw_item, missing: str) -> None:
    item = raw_item(1)
    del item[missing]
    with pytest.raises(ParseError) as exc_info:
        builder.build(item)
    assert missing in exc_info.value.message
    assert '"title"' in exc_info.value.payload or missing == "title"


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("seeders", "many"),
        ("leechers", -1),
        ("category", "movies"),
        ("title", 12),
        ("link", "not a uri"),
        ("magnet", ""),
    ],
)
def test_mistyped_field(builder: ReleaseBuilder, raw_item, field: str, value) -> None:
    with pytest.raises(ParseError):
        builder.build(raw_item(1, **{field: value}))


def test_non_object_item(builder: ReleaseBuilder) -> None:
    with pytest.raises(ParseError, match="Expected a JSON object"):
        builder.build(["title", "link"])


def test_unparseable_date_leaves_publish_date_unset(builder: ReleaseBuilder, raw_item) -> None:
    assert builder.build(raw_item(1, last_updated="yesterday")).publish_date is None


def test_italian_date_format(builder: ReleaseBuilder, raw_item) -> None:
    release = builder.build(raw_item(1, last_updated="05/02/2024 21:00:00"))
    assert release.publish_date == datetime(2024, 2, 5, 21, 0, 0)


def test_build_all_skips_malformed_items(builder: ReleaseBuilder, raw_item) -> None:
    items = [raw_item(1), {"title": "broken"}, "garbage", raw_item(2)]
    releases = builder.build_all(items, page=1)
    assert [r.title for r in releases] == ["Release 1", "Release 2"]


def test_release_is_immutable(builder: ReleaseBuilder, raw_item) -> None:
    release = builder.build(raw_item(1))
    with pytest.raises(ValidationError):
        release.title = "changed"  # type: ignore[misc]


def test_release_rejects_peers_below_seeders() -> None:
    with pytest.raises(ValidationError):
        Release(
            title="X",
            comments_uri="http://x/",
            category=TorznabCategory.OTHER,
            grabs=0,
            seeders=5,
            peers=4,
            magnet_uri="magnet:?x",
        )
