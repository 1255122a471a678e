"""Shared fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from prometheus_client import REGISTRY

import corsarr.core.metrics  # noqa: F401  registers the module-level collectors

# Collectors present before any app is created; everything else comes from an
# Instrumentator and is dropped between tests
_BASE_COLLECTORS = set(REGISTRY._collector_to_names)


def _raw_item(index: int = 0, **overrides: Any) -> dict[str, Any]:
    item: dict[str, Any] = {
        "title": f"Release {index}",
        "link": f"https://corsaro.red/torrent/{index}",
        "last_updated": "2024-03-01T10:20:30Z",
        "category": 2,
        "size": 1_073_741_824,
        "completed": 10,
        "description": "ITA AC3",
        "seeders": 3,
        "leechers": 1,
        "hash": f"{index:040x}",
        "magnet": f"magnet:?xt=urn:btih:{index:040x}",
    }
    item.update(overrides)
    return item


@pytest.fixture
def raw_item() -> Callable[..., dict[str, Any]]:
    """Factory for a well-formed corsaro.red item; keyword overrides replace fields."""
    return _raw_item


@pytest.fixture
def page_of() -> Callable[..., list[dict[str, Any]]]:
    """Factory for ``count`` well-formed items starting at ``start``."""

    def factory(count: int, start: int = 0) -> list[dict[str, Any]]:
        return [_raw_item(start + i) for i in range(count)]

    return factory


@pytest.fixture(autouse=True)
def reset_prometheus_registry() -> None:
    """Reset Prometheus registry before each test to avoid duplicate metric errors."""
    for collector in list(REGISTRY._collector_to_names):
        if collector not in _BASE_COLLECTORS:
            REGISTRY.unregister(collector)
