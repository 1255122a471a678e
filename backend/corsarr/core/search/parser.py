"""Decoding and shape validation of corsaro.red API payloads."""

from __future__ import annotations

import json
from typing import Any

import structlog

from corsarr.core.indexers.errors import ParseError, RemoteError

logger = structlog.get_logger("corsarr.search.parser")


def _is_false(value: Any) -> bool:
    if isinstance(value, bool):
        return value is False
    if isinstance(value, int):
        return value == 0
    if isinstance(value, str):
        return value.strip().lower() == "false"
    return False


class ResponseParser:
    """Unwraps raw payloads into lists of item candidates.

    The API answers with two shapes: the ``latests`` endpoint returns a bare
    array, the ``search`` endpoint returns an object with a ``results`` array.
    Either endpoint may instead answer ``{"ok": false, ...}``.
    """

    def decode(self, payload: str | bytes) -> Any:
        """Decode JSON text and surface server-side application errors.

        Raises:
            RemoteError: The payload is an object with ``ok`` set to false
            ParseError: The payload is not valid JSON
        """
        text = self._text(payload)
        try:
            data = json.loads(text)
        except ValueError as e:
            raise ParseError(f"Invalid JSON response: {e}", text) from e

        if isinstance(data, dict) and "ok" in data and _is_false(data["ok"]):
            logger.warning("Server reported an error", payload=text[:200])
            raise RemoteError("Server error", payload=text)
        return data

    def parse_feed(self, payload: str | bytes) -> list[Any]:
        """Parse the latest-items feed, which must be a top-level array."""
        data = self.decode(payload)
        if not isinstance(data, list):
            raise ParseError(
                f"Expected a JSON array, got {type(data).__name__}", self._text(payload)
            )
        return data

    def parse_page(self, payload: str | bytes) -> list[Any]:
        """Parse one search page, which must be an object with a ``results`` array."""
        data = self.decode(payload)
        if not isinstance(data, dict):
            raise ParseError(
                f"Expected a JSON object, got {type(data).__name__}", self._text(payload)
            )
        if "results" not in data:
            raise ParseError("Error invalid JSON response: missing 'results'", self._text(payload))

        results = data["results"]
        if not isinstance(results, list):
            raise ParseError(
                f"Expected 'results' to be an array, got {type(results).__name__}",
                self._text(payload),
            )
        return results

    @staticmethod
    def _text(payload: str | bytes) -> str:
        if isinstance(payload, bytes):
            return payload.decode("utf-8", errors="replace")
        return payload
