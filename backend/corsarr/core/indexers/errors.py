"""Error types raised while querying an indexer."""

from __future__ import annotations

# Raw payloads can be large HTML error pages; keep messages readable
_PAYLOAD_PREVIEW_CHARS = 200


class IndexerError(Exception):
    """Base class for indexer query failures."""


class RemoteError(IndexerError):
    """The remote service failed the request.

    Raised when the transport fails outright (connection error, timeout,
    non-2xx status) or when the service answers with an explicit
    ``"ok": false`` application error. Aborts the whole query.
    """

    def __init__(self, message: str, payload: str | None = None) -> None:
        super().__init__(message)
        self.payload = payload


class ParseError(IndexerError):
    """A payload did not have the shape expected for its mode.

    Carries the offending raw payload text for diagnostics.
    """

    def __init__(self, message: str, payload: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.payload = payload

    @property
    def payload_preview(self) -> str:
        if len(self.payload) <= _PAYLOAD_PREVIEW_CHARS:
            return self.payload
        return self.payload[:_PAYLOAD_PREVIEW_CHARS] + "..."

    def __str__(self) -> str:
        if not self.payload:
            return self.message
        return f"{self.message} (payload: {self.payload_preview})"
