"""Custom exception hierarchy for gridboard."""

from __future__ import annotations


class GridboardError(Exception):
    """Base exception for all gridboard errors."""


class GridboardConfigError(GridboardError):
    """Invalid or missing configuration."""


class FeedDecodeError(GridboardError):
    """A feed frame could not be decoded into a message.

    Raised by :func:`gridboard.ingestion.decode.parse_frame`.  The consumer
    loop only ever calls :func:`~gridboard.ingestion.decode.decode_frame`,
    which logs and swallows this error so the feed stays open.
    """

    def __init__(self, message: str, *, preview: str = "") -> None:
        self.preview = preview
        super().__init__(message)


class FeedStateError(GridboardError):
    """Feed lifecycle misuse (opened twice, or opened after close)."""
