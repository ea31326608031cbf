"""Feed frame decoding.

Turns one raw websocket text frame into a :data:`gridboard.models.FeedMessage`.
:func:`parse_frame` raises :class:`gridboard.exceptions.FeedDecodeError`;
:func:`decode_frame` is the boundary used by the consumer loop and never
raises.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from gridboard.exceptions import FeedDecodeError
from gridboard.models.messages import FEED_MESSAGE_ADAPTER, FeedMessage

_logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_CHARS = 120


def preview_frame(frame: str | bytes, *, max_chars: int = DEFAULT_PREVIEW_CHARS) -> str:
    """Return a short single-line excerpt of *frame* suitable for logs."""
    if isinstance(frame, bytes):
        text = frame.decode("utf-8", errors="replace")
    else:
        text = frame
    text = " ".join(text.split())
    if len(text) > max_chars:
        return f"{text[:max_chars]}…<truncated>"
    return text


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def parse_frame(frame: str | bytes) -> FeedMessage:
    """Parse a raw frame into a tagged feed message.

    Raises
    ------
    FeedDecodeError
        When the frame is not valid UTF-8, not valid JSON, uses
        ``NaN``/``Infinity`` constants, or is not a JSON object.
    """
    if isinstance(frame, bytes):
        try:
            frame = frame.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FeedDecodeError("Frame is not valid UTF-8", preview=preview_frame(frame)) from exc

    try:
        parsed = json.loads(frame, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        raise FeedDecodeError(f"Frame is not valid JSON: {exc}", preview=preview_frame(frame)) from exc

    if not isinstance(parsed, dict):
        raise FeedDecodeError(
            f"Frame decoded to {type(parsed).__name__}, expected an object",
            preview=preview_frame(frame),
        )

    try:
        return FEED_MESSAGE_ADAPTER.validate_python(parsed)
    except ValidationError as exc:
        raise FeedDecodeError(f"Frame failed validation: {exc}", preview=preview_frame(frame)) from exc


def decode_frame(frame: str | bytes, *, preview_chars: int = DEFAULT_PREVIEW_CHARS) -> FeedMessage | None:
    """Decode a frame, logging and discarding it when malformed."""
    try:
        message = parse_frame(frame)
    except FeedDecodeError as exc:
        _logger.warning("Discarding malformed feed frame: %s (%s)", exc, preview_frame(frame, max_chars=preview_chars))
        _logger.debug("Feed frame decode failure", exc_info=True)
        return None

    _logger.debug("Received message type=%s", message.type)
    return message
