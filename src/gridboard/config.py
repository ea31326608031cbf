"""Client configuration for gridboard."""

from __future__ import annotations

import dataclasses
import os
from typing import Any
from urllib.parse import urlsplit

from gridboard._constants import ALLOWED_FEED_SCHEMES, DEFAULT_FEED_URL
from gridboard.exceptions import GridboardConfigError


def _env_float(name: str, value: str) -> float | None:
    normalized = value.strip().lower()
    if normalized in {"", "none", "off", "0"}:
        return None
    try:
        return float(normalized)
    except ValueError as exc:
        raise GridboardConfigError(f"{name} must be a number, got {value!r}") from exc


def _env_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise GridboardConfigError(f"{name} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class DashboardConfig:
    """Client configuration.

    Parameters
    ----------
    feed_url : str
        Websocket address of the telemetry feed (``ws://`` or ``wss://``).
    heartbeat : float or None
        Seconds between websocket pings.  ``None`` disables pings; the
        feed itself never expects any traffic from the client.
    connect_timeout : float or None
        Seconds allowed for the websocket handshake.  ``None`` waits
        indefinitely.
    max_msg_size : int
        Largest accepted frame in bytes.  ``0`` disables the limit.
    log_preview_chars : int
        How much of a malformed frame is quoted in warning logs.
    """

    feed_url: str = DEFAULT_FEED_URL
    heartbeat: float | None = None
    connect_timeout: float | None = 10.0
    max_msg_size: int = 4 * 1024 * 1024
    log_preview_chars: int = 120

    def __post_init__(self) -> None:
        scheme = urlsplit(self.feed_url).scheme.lower()
        if scheme not in ALLOWED_FEED_SCHEMES:
            raise GridboardConfigError(f"feed_url must use ws:// or wss://, got {self.feed_url!r}")
        if self.heartbeat is not None and self.heartbeat <= 0:
            raise GridboardConfigError("heartbeat must be positive or None")
        if self.connect_timeout is not None and self.connect_timeout <= 0:
            raise GridboardConfigError("connect_timeout must be positive or None")
        if self.max_msg_size < 0:
            raise GridboardConfigError("max_msg_size must not be negative")
        if self.log_preview_chars < 0:
            raise GridboardConfigError("log_preview_chars must not be negative")

    @classmethod
    def from_env(cls, **overrides: Any) -> DashboardConfig:
        """Create configuration from environment variables.

        Reads ``GRIDBOARD_FEED_URL``, ``GRIDBOARD_HEARTBEAT``,
        ``GRIDBOARD_CONNECT_TIMEOUT``, ``GRIDBOARD_MAX_MSG_SIZE`` and
        ``GRIDBOARD_LOG_PREVIEW_CHARS``.  Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        DashboardConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        url_env = env.get("GRIDBOARD_FEED_URL")
        if url_env is not None and url_env.strip():
            config_kwargs["feed_url"] = url_env.strip()

        heartbeat_env = env.get("GRIDBOARD_HEARTBEAT")
        if heartbeat_env is not None:
            config_kwargs["heartbeat"] = _env_float("GRIDBOARD_HEARTBEAT", heartbeat_env)

        timeout_env = env.get("GRIDBOARD_CONNECT_TIMEOUT")
        if timeout_env is not None:
            config_kwargs["connect_timeout"] = _env_float("GRIDBOARD_CONNECT_TIMEOUT", timeout_env)

        size_env = env.get("GRIDBOARD_MAX_MSG_SIZE")
        if size_env is not None:
            config_kwargs["max_msg_size"] = _env_int("GRIDBOARD_MAX_MSG_SIZE", size_env)

        preview_env = env.get("GRIDBOARD_LOG_PREVIEW_CHARS")
        if preview_env is not None:
            config_kwargs["log_preview_chars"] = _env_int("GRIDBOARD_LOG_PREVIEW_CHARS", preview_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
