"""Connection status of the live feed."""

from __future__ import annotations

from enum import StrEnum


class ConnectionStatus(StrEnum):
    """Lifecycle states of the feed connection.

    Values are the labels shown on the dashboard status badge.
    """

    CONNECTING = "Connecting..."
    CONNECTED = "Connected"
    DISCONNECTED = "Disconnected"
    ERROR = "Error connecting"
