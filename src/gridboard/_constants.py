"""Shared constants for gridboard."""

from __future__ import annotations

DEFAULT_FEED_URL = "ws://localhost:8080/ws"

#: Label used when a record carries no region or building type.
UNKNOWN_LABEL = "Unknown"

#: Shown by the view for chart aggregates that have no points.
NO_DATA_PLACEHOLDER = "No data available"

#: Region energy arrives in kWh and is displayed in MWh.
KWH_PER_MWH = 1000

#: Decimal places kept for building-type averages (kWh).
BUILDING_TYPE_DECIMALS = 2

ALLOWED_FEED_SCHEMES = frozenset({"ws", "wss"})
