"""Dashboard view-model store.

This is the only component allowed to change dashboard state.  State is
an immutable :class:`DashboardState`; every setter swaps in a new
snapshot and notifies listeners with it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from gridboard.models._base import ChartPoint
from gridboard.models.messages import Channel
from gridboard.models.status import ConnectionStatus
from gridboard.state.events import ChannelUpdate

_logger = logging.getLogger(__name__)

StateListener = Callable[["DashboardState"], None]

_CHANNEL_FIELDS: dict[Channel, str] = {
    Channel.ENERGY_BY_REGION: "energy_by_region",
    Channel.ENERGY_BY_BUILDING_TYPE: "energy_by_building_type",
    Channel.PEAK_LOAD_METERS: "peak_load_meters",
    Channel.FAULTY_METERS: "faulty_meters",
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DashboardState(BaseModel):
    """Snapshot of everything the dashboard displays."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    energy_by_region: tuple[ChartPoint, ...] = ()
    """Energy per region in MWh."""
    energy_by_building_type: tuple[ChartPoint, ...] = ()
    """Average energy per building type in kWh."""
    peak_load_meters: tuple[ChartPoint, ...] = ()
    """Meters at peak load, counted per region."""
    faulty_meters: int = 0
    status: ConnectionStatus = ConnectionStatus.CONNECTING
    last_update: datetime | None = None
    """Wall-clock time of the most recent decoded message."""
    received: frozenset[Channel] = frozenset()
    """Channels that have had at least one update."""

    @property
    def peak_load_total(self) -> int:
        """Total number of meters at peak load across all regions."""
        return int(sum(point.value for point in self.peak_load_meters))

    def has_data(self, channel: Channel) -> bool:
        return channel in self.received


class DashboardStore:
    """Owner of the dashboard view-model.

    Aggregates are replaced wholesale by the per-channel setters; nothing
    is merged or kept as history.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._state = DashboardState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> DashboardState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener* for every new snapshot; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def clear_listeners(self) -> None:
        self._listeners.clear()

    def _replace(self, **changes: Any) -> None:
        self._state = self._state.model_copy(update=changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                _logger.exception("Dashboard state listener failed")

    def _channel_changes(self, channel: Channel, value: tuple[ChartPoint, ...] | int) -> dict[str, Any]:
        changes: dict[str, Any] = {"received": self._state.received | {channel}}
        if channel == Channel.FAULTY_METERS:
            changes["faulty_meters"] = int(value)  # type: ignore[arg-type]
        else:
            changes[_CHANNEL_FIELDS[channel]] = tuple(value)  # type: ignore[arg-type]
        return changes

    def set_energy_by_region(self, points: Iterable[ChartPoint]) -> None:
        self._replace(**self._channel_changes(Channel.ENERGY_BY_REGION, tuple(points)))

    def set_energy_by_building_type(self, points: Iterable[ChartPoint]) -> None:
        self._replace(**self._channel_changes(Channel.ENERGY_BY_BUILDING_TYPE, tuple(points)))

    def set_peak_load_meters(self, points: Iterable[ChartPoint]) -> None:
        self._replace(**self._channel_changes(Channel.PEAK_LOAD_METERS, tuple(points)))

    def set_faulty_meters(self, count: int) -> None:
        self._replace(**self._channel_changes(Channel.FAULTY_METERS, count))

    def set_status(self, status: ConnectionStatus) -> None:
        if status == self._state.status:
            return
        _logger.info("Feed status %s -> %s", self._state.status.name, status.name)
        self._replace(status=status)

    def mark_updated(self, at: datetime | None = None) -> None:
        """Record that a message was decoded without touching any aggregate."""
        self._replace(last_update=at if at is not None else self._clock())

    def apply(self, update: ChannelUpdate, *, stamp: bool = False) -> None:
        """Apply a projected channel update.

        With ``stamp=True`` the last-update time moves to now in the same
        snapshot, so listeners never see one without the other.
        """
        value: tuple[ChartPoint, ...] | int
        if update.channel == Channel.FAULTY_METERS:
            value = update.count or 0
        else:
            value = update.points
        changes = self._channel_changes(update.channel, value)
        if stamp:
            changes["last_update"] = self._clock()
        self._replace(**changes)
