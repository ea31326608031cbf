"""Per-channel projectors.

Pure functions from a message's record array to a display aggregate,
plus :func:`project_message` which dispatches on the message variant
and wraps the result in a :class:`gridboard.state.events.ChannelUpdate`.
None of the projectors raise for empty input; missing values become
``0`` and missing labels become ``"Unknown"``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from gridboard._constants import BUILDING_TYPE_DECIMALS, KWH_PER_MWH, UNKNOWN_LABEL
from gridboard.ingestion.normalize import capitalize_first, round_decimals, round_half_up
from gridboard.models._base import ChartPoint
from gridboard.models.messages import (
    EnergyByBuildingTypeMessage,
    EnergyByRegionMessage,
    FaultyMetersMessage,
    FeedMessage,
    PeakLoadMetersMessage,
    UnknownMessage,
)
from gridboard.models.records import BuildingTypeEnergyRecord, MeterCountRecord, MeterRecord, RegionEnergyRecord
from gridboard.state.events import ChannelUpdate

_logger = logging.getLogger(__name__)


def project_energy_by_region(records: Iterable[RegionEnergyRecord]) -> tuple[ChartPoint, ...]:
    """One point per record, kWh converted to whole MWh."""
    return tuple(
        ChartPoint(
            name=record.region or UNKNOWN_LABEL,
            value=round_half_up((record.value or 0) / KWH_PER_MWH),
        )
        for record in records
    )


def project_faulty_meters(records: Iterable[MeterCountRecord]) -> int:
    """The first record's value; later records are ignored."""
    first = next(iter(records), None)
    if first is None or first.value is None:
        return 0
    return int(first.value)


def project_energy_by_building_type(records: Iterable[BuildingTypeEnergyRecord]) -> tuple[ChartPoint, ...]:
    return tuple(
        ChartPoint(
            name=capitalize_first(record.building_type or UNKNOWN_LABEL),
            value=round_decimals(record.value or 0, BUILDING_TYPE_DECIMALS),
        )
        for record in records
    )


def project_peak_load_meters(records: Iterable[MeterRecord]) -> tuple[ChartPoint, ...]:
    """Count meters per region, groups in first-seen order."""
    counts: dict[str, int] = {}
    for record in records:
        region = record.region or UNKNOWN_LABEL
        counts[region] = counts.get(region, 0) + 1
    return tuple(ChartPoint(name=region, value=count) for region, count in counts.items())


def project_message(message: FeedMessage) -> ChannelUpdate | None:
    """Project a decoded message into a channel update.

    Returns ``None`` for unknown tags and for known tags whose ``data``
    was missing or not an array.
    """
    if isinstance(message, UnknownMessage):
        _logger.info("Unknown message type: %s", message.type)
        return None

    if message.data is None:
        _logger.debug("Ignoring %s message without a data array", message.type)
        return None

    if isinstance(message, EnergyByRegionMessage):
        return ChannelUpdate(channel=message.channel, points=project_energy_by_region(message.data))
    if isinstance(message, FaultyMetersMessage):
        return ChannelUpdate(channel=message.channel, count=project_faulty_meters(message.data))
    if isinstance(message, EnergyByBuildingTypeMessage):
        return ChannelUpdate(channel=message.channel, points=project_energy_by_building_type(message.data))
    if isinstance(message, PeakLoadMetersMessage):
        return ChannelUpdate(channel=message.channel, points=project_peak_load_meters(message.data))
    return None
