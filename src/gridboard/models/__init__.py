"""Data models for feed messages and display aggregates."""

from gridboard.models._base import ChartPoint, FeedRecord
from gridboard.models.messages import (
    FEED_MESSAGE_ADAPTER,
    Channel,
    EnergyByBuildingTypeMessage,
    EnergyByRegionMessage,
    FaultyMetersMessage,
    FeedMessage,
    PeakLoadMetersMessage,
    UnknownMessage,
)
from gridboard.models.records import BuildingTypeEnergyRecord, MeterCountRecord, MeterRecord, RegionEnergyRecord
from gridboard.models.status import ConnectionStatus

__all__ = [
    "BuildingTypeEnergyRecord",
    "Channel",
    "ChartPoint",
    "ConnectionStatus",
    "EnergyByBuildingTypeMessage",
    "EnergyByRegionMessage",
    "FEED_MESSAGE_ADAPTER",
    "FaultyMetersMessage",
    "FeedMessage",
    "FeedRecord",
    "MeterCountRecord",
    "MeterRecord",
    "PeakLoadMetersMessage",
    "RegionEnergyRecord",
    "UnknownMessage",
]
