"""Feed record models.

Records arrive with snake_case keys straight from the telemetry
backend (``region``, ``building_type``, ``_value``).  Every field is
optional: absent, ``null`` or non-numeric values end up as ``None`` and
the projectors substitute ``0`` or ``"Unknown"``.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from gridboard.ingestion.normalize import safe_float, safe_label
from gridboard.models._base import FeedRecord


class _ValueRecord(FeedRecord):
    value: float | None = Field(default=None, validation_alias=AliasChoices("_value"))
    """Measured value (kWh for energy channels, a count for faulty meters)."""

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: Any) -> float | None:
        return safe_float(value)


class _RegionRecord(FeedRecord):
    region: str | None = None

    @field_validator("region", mode="before")
    @classmethod
    def _coerce_region(cls, value: Any) -> str | None:
        return safe_label(value)


class RegionEnergyRecord(_RegionRecord, _ValueRecord):
    """Total energy consumed in one region (kWh)."""


class BuildingTypeEnergyRecord(_ValueRecord):
    """Average energy consumed by one building type (kWh)."""

    building_type: str | None = None

    @field_validator("building_type", mode="before")
    @classmethod
    def _coerce_building_type(cls, value: Any) -> str | None:
        return safe_label(value)


class MeterCountRecord(_ValueRecord):
    """A single count, e.g. the number of faulty meters."""


class MeterRecord(_RegionRecord):
    """One meter currently at peak load."""
