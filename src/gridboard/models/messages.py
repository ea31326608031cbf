"""Tagged feed message models.

Each frame of the feed is one JSON object with a ``type`` tag and, for
data-bearing tags, a ``data`` array.  :data:`FeedMessage` is a pydantic
discriminated union over the four known tags plus
:class:`UnknownMessage`, so anything that parses as a JSON object
validates into exactly one variant.

A ``data`` value that is missing or not an array validates to ``None``,
which downstream means "no update" for the channel.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter, field_validator, model_validator

from gridboard.models.records import BuildingTypeEnergyRecord, MeterCountRecord, MeterRecord, RegionEnergyRecord


class Channel(StrEnum):
    """Message tags, one per display aggregate."""

    ENERGY_BY_REGION = "energyByRegion"
    FAULTY_METERS = "faultyMeters"
    ENERGY_BY_BUILDING_TYPE = "energyByBuildingType"
    PEAK_LOAD_METERS = "peakLoadMeters"


_KNOWN_TAGS: frozenset[str] = frozenset(channel.value for channel in Channel)
_UNKNOWN_TAG = "unknown"


class _FeedMessageBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    raw: dict[str, Any] = Field(default_factory=dict)
    """Decoded JSON object as received."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        merged = dict(values)
        merged["raw"] = dict(values)
        return merged

    @field_validator("data", mode="before", check_fields=False)
    @classmethod
    def _array_or_none(cls, value: Any) -> Any:
        return value if isinstance(value, list) else None


class EnergyByRegionMessage(_FeedMessageBase):
    channel: ClassVar[Channel] = Channel.ENERGY_BY_REGION

    type: Literal["energyByRegion"] = "energyByRegion"
    data: tuple[RegionEnergyRecord, ...] | None = None


class FaultyMetersMessage(_FeedMessageBase):
    channel: ClassVar[Channel] = Channel.FAULTY_METERS

    type: Literal["faultyMeters"] = "faultyMeters"
    data: tuple[MeterCountRecord, ...] | None = None


class EnergyByBuildingTypeMessage(_FeedMessageBase):
    channel: ClassVar[Channel] = Channel.ENERGY_BY_BUILDING_TYPE

    type: Literal["energyByBuildingType"] = "energyByBuildingType"
    data: tuple[BuildingTypeEnergyRecord, ...] | None = None


class PeakLoadMetersMessage(_FeedMessageBase):
    channel: ClassVar[Channel] = Channel.PEAK_LOAD_METERS

    type: Literal["peakLoadMeters"] = "peakLoadMeters"
    data: tuple[MeterRecord, ...] | None = None


class UnknownMessage(_FeedMessageBase):
    """Any object whose ``type`` is missing or not a known tag."""

    channel: ClassVar[Channel | None] = None

    type: str | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_tag(cls, value: Any) -> str | None:
        if value is None or isinstance(value, str):
            return value
        return str(value)


def _message_tag(value: Any) -> str:
    tag = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    if isinstance(tag, str) and tag in _KNOWN_TAGS:
        return tag
    return _UNKNOWN_TAG


FeedMessage = Annotated[
    Annotated[EnergyByRegionMessage, Tag(Channel.ENERGY_BY_REGION.value)]
    | Annotated[FaultyMetersMessage, Tag(Channel.FAULTY_METERS.value)]
    | Annotated[EnergyByBuildingTypeMessage, Tag(Channel.ENERGY_BY_BUILDING_TYPE.value)]
    | Annotated[PeakLoadMetersMessage, Tag(Channel.PEAK_LOAD_METERS.value)]
    | Annotated[UnknownMessage, Tag(_UNKNOWN_TAG)],
    Discriminator(_message_tag),
]

FEED_MESSAGE_ADAPTER: TypeAdapter[FeedMessage] = TypeAdapter(FeedMessage)
