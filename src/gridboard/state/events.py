"""Normalized channel updates.

The projectors convert decoded feed messages into these updates. Only
the state/store layer is allowed to apply them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from gridboard.models._base import ChartPoint
from gridboard.models.messages import Channel


class ChannelUpdate(BaseModel):
    """A wholesale replacement of one display aggregate."""

    model_config = ConfigDict(frozen=True)

    channel: Channel
    points: tuple[ChartPoint, ...] = ()
    count: int | None = Field(default=None, description="Set only for the faulty-meter channel")

    @model_validator(mode="after")
    def _check_payload_shape(self) -> ChannelUpdate:
        if self.channel == Channel.FAULTY_METERS:
            if self.count is None:
                raise ValueError("faultyMeters updates carry a count")
        elif self.count is not None:
            raise ValueError(f"{self.channel} updates carry points, not a count")
        return self
