"""Base models for feed records and display points.

Every feed record model inherits from :class:`FeedRecord` which
provides:

* tolerance for array items that are not JSON objects (they are read
  as an empty record, so every field takes its default);
* stripping of ``null`` and empty-string values so the field default
  is used instead;
* a ``raw`` dict that captures the original item.

Display output uses :class:`ChartPoint`, the ``{name, value}`` pair a
charting library consumes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FeedRecord(BaseModel):
    """Base for loosely typed records carried in a message ``data`` array."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original record as received."""

    @model_validator(mode="before")
    @classmethod
    def _clean_feed_values(cls, values: Any) -> Any:
        """Coerce non-object items to ``{}``, drop nulls and stash the raw record."""
        if isinstance(values, BaseModel):
            return values
        if not isinstance(values, dict):
            return {"raw": {}}

        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if value == "":
                continue
            cleaned[key] = value

        cleaned["raw"] = dict(values)
        return cleaned


class ChartPoint(BaseModel):
    """One ``{name, value}`` pair of a display aggregate."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    value: int | float
