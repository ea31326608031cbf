"""Display derivation for dashboard snapshots.

Charts themselves are drawn by whatever front end consumes
:class:`DashboardView`; this module only decides what each panel shows
(points, labels, placeholders, formatted numbers).  :func:`render_text`
is a plain-text rendering used by ``scripts/watch_feed.py``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Literal

from gridboard._constants import NO_DATA_PLACEHOLDER
from gridboard.ingestion.normalize import round_decimals
from gridboard.models._base import ChartPoint
from gridboard.models.messages import Channel
from gridboard.models.status import ConnectionStatus
from gridboard.state.store import DashboardState

DASHBOARD_TITLE = "Smart Grid Monitoring Dashboard"

ChartKind = Literal["bar", "pie"]
StatusTone = Literal["ok", "alert"]


def format_number(value: int | float) -> str:
    """Format *value* with comma thousands separators (``3500`` -> ``"3,500"``)."""
    if isinstance(value, float):
        if value.is_integer():
            value = int(value)
        else:
            text = str(abs(value))
            if "e" in text:
                return str(value)
            whole, _, fraction = text.partition(".")
            sign = "-" if value < 0 else ""
            return f"{sign}{int(whole):,}.{fraction}"
    return f"{value:,}"


def percent_labels(points: Sequence[ChartPoint]) -> tuple[str, ...]:
    """Pie slice labels such as ``"North 67%"``."""
    total = sum(point.value for point in points)
    if total <= 0:
        return tuple(f"{point.name} 0%" for point in points)
    return tuple(f"{point.name} {int(round_decimals(point.value / total * 100, 0))}%" for point in points)


@dataclass(frozen=True)
class ChartPanel:
    """One chart on the dashboard."""

    title: str
    unit: str
    kind: ChartKind
    points: tuple[ChartPoint, ...]
    labels: tuple[str, ...] = ()
    placeholder: str | None = None
    received: bool = False
    """Whether the channel has had any update yet, even an empty one."""

    @property
    def has_data(self) -> bool:
        return bool(self.points)


@dataclass(frozen=True)
class DashboardView:
    """Everything a renderer needs for one frame of the dashboard."""

    status_label: str
    status_tone: StatusTone
    last_updated: str | None
    faulty_meters: str
    peak_load_total: str
    panels: tuple[ChartPanel, ...] = field(default_factory=tuple)
    title: str = DASHBOARD_TITLE


def _chart(
    title: str,
    unit: str,
    kind: ChartKind,
    points: tuple[ChartPoint, ...],
    *,
    received: bool,
    labels: tuple[str, ...] = (),
) -> ChartPanel:
    return ChartPanel(
        title=title,
        unit=unit,
        kind=kind,
        points=points,
        labels=labels,
        placeholder=None if points else NO_DATA_PLACEHOLDER,
        received=received,
    )


def format_last_update(value: datetime | None, *, tz: tzinfo | None = None) -> str | None:
    """Local wall-clock ``HH:MM:SS`` of *value*, or ``None`` before the first message."""
    if value is None:
        return None
    return value.astimezone(tz).strftime("%H:%M:%S")


def build_view(state: DashboardState, *, tz: tzinfo | None = None) -> DashboardView:
    """Derive the display view from a state snapshot."""
    status = state.status
    return DashboardView(
        status_label=status.value,
        status_tone="ok" if status == ConnectionStatus.CONNECTED else "alert",
        last_updated=format_last_update(state.last_update, tz=tz),
        faulty_meters=format_number(state.faulty_meters),
        peak_load_total=format_number(state.peak_load_total),
        panels=(
            _chart(
                "Peak Load Meters",
                "meters",
                "pie",
                state.peak_load_meters,
                received=state.has_data(Channel.PEAK_LOAD_METERS),
                labels=percent_labels(state.peak_load_meters),
            ),
            _chart(
                "Energy Consumption by Region",
                "MWh",
                "bar",
                state.energy_by_region,
                received=state.has_data(Channel.ENERGY_BY_REGION),
            ),
            _chart(
                "Average Energy Consumption by Building Type",
                "kWh",
                "bar",
                state.energy_by_building_type,
                received=state.has_data(Channel.ENERGY_BY_BUILDING_TYPE),
            ),
        ),
    )


def render_text(view: DashboardView) -> str:
    """Render *view* as plain text, one panel after another."""
    header = f"{view.title}  [{view.status_label}]"
    if view.last_updated is not None:
        header += f"  Last updated: {view.last_updated}"

    lines = [
        header,
        f"Faulty Meters: {view.faulty_meters}",
        f"Peak Load Meters: {view.peak_load_total}",
    ]
    for panel in view.panels:
        lines.append("")
        lines.append(f"{panel.title} ({panel.unit})")
        if panel.placeholder is not None:
            suffix = "" if panel.received else " (awaiting first update)"
            lines.append(f"  {panel.placeholder}{suffix}")
            continue
        if panel.labels:
            lines.extend(f"  {label}" for label in panel.labels)
        else:
            lines.extend(f"  {point.name}: {format_number(point.value)}" for point in panel.points)
    return "\n".join(lines)
