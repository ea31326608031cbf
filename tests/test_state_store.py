from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from gridboard.models._base import ChartPoint
from gridboard.models.messages import Channel
from gridboard.models.status import ConnectionStatus
from gridboard.state.events import ChannelUpdate
from gridboard.state.store import DashboardState, DashboardStore


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def test_initial_state_is_empty_and_connecting() -> None:
    state = DashboardStore().state

    assert state.energy_by_region == ()
    assert state.energy_by_building_type == ()
    assert state.peak_load_meters == ()
    assert state.faulty_meters == 0
    assert state.status == ConnectionStatus.CONNECTING
    assert state.last_update is None
    assert not state.has_data(Channel.ENERGY_BY_REGION)


def test_setters_replace_aggregate_wholesale() -> None:
    store = DashboardStore()

    store.set_energy_by_region([ChartPoint(name="North", value=1), ChartPoint(name="South", value=2)])
    store.set_energy_by_region([ChartPoint(name="East", value=3)])

    assert store.state.energy_by_region == (ChartPoint(name="East", value=3),)
    assert store.state.has_data(Channel.ENERGY_BY_REGION)


def test_empty_update_still_marks_channel_received() -> None:
    store = DashboardStore()

    store.set_peak_load_meters([])

    assert store.state.peak_load_meters == ()
    assert store.state.has_data(Channel.PEAK_LOAD_METERS)


def test_apply_with_stamp_publishes_one_consistent_snapshot() -> None:
    store = DashboardStore(clock=_dt)
    seen: list[DashboardState] = []
    store.subscribe(seen.append)

    store.apply(
        ChannelUpdate(channel=Channel.PEAK_LOAD_METERS, points=(ChartPoint(name="North", value=2),)),
        stamp=True,
    )

    assert len(seen) == 1
    assert seen[0].last_update == _dt()
    assert seen[0].peak_load_total == 2


def test_apply_faulty_meter_count() -> None:
    store = DashboardStore()

    store.apply(ChannelUpdate(channel=Channel.FAULTY_METERS, count=12))

    assert store.state.faulty_meters == 12
    assert store.state.last_update is None


def test_mark_updated_leaves_aggregates_untouched() -> None:
    store = DashboardStore(clock=_dt)
    store.set_faulty_meters(4)

    store.mark_updated()

    assert store.state.last_update == _dt()
    assert store.state.faulty_meters == 4


def test_status_change_notifies_only_on_transition() -> None:
    store = DashboardStore()
    seen: list[ConnectionStatus] = []
    store.subscribe(lambda state: seen.append(state.status))

    store.set_status(ConnectionStatus.CONNECTING)
    store.set_status(ConnectionStatus.CONNECTED)
    store.set_status(ConnectionStatus.CONNECTED)
    store.set_status(ConnectionStatus.DISCONNECTED)

    assert seen == [ConnectionStatus.CONNECTED, ConnectionStatus.DISCONNECTED]


def test_failing_listener_does_not_block_others() -> None:
    store = DashboardStore()
    seen: list[int] = []

    def _broken(_state: DashboardState) -> None:
        raise RuntimeError("renderer exploded")

    store.subscribe(_broken)
    store.subscribe(lambda state: seen.append(state.faulty_meters))

    store.set_faulty_meters(3)

    assert seen == [3]
    assert store.state.faulty_meters == 3


def test_unsubscribe_and_clear_listeners() -> None:
    store = DashboardStore()
    seen: list[int] = []
    unsubscribe = store.subscribe(lambda state: seen.append(state.faulty_meters))

    store.set_faulty_meters(1)
    unsubscribe()
    store.set_faulty_meters(2)

    store.subscribe(lambda state: seen.append(state.faulty_meters))
    store.clear_listeners()
    store.set_faulty_meters(3)

    assert seen == [1]


def test_snapshots_are_immutable() -> None:
    store = DashboardStore()
    before = store.state

    store.set_faulty_meters(9)

    assert before.faulty_meters == 0
    with pytest.raises(ValidationError):
        store.state.faulty_meters = 1  # type: ignore[misc]


def test_channel_update_shape_is_validated() -> None:
    with pytest.raises(ValidationError):
        ChannelUpdate(channel=Channel.FAULTY_METERS)
    with pytest.raises(ValidationError):
        ChannelUpdate(channel=Channel.ENERGY_BY_REGION, count=3)
