from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import UTC, datetime

import aiohttp
import pytest
from aiohttp import web
from aiohttp import test_utils

from gridboard.client import DashboardClient
from gridboard.config import DashboardConfig
from gridboard.exceptions import FeedStateError
from gridboard.models._base import ChartPoint
from gridboard.models.status import ConnectionStatus
from gridboard.state.events import ChannelUpdate
from gridboard.state.store import DashboardState, DashboardStore

Handler = Callable[[web.Request], Awaitable[web.WebSocketResponse]]

REGION_FRAME = json.dumps(
    {"type": "energyByRegion", "data": [{"region": "North", "_value": 3_500_000}, {"region": "South"}]}
)
PEAK_FRAME = json.dumps(
    {"type": "peakLoadMeters", "data": [{"region": "North"}, {"region": "North"}, {"region": None}]}
)
FAULTY_FRAME = json.dumps({"type": "faultyMeters", "data": [{"_value": 5}]})


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


@contextlib.asynccontextmanager
async def serve_feed(handler: Handler) -> AsyncIterator[str]:
    app = web.Application()
    app.router.add_get("/ws", handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        yield f"ws://{server.host}:{server.port}/ws"
    finally:
        await server.close()


def send_then_close(*frames: str | bytes) -> Handler:
    async def _handler(request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        for frame in frames:
            if isinstance(frame, bytes):
                await ws.send_bytes(frame)
            else:
                await ws.send_str(frame)
        await ws.close()
        return ws

    return _handler


def send_then_hold(*frames: str) -> Handler:
    async def _handler(request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        for frame in frames:
            await ws.send_str(frame)
        async for _msg in ws:
            pass
        return ws

    return _handler


async def _wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.01)


# ------------------------------------------------------------------
# Frame processing without a connection
# ------------------------------------------------------------------


def test_process_frame_updates_aggregate_and_timestamp() -> None:
    client = DashboardClient(store=DashboardStore(clock=_dt))

    assert client.process_frame(REGION_FRAME) is True

    assert client.state.energy_by_region == (
        ChartPoint(name="North", value=3500),
        ChartPoint(name="South", value=0),
    )
    assert client.last_update == _dt()


def test_malformed_frame_leaves_state_unchanged() -> None:
    client = DashboardClient(store=DashboardStore(clock=_dt))
    client.process_frame(PEAK_FRAME)
    before = client.state

    for frame in ("{not json", '{"type": "peakLoadMeters", "data": [{"region"', "[]"):
        assert client.process_frame(frame) is False

    assert client.state == before


def test_unknown_tag_updates_timestamp_only() -> None:
    client = DashboardClient(store=DashboardStore(clock=_dt))

    assert client.process_frame('{"type": "gridFrequency", "data": [{"_value": 50}]}') is True

    assert client.last_update == _dt()
    assert client.state.received == frozenset()


def test_non_array_data_keeps_previous_aggregate() -> None:
    client = DashboardClient()
    client.process_frame(REGION_FRAME)

    client.process_frame('{"type": "energyByRegion", "data": "North"}')

    assert client.state.energy_by_region[0] == ChartPoint(name="North", value=3500)


@pytest.mark.asyncio
async def test_process_frame_after_close_is_ignored() -> None:
    seen: list[DashboardState] = []
    client = DashboardClient(on_state=seen.append)

    await client.close()

    assert client.process_frame(FAULTY_FRAME) is False
    assert client.state.faulty_meters == 0
    assert seen == []


@pytest.mark.asyncio
async def test_open_after_close_raises() -> None:
    client = DashboardClient()
    await client.close()

    with pytest.raises(FeedStateError):
        await client.open()


# ------------------------------------------------------------------
# Live feed
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_feed_frames_applied_then_server_close_disconnects() -> None:
    statuses: list[ConnectionStatus] = []

    async with serve_feed(send_then_close(REGION_FRAME, PEAK_FRAME, FAULTY_FRAME)) as url:
        config = DashboardConfig(feed_url=url)
        async with DashboardClient(config, on_state=lambda state: statuses.append(state.status)) as client:
            await asyncio.wait_for(client.wait_closed(), timeout=5.0)

            state = client.state
            assert state.energy_by_region == (
                ChartPoint(name="North", value=3500),
                ChartPoint(name="South", value=0),
            )
            assert state.peak_load_meters == (
                ChartPoint(name="North", value=2),
                ChartPoint(name="Unknown", value=1),
            )
            assert state.faulty_meters == 5
            assert state.last_update is not None
            assert client.status == ConnectionStatus.DISCONNECTED

    assert ConnectionStatus.CONNECTED in statuses
    assert statuses[-1] == ConnectionStatus.DISCONNECTED


@pytest.mark.asyncio
async def test_malformed_and_binary_frames_do_not_stop_the_feed() -> None:
    frames = ("garbage", b"\x00\x01", '{"type": "mystery"}', FAULTY_FRAME)

    async with serve_feed(send_then_close(*frames)) as url:
        async with DashboardClient(DashboardConfig(feed_url=url)) as client:
            await asyncio.wait_for(client.wait_closed(), timeout=5.0)

            assert client.state.faulty_meters == 5


@pytest.mark.asyncio
async def test_client_close_releases_feed_and_keeps_last_values() -> None:
    seen: list[DashboardState] = []

    async with serve_feed(send_then_hold(PEAK_FRAME)) as url:
        client = DashboardClient(DashboardConfig(feed_url=url), on_state=seen.append)
        await client.open()
        await _wait_for(lambda: bool(client.state.peak_load_meters))
        assert client.status == ConnectionStatus.CONNECTED

        await client.close()
        calls_at_close = len(seen)

        assert client.is_closed
        assert client.status == ConnectionStatus.DISCONNECTED
        assert client.state.peak_load_total == 3
        assert client.process_frame(FAULTY_FRAME) is False
        assert len(seen) == calls_at_close
        assert seen[-1].status == ConnectionStatus.DISCONNECTED


@pytest.mark.asyncio
async def test_open_twice_raises() -> None:
    async with serve_feed(send_then_hold()) as url:
        async with DashboardClient(DashboardConfig(feed_url=url)) as client:
            with pytest.raises(FeedStateError):
                await client.open()


@pytest.mark.asyncio
async def test_connect_failure_sets_error_status() -> None:
    config = DashboardConfig(feed_url=f"ws://127.0.0.1:{test_utils.unused_port()}/ws", connect_timeout=5.0)

    async with DashboardClient(config) as client:
        await asyncio.wait_for(client.wait_closed(), timeout=10.0)

        assert client.status == ConnectionStatus.ERROR
        assert client.last_update is None


@pytest.mark.asyncio
async def test_external_session_is_left_open() -> None:
    async with aiohttp.ClientSession() as session:
        async with serve_feed(send_then_close(FAULTY_FRAME)) as url:
            async with DashboardClient(DashboardConfig(feed_url=url), session=session) as client:
                await asyncio.wait_for(client.wait_closed(), timeout=5.0)

        assert not session.closed


class _FailOnceStore(DashboardStore):
    def __init__(self) -> None:
        super().__init__()
        self.failures = 0

    def apply(self, update: ChannelUpdate, *, stamp: bool = False) -> None:
        if self.failures == 0:
            self.failures += 1
            raise RuntimeError("store unavailable")
        super().apply(update, stamp=stamp)


@pytest.mark.asyncio
async def test_huge_values_do_not_stall_the_feed() -> None:
    frames = (
        '{"type":"energyByRegion","data":[{"region":"N","_value":1e40}]}',
        '{"type":"energyByBuildingType","data":[{"building_type":"office","_value":1e30}]}',
        FAULTY_FRAME,
    )

    async with serve_feed(send_then_close(*frames)) as url:
        async with DashboardClient(DashboardConfig(feed_url=url)) as client:
            await asyncio.wait_for(client.wait_closed(), timeout=5.0)

            assert client.state.energy_by_region == (ChartPoint(name="N", value=round(1e40 / 1000)),)
            assert client.state.energy_by_building_type == (ChartPoint(name="Office", value=1e30),)
            assert client.state.faulty_meters == 5


@pytest.mark.asyncio
async def test_frame_that_fails_to_apply_is_logged_and_feed_continues(caplog: pytest.LogCaptureFixture) -> None:
    store = _FailOnceStore()

    async with serve_feed(send_then_close(REGION_FRAME, FAULTY_FRAME)) as url:
        async with DashboardClient(DashboardConfig(feed_url=url), store=store) as client:
            with caplog.at_level(logging.ERROR, logger="gridboard.client"):
                await asyncio.wait_for(client.wait_closed(), timeout=5.0)

            assert store.failures == 1
            assert client.state.energy_by_region == ()
            assert client.state.faulty_meters == 5

    assert "Failed to apply feed frame" in caplog.text


@pytest.mark.asyncio
async def test_wait_closed_reports_failed_consumer(caplog: pytest.LogCaptureFixture) -> None:
    async def _broken() -> None:
        raise RuntimeError("consumer broke")

    client = DashboardClient()
    client._consumer = asyncio.get_running_loop().create_task(_broken())

    with caplog.at_level(logging.ERROR, logger="gridboard.client"):
        await client.wait_closed()

    assert "Feed consumer stopped unexpectedly" in caplog.text
    await client.close()
