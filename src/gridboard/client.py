"""High-level async client for the smart-grid telemetry feed."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

import aiohttp

from gridboard._feed import END_OF_FEED, FeedQueue, FeedRuntime
from gridboard.config import DashboardConfig
from gridboard.exceptions import FeedStateError
from gridboard.ingestion.decode import decode_frame
from gridboard.ingestion.project import project_message
from gridboard.models.status import ConnectionStatus
from gridboard.state.store import DashboardState, DashboardStore, StateListener

_logger = logging.getLogger(__name__)


class DashboardClient:
    """Async client that keeps a dashboard view-model in sync with the feed.

    Usage::

        async with DashboardClient(config) as client:
            client.subscribe(render)
            await client.wait_closed()

    Entering the context opens the feed; leaving it closes the socket,
    drops anything still queued and detaches all listeners.
    """

    def __init__(
        self,
        config: DashboardConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        store: DashboardStore | None = None,
        on_state: StateListener | None = None,
    ) -> None:
        self._config = config or DashboardConfig()
        self._external_session = session is not None
        self._http_session = session
        self._store = store or DashboardStore()
        self._frames: FeedQueue | None = None
        self._runtime: FeedRuntime | None = None
        self._consumer: asyncio.Task[None] | None = None
        self._opened = False
        self._closed = False
        if on_state is not None:
            self._store.subscribe(on_state)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> DashboardClient:
        await self.open()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def config(self) -> DashboardConfig:
        return self._config

    @property
    def store(self) -> DashboardStore:
        return self._store

    @property
    def state(self) -> DashboardState:
        """Current view-model snapshot."""
        return self._store.state

    @property
    def status(self) -> ConnectionStatus:
        return self._store.state.status

    @property
    def last_update(self) -> datetime | None:
        return self._store.state.last_update

    @property
    def is_closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call *listener* with every new snapshot until the client closes."""
        return self._store.subscribe(listener)

    # ------------------------------------------------------------------
    # Feed lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Open the feed and start the consumer loop."""
        if self._closed:
            raise FeedStateError("Client is closed; create a new client to reopen the feed")
        if self._opened:
            raise FeedStateError("Feed is already open")
        self._opened = True

        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()

        self._frames = asyncio.Queue()
        self._runtime = FeedRuntime(
            session=self._http_session,
            config=self._config,
            frames=self._frames,
            on_status=self._store.set_status,
            logger=_logger,
        )
        self._consumer = asyncio.get_running_loop().create_task(self._consume(self._frames), name="gridboard-consumer")
        self._runtime.start()

    async def close(self) -> None:
        """Release the feed.  Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        runtime = self._runtime
        self._runtime = None
        if runtime is not None:
            await runtime.stop()

        consumer = self._consumer
        self._consumer = None
        if consumer is not None and not consumer.done():
            consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await consumer

        if self._opened:
            self._store.set_status(ConnectionStatus.DISCONNECTED)
        self._store.clear_listeners()
        self._frames = None

        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    async def wait_closed(self) -> None:
        """Wait until the feed ends and every frame received before that is applied."""
        consumer = self._consumer
        if consumer is None:
            return
        await asyncio.wait([consumer])
        if not consumer.cancelled() and consumer.exception() is not None:
            _logger.error("Feed consumer stopped unexpectedly", exc_info=consumer.exception())

    # ------------------------------------------------------------------
    # Frame processing
    # ------------------------------------------------------------------

    async def _consume(self, frames: FeedQueue) -> None:
        while True:
            frame = await frames.get()
            if frame is END_OF_FEED:
                _logger.debug("Feed ended; consumer stopping")
                return
            try:
                self.process_frame(frame)
            except Exception:
                _logger.exception("Failed to apply feed frame")

    def process_frame(self, frame: str | bytes) -> bool:
        """Decode, project and apply one frame.

        Returns ``True`` when the frame decoded, whether or not it changed
        an aggregate.  Frames handed in after :meth:`close` are ignored.
        """
        if self._closed:
            return False

        message = decode_frame(frame, preview_chars=self._config.log_preview_chars)
        if message is None:
            return False

        update = project_message(message)
        if update is None:
            self._store.mark_updated()
        else:
            self._store.apply(update, stamp=True)
        return True
