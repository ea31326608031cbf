"""Internal websocket runtime for the telemetry feed."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

import aiohttp

from gridboard.config import DashboardConfig
from gridboard.models.status import ConnectionStatus

#: Queue item marking the end of the feed.
END_OF_FEED = None

FeedQueue = asyncio.Queue[str | None]


class FeedRuntime:
    """aiohttp websocket reader that pushes text frames onto a queue.

    The runtime never sends anything on the socket.  Status changes are
    reported through *on_status*; after :meth:`stop` neither *on_status*
    nor the queue is touched again.
    """

    def __init__(
        self,
        *,
        session: aiohttp.ClientSession,
        config: DashboardConfig,
        frames: FeedQueue,
        on_status: Callable[[ConnectionStatus], None],
        logger: logging.Logger | None = None,
    ) -> None:
        self._session = session
        self._config = config
        self._frames = frames
        self._on_status = on_status
        self._logger = logger or logging.getLogger(__name__)
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._task: asyncio.Task[None] | None = None
        self._stopped = False
        self._errored = False

    def start(self) -> None:
        """Connect and start reading in a background task."""
        if self._task is not None:
            return
        self._emit_status(ConnectionStatus.CONNECTING)
        self._task = asyncio.get_running_loop().create_task(self._run(), name="gridboard-feed")

    async def stop(self) -> None:
        """Close the socket and stop the reader task."""
        self._stopped = True
        ws = self._ws
        self._ws = None
        task = self._task

        if ws is not None and not ws.closed:
            self._logger.debug("Feed close requested")
            with contextlib.suppress(aiohttp.ClientError, ConnectionError):
                await ws.close()

        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._logger.debug("Feed reader stopped")

    def _emit_status(self, status: ConnectionStatus) -> None:
        if self._stopped:
            return
        self._on_status(status)

    def _emit_frame(self, frame: str | None) -> None:
        if self._stopped:
            return
        self._frames.put_nowait(frame)

    async def _run(self) -> None:
        url = self._config.feed_url
        self._logger.debug("Feed connecting url=%s", url)
        try:
            ws = await asyncio.wait_for(
                self._session.ws_connect(
                    url,
                    heartbeat=self._config.heartbeat,
                    max_msg_size=self._config.max_msg_size,
                ),
                timeout=self._config.connect_timeout,
            )
            async with ws:
                self._ws = ws
                self._logger.info("Feed connected url=%s", url)
                self._emit_status(ConnectionStatus.CONNECTED)
                await self._read(ws)
        except asyncio.CancelledError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            self._logger.warning("Feed transport error: %s", exc)
            self._logger.debug("Feed transport failure", exc_info=True)
            self._errored = True
            self._emit_status(ConnectionStatus.ERROR)
        finally:
            self._ws = None

        if not self._errored:
            self._logger.info("Feed disconnected url=%s", url)
            self._emit_status(ConnectionStatus.DISCONNECTED)
        self._emit_frame(END_OF_FEED)

    async def _read(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                self._emit_frame(msg.data)
            elif msg.type == aiohttp.WSMsgType.BINARY:
                self._logger.warning("Discarding binary feed frame (%d bytes)", len(msg.data))
            elif msg.type == aiohttp.WSMsgType.ERROR:
                self._logger.warning("Feed websocket error: %s", ws.exception())
                self._errored = True
                self._emit_status(ConnectionStatus.ERROR)
                return
