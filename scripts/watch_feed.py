#!/usr/bin/env python3
"""Watch a smart-grid telemetry feed and print the dashboard as text.

Connects to the feed (``GRIDBOARD_FEED_URL`` or ``--url``), applies every
message to a dashboard view-model and reprints the text rendering after
each change.  Stops on Ctrl+C, after ``--duration`` seconds, or when the
feed closes.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
import time
from dataclasses import dataclass
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from gridboard import DashboardClient, DashboardConfig, DashboardState, build_view, render_text  # noqa: E402
from gridboard.exceptions import GridboardConfigError  # noqa: E402

_LOG = logging.getLogger("watch_feed")


@dataclass
class WatchStats:
    started_at: float
    snapshots: int = 0
    last_state: DashboardState | None = None

    def on_state(self, state: DashboardState) -> None:
        self.snapshots += 1
        self.last_state = state


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print a text dashboard for a smart-grid telemetry feed.",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Feed websocket URL (default: GRIDBOARD_FEED_URL or ws://localhost:8080/ws).",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C or the feed closes).",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only print the final dashboard.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


def _print_state(state: DashboardState) -> None:
    print(render_text(build_view(state)))
    print("-" * 60)


def _print_summary(stats: WatchStats) -> None:
    runtime = time.time() - stats.started_at
    print("[watch] Summary")
    print(f"[watch]   runtime_s : {runtime:.1f}")
    print(f"[watch]   snapshots : {stats.snapshots}")


async def _watch(config: DashboardConfig, args: argparse.Namespace, stats: WatchStats) -> DashboardState:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(signum, stop.set)

    async with DashboardClient(config, on_state=stats.on_state) as client:
        if not args.quiet:
            client.subscribe(_print_state)

        waiters = [asyncio.create_task(client.wait_closed()), asyncio.create_task(stop.wait())]
        timeout = args.duration if args.duration > 0 else None
        done, pending = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        if not done:
            print(f"[watch] Reached --duration={args.duration}s, stopping.")

    return client.state


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    overrides = {"feed_url": args.url} if args.url else {}
    try:
        config = DashboardConfig.from_env(**overrides)
    except GridboardConfigError as exc:
        print(f"[watch] Invalid configuration: {exc}", file=sys.stderr)
        return 2

    _LOG.info("Connecting to %s", config.feed_url)
    stats = WatchStats(started_at=time.time())
    final_state = asyncio.run(_watch(config, args, stats))

    print(render_text(build_view(final_state)))
    _print_summary(stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
