#!/usr/bin/env python3
"""Serve a fake smart-grid telemetry feed for local development.

Every ``--interval`` seconds each connected client receives one frame
per message type, with randomized values in the shape the real backend
sends (snake_case records carrying ``_value``).

Run it, then point ``scripts/watch_feed.py`` at ``ws://localhost:8080/ws``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import random
from typing import Any

from aiohttp import web

_LOG = logging.getLogger("fake_feed_server")

REGIONS = ("North", "South", "East", "West")
BUILDING_TYPES = ("residential", "commercial", "industrial")


def _energy_by_region() -> dict[str, Any]:
    return {
        "type": "energyByRegion",
        "data": [{"region": region, "_value": random.uniform(1_000_000, 5_000_000)} for region in REGIONS],
    }


def _energy_by_building_type() -> dict[str, Any]:
    return {
        "type": "energyByBuildingType",
        "data": [{"building_type": kind, "_value": random.uniform(5, 60)} for kind in BUILDING_TYPES],
    }


def _peak_load_meters() -> dict[str, Any]:
    count = random.randint(0, 12)
    return {
        "type": "peakLoadMeters",
        "data": [
            {"meter_id": f"MTR-{index:04d}", "region": random.choice(REGIONS + (None,))} for index in range(count)
        ],
    }


def _faulty_meters() -> dict[str, Any]:
    return {"type": "faultyMeters", "data": [{"_value": random.randint(0, 25)}]}


GENERATORS = (_energy_by_region, _faulty_meters, _energy_by_building_type, _peak_load_meters)


async def feed_handler(request: web.Request) -> web.WebSocketResponse:
    ws = web.WebSocketResponse()
    await ws.prepare(request)
    interval: float = request.app["interval"]
    _LOG.info("Client connected from %s", request.remote)

    try:
        while not ws.closed:
            for generate in GENERATORS:
                await ws.send_str(json.dumps(generate()))
            await asyncio.sleep(interval)
    except ConnectionResetError:
        pass
    finally:
        _LOG.info("Client disconnected from %s", request.remote)
    return ws


def build_app(interval: float) -> web.Application:
    app = web.Application()
    app["interval"] = interval
    app.router.add_get("/ws", feed_handler)
    return app


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve a fake smart-grid telemetry feed.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between bursts.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logs.")
    return parser.parse_args()


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    print(f"[fake-feed] Serving ws://{args.host}:{args.port}/ws")
    web.run_app(build_app(args.interval), host=args.host, port=args.port, print=None)
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
