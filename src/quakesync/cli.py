"""Command-line entry point: run the sync scheduler and listing server."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import signal
import sys
from dataclasses import asdict
from typing import Any

from aiohttp import web

from quakesync._transport import FeedClient
from quakesync.api import create_app
from quakesync.config import SyncConfig
from quakesync.exceptions import QuakeSyncError
from quakesync.scheduler import Scheduler
from quakesync.store.store import EventStore
from quakesync.sync import SyncEngine

_logger = logging.getLogger("quakesync")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="quakesync",
        description="Poll the USGS earthquake feed and merge it into a local store.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single sync pass, print its summary and exit.",
    )
    parser.add_argument(
        "--no-http",
        action="store_true",
        help="Do not serve the listing endpoint.",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy database URL (overrides QUAKESYNC_DATABASE_URL).",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between passes (overrides QUAKESYNC_SYNC_INTERVAL).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )
    return parser.parse_args(argv)


def _config_from_args(args: argparse.Namespace) -> SyncConfig:
    overrides: dict[str, Any] = {}
    if args.database_url is not None:
        overrides["database_url"] = args.database_url
    if args.interval is not None:
        overrides["sync_interval"] = args.interval
    if args.no_http:
        overrides["http_enabled"] = False
    return SyncConfig.from_env(**overrides)


async def _run_once(config: SyncConfig, store: EventStore) -> int:
    async with FeedClient(config) as client:
        summary = await SyncEngine(client, store, continent=config.continent).run_once()
    print(json.dumps(asdict(summary)))
    return 0


async def _serve(config: SyncConfig, store: EventStore) -> int:
    loop = asyncio.get_running_loop()

    runner: web.AppRunner | None = None
    if config.http_enabled:
        runner = web.AppRunner(create_app(store, list_limit=config.list_limit))
        await runner.setup()
        await web.TCPSite(runner, config.http_host, config.http_port).start()
        _logger.info("Listing endpoint on http://%s:%d/api/v1/earthquakes", config.http_host, config.http_port)

    try:
        async with FeedClient(config) as client:
            scheduler = Scheduler(SyncEngine(client, store, continent=config.continent), interval=config.sync_interval)
            for sig in (signal.SIGINT, signal.SIGTERM):
                with contextlib.suppress(NotImplementedError):
                    loop.add_signal_handler(sig, scheduler.stop)
            _logger.info("Syncing %s every %.0f seconds", config.feed_url, config.sync_interval)
            await scheduler.run_forever()
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.remove_signal_handler(sig)
        if runner is not None:
            await runner.cleanup()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _config_from_args(args)
        store = EventStore.from_url(config.database_url)
        store.create_schema()
    except QuakeSyncError as exc:
        _logger.error("Startup failed: %s", exc)
        return 2

    try:
        if args.once:
            return asyncio.run(_run_once(config, store))
        return asyncio.run(_serve(config, store))
    except KeyboardInterrupt:
        return 130
    finally:
        store.dispose()


if __name__ == "__main__":
    sys.exit(main())
