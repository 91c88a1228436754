"""Read-only HTTP listing of stored events."""

from __future__ import annotations

import asyncio
import logging

from aiohttp import web

from quakesync._constants import LIST_LIMIT_MAX
from quakesync.exceptions import PersistenceError
from quakesync.store.store import EventStore

_logger = logging.getLogger(__name__)

STORE_KEY = web.AppKey("store", EventStore)
LIMIT_KEY = web.AppKey("list_limit", int)


async def list_earthquakes(request: web.Request) -> web.Response:
    """``GET /api/v1/earthquakes``: most recent events, newest first."""
    store = request.app[STORE_KEY]
    try:
        events = await asyncio.to_thread(store.list_recent, request.app[LIMIT_KEY])
    except PersistenceError:
        _logger.exception("Listing earthquakes failed")
        raise web.HTTPServiceUnavailable(text="event store unavailable") from None
    return web.json_response([event.model_dump(mode="json") for event in events])


async def health(_request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


def create_app(store: EventStore, *, list_limit: int = LIST_LIMIT_MAX) -> web.Application:
    app = web.Application()
    app[STORE_KEY] = store
    app[LIMIT_KEY] = list_limit
    app.router.add_get("/api/v1/earthquakes", list_earthquakes)
    app.router.add_get("/up", health)
    return app
