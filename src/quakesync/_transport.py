"""Bounded HTTP fetch of the upstream event feed."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

import aiohttp

from quakesync._constants import USER_AGENT
from quakesync.config import SyncConfig
from quakesync.results import FetchFailure, FetchFailureKind

_logger = logging.getLogger(__name__)


class FeedSource(Protocol):
    """Structural fetch interface used by the sync engine.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`FeedClient`) concrete.
    """

    async def fetch(self) -> bytes | FetchFailure:
        ...


class FeedClient:
    """Fetches the raw feed payload with independent connect/read bounds.

    Usage::

        async with FeedClient(config) as client:
            payload = await client.fetch()

    Failures are classified and returned, never raised, and never retried
    here: the next scheduled pass is the retry.
    """

    def __init__(
        self,
        config: SyncConfig,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._timeout = aiohttp.ClientTimeout(
            total=None,
            connect=config.connect_timeout,
            sock_connect=config.connect_timeout,
            sock_read=config.read_timeout,
        )

    async def __aenter__(self) -> FeedClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
        self._http_session = None

    def _require_session(self) -> aiohttp.ClientSession:
        if self._http_session is None:
            # Lazily created so the client also works outside ``async with``.
            self._http_session = aiohttp.ClientSession()
        return self._http_session

    async def fetch(self) -> bytes | FetchFailure:
        """GET the feed once and return its body or a classified failure."""
        url = self._config.feed_url
        headers = {"accept": "application/geo+json, application/json", "user-agent": USER_AGENT}

        _logger.debug("GET %s", url)

        try:
            async with self._require_session().get(url, headers=headers, timeout=self._timeout) as resp:
                if not 200 <= resp.status < 300:
                    return FetchFailure(
                        FetchFailureKind.UPSTREAM_ERROR,
                        message=resp.reason or "",
                        status=resp.status,
                    )
                body = await resp.read()
        except asyncio.TimeoutError as exc:
            # aiohttp's connect/read timeouts subclass both TimeoutError and ClientError.
            return FetchFailure(FetchFailureKind.TIMEOUT, message=str(exc) or type(exc).__name__)
        except aiohttp.ClientError as exc:
            return FetchFailure(FetchFailureKind.NETWORK_UNREACHABLE, message=str(exc) or type(exc).__name__)
        except OSError as exc:
            return FetchFailure(FetchFailureKind.NETWORK_UNREACHABLE, message=str(exc))

        _logger.debug("Fetched %d bytes from %s", len(body), url)
        return body
