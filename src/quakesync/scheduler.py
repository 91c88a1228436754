"""Sequential pass scheduler.

Replaces a self-rescheduling job with an explicit two-state loop: a pass
runs, then an interruptible delay is armed from the pass's completion.
Passes never overlap.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Protocol

from quakesync._constants import SYNC_INTERVAL
from quakesync.results import PassOutcome, SyncSummary

_logger = logging.getLogger(__name__)


class SchedulerState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class PassRunner(Protocol):
    async def run_once(self) -> SyncSummary:
        ...


class Scheduler:
    """Drive *engine* forever with a fixed quiescent delay between passes.

    ``stop()`` wakes a pending delay immediately. A pass already in flight
    is allowed to finish; it is bounded by the feed client's timeouts.
    """

    def __init__(
        self,
        engine: PassRunner,
        *,
        interval: float = SYNC_INTERVAL,
        on_pass: Callable[[SyncSummary], None] | None = None,
    ) -> None:
        self._engine = engine
        self._interval = interval
        self._on_pass = on_pass
        self._state = SchedulerState.IDLE
        self._stop_event: asyncio.Event | None = None
        self._stop_requested = False
        self._loop_active = False
        self._passes = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def passes(self) -> int:
        """Number of completed passes."""
        return self._passes

    def stop(self) -> None:
        """Request shutdown; safe to call from a signal handler on the loop."""
        self._stop_requested = True
        if self._stop_event is not None:
            self._stop_event.set()

    async def run_forever(self) -> None:
        """Run passes until :meth:`stop` is called."""
        if self._loop_active:
            raise RuntimeError("Scheduler is already running")
        self._loop_active = True
        self._stop_event = asyncio.Event()
        if self._stop_requested:
            self._stop_event.set()

        try:
            while not self._stop_event.is_set():
                summary = await self._run_pass()
                self._notify(summary)
                if self._stop_event.is_set():
                    break
                _logger.debug("Next sync pass in %.0f seconds", self._interval)
                await self._sleep(self._interval)
        finally:
            self._loop_active = False
            self._state = SchedulerState.STOPPED
            _logger.info("Scheduler stopped after %d passes", self._passes)

    async def _run_pass(self) -> SyncSummary:
        self._state = SchedulerState.RUNNING
        try:
            summary = await self._engine.run_once()
        except Exception:
            # SyncEngine absorbs its own failures; this keeps the loop alive for any other runner.
            _logger.exception("Sync pass raised; continuing with the next cycle")
            summary = SyncSummary.zero(PassOutcome.UNEXPECTED_ERROR)
        finally:
            self._passes += 1
            self._state = SchedulerState.IDLE
        return summary

    def _notify(self, summary: SyncSummary) -> None:
        if self._on_pass is None:
            return
        try:
            self._on_pass(summary)
        except Exception:
            _logger.exception("on_pass hook raised; continuing with the next cycle")

    async def _sleep(self, seconds: float) -> None:
        assert self._stop_event is not None  # noqa: S101
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
