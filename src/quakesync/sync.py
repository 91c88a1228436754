"""One complete fetch, parse, normalize and upsert pass.

:class:`SyncEngine` is the only orchestrator of a pass. Every stage below it
returns a tagged outcome; the engine turns those into log lines and a
:class:`~quakesync.results.SyncSummary`. ``run_once`` never raises.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from quakesync._constants import CONTINENT_PLACEHOLDER
from quakesync._transport import FeedSource
from quakesync.exceptions import PersistenceError
from quakesync.ingestion.normalize import normalize_feature
from quakesync.ingestion.parse import parse_feed
from quakesync.results import DecodeFailure, FetchFailure, PassOutcome, Rejection, SyncSummary
from quakesync.store.store import EventStore

_logger = logging.getLogger(__name__)


class SyncEngine:
    """Runs sync passes of *source* into *store*."""

    def __init__(
        self,
        source: FeedSource,
        store: EventStore,
        *,
        continent: str = CONTINENT_PLACEHOLDER,
    ) -> None:
        self._source = source
        self._store = store
        self._continent = continent

    async def run_once(self) -> SyncSummary:
        """Run a single pass and return its counters.

        Network and decode failures produce a zero summary. A persistence
        failure rolls back the whole batch and also produces a zero summary.
        """
        try:
            payload = await self._source.fetch()
            if isinstance(payload, FetchFailure):
                _logger.warning("Feed fetch failed (%s); skipping this pass", payload)
                return SyncSummary.zero(PassOutcome.FETCH_FAILED)

            features = parse_feed(payload)
            if isinstance(features, DecodeFailure):
                _logger.warning("Feed payload could not be decoded: %s", features.reason)
                return SyncSummary.zero(PassOutcome.DECODE_FAILED)

            summary = await asyncio.to_thread(self._apply_batch, features)
        except PersistenceError as exc:
            _logger.error("Sync batch rolled back after a store failure: %s", exc)
            return SyncSummary.zero(PassOutcome.PERSISTENCE_FAILED)
        except Exception:
            _logger.exception("Unexpected error during sync pass")
            return SyncSummary.zero(PassOutcome.UNEXPECTED_ERROR)

        _logger.info(
            "Sync complete: %d created, %d updated, %d skipped",
            summary.created,
            summary.updated,
            summary.skipped,
        )
        return summary

    def _apply_batch(self, features: list[Any]) -> SyncSummary:
        """Normalize and upsert *features* inside one unit of work."""
        created = updated = skipped = 0

        with self._store.unit_of_work() as tx:
            for feature in features:
                event = normalize_feature(feature, continent=self._continent)
                if isinstance(event, Rejection):
                    skipped += 1
                    _logger.warning(
                        "Skipping feature %s: %s (%s)",
                        event.external_id or "<no id>",
                        event.reason,
                        event.detail,
                    )
                    continue

                result = tx.upsert(event.external_id, event.store_attributes())
                if result.was_created:
                    created += 1
                else:
                    updated += 1

        return SyncSummary(created=created, updated=updated, skipped=skipped)
