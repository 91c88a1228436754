from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import pytest
from helpers import FakeFeed, feed_bytes, make_feature

from quakesync.exceptions import PersistenceError
from quakesync.results import FetchFailure, FetchFailureKind, PassOutcome
from quakesync.store.store import EventStore, StoreTransaction
from quakesync.sync import SyncEngine


def _mixed_feed() -> bytes:
    no_geometry = make_feature("bad-geom", drop=("geometry",))
    flat_coords = make_feature("bad-coords", coordinates="142.37,38.29")
    return feed_bytes(make_feature("good-1"), no_geometry, flat_coords)


@pytest.mark.asyncio
async def test_mixed_batch_counts(store: EventStore) -> None:
    engine = SyncEngine(FakeFeed(_mixed_feed()), store)

    summary = await engine.run_once()

    assert summary.counts == (1, 0, 2)
    assert summary.outcome == PassOutcome.OK
    assert [e.external_id for e in store.list_recent()] == ["good-1"]


@pytest.mark.asyncio
async def test_malformed_coordinate_elements_skip_only_that_feature(store: EventStore) -> None:
    ring = make_feature("ring", coordinates=[[142.3, 38.2], [142.4, 38.3]])
    long_id = "ci" + "9" * 198
    engine = SyncEngine(FakeFeed(feed_bytes(make_feature("good-1"), ring, make_feature(long_id))), store)

    summary = await engine.run_once()

    assert summary.counts == (2, 0, 1)
    assert summary.outcome == PassOutcome.OK
    assert sorted(e.external_id for e in store.list_recent()) == sorted(["good-1", long_id])


@pytest.mark.asyncio
async def test_rejections_are_logged_with_identifier(store: EventStore, caplog: pytest.LogCaptureFixture) -> None:
    engine = SyncEngine(FakeFeed(_mixed_feed()), store)

    with caplog.at_level(logging.WARNING, logger="quakesync.sync"):
        await engine.run_once()

    messages = [record.getMessage() for record in caplog.records]
    assert any("bad-geom" in m and "missing_required_block" in m for m in messages)
    assert any("bad-coords" in m and "malformed_coordinates" in m for m in messages)


@pytest.mark.asyncio
async def test_second_pass_on_unchanged_feed_only_updates(store: EventStore) -> None:
    feed = FakeFeed(feed_bytes(make_feature("a"), make_feature("b"), make_feature("c", drop=("properties",))))
    engine = SyncEngine(feed, store)

    first = await engine.run_once()
    second = await engine.run_once()

    assert first.counts == (2, 0, 1)
    assert second.counts == (0, 2, 1)
    assert store.count() == 2


@pytest.mark.asyncio
async def test_duplicate_ids_in_one_pass_converge_to_last(store: EventStore) -> None:
    feed = FakeFeed(
        feed_bytes(
            make_feature("dup", mag=4.5, place="first"),
            make_feature("dup", mag=5.5, place="second"),
        )
    )

    summary = await SyncEngine(feed, store).run_once()

    assert summary.counts == (1, 1, 0)
    (event,) = store.list_recent()
    assert event.place == "second"
    assert event.magnitude == pytest.approx(5.5)


@pytest.mark.asyncio
async def test_occurred_at_comes_from_feed_time(store: EventStore) -> None:
    await SyncEngine(FakeFeed(feed_bytes(make_feature(time_ms=1_700_000_000_000))), store).run_once()

    (event,) = store.list_recent()
    assert event.occurred_at == datetime.fromtimestamp(1_700_000_000, tz=UTC)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failure",
    [
        FetchFailure(FetchFailureKind.TIMEOUT, message="read timed out"),
        FetchFailure(FetchFailureKind.NETWORK_UNREACHABLE, message="Name or service not known"),
        FetchFailure(FetchFailureKind.UPSTREAM_ERROR, status=503),
    ],
)
async def test_fetch_failure_is_zero_effect(store: EventStore, failure: FetchFailure) -> None:
    summary = await SyncEngine(FakeFeed(failure), store).run_once()

    assert summary.counts == (0, 0, 0)
    assert summary.outcome == PassOutcome.FETCH_FAILED
    assert store.count() == 0


@pytest.mark.asyncio
async def test_decode_failure_logged_distinctly(store: EventStore, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="quakesync.sync"):
        summary = await SyncEngine(FakeFeed(b"\x00\x01not json"), store).run_once()

    assert summary.counts == (0, 0, 0)
    assert summary.outcome == PassOutcome.DECODE_FAILED
    messages = [record.getMessage() for record in caplog.records]
    assert any("could not be decoded" in m for m in messages)
    assert not any("fetch failed" in m for m in messages)


@pytest.mark.asyncio
async def test_empty_feed_is_a_normal_pass(store: EventStore) -> None:
    summary = await SyncEngine(FakeFeed(feed_bytes()), store).run_once()

    assert summary.counts == (0, 0, 0)
    assert summary.outcome == PassOutcome.OK


@pytest.mark.asyncio
async def test_persistence_failure_rolls_back_whole_batch(
    store: EventStore,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    original_upsert = StoreTransaction.upsert
    calls = {"n": 0}

    def flaky_upsert(self: StoreTransaction, external_id: str, attributes: dict[str, Any]) -> Any:
        calls["n"] += 1
        if calls["n"] == 2:
            raise PersistenceError("disk full", external_id=external_id)
        return original_upsert(self, external_id, attributes)

    monkeypatch.setattr(StoreTransaction, "upsert", flaky_upsert)
    feed = FakeFeed(feed_bytes(make_feature("a"), make_feature("b"), make_feature("c")))

    summary = await SyncEngine(feed, store).run_once()

    assert summary.counts == (0, 0, 0)
    assert summary.outcome == PassOutcome.PERSISTENCE_FAILED
    assert store.count() == 0


@pytest.mark.asyncio
async def test_unexpected_error_is_absorbed(store: EventStore, caplog: pytest.LogCaptureFixture) -> None:
    class ExplodingFeed:
        async def fetch(self) -> bytes:
            raise KeyError("surprise")

    with caplog.at_level(logging.ERROR, logger="quakesync.sync"):
        summary = await SyncEngine(ExplodingFeed(), store).run_once()

    assert summary.outcome == PassOutcome.UNEXPECTED_ERROR
    assert summary.counts == (0, 0, 0)
    assert any(record.exc_info for record in caplog.records)


@pytest.mark.asyncio
async def test_recovers_on_next_pass_after_failure(store: EventStore) -> None:
    feed = FakeFeed(FetchFailure(FetchFailureKind.TIMEOUT))
    engine = SyncEngine(feed, store)

    assert (await engine.run_once()).outcome == PassOutcome.FETCH_FAILED

    feed.payload = feed_bytes(make_feature("late"))
    assert (await engine.run_once()).counts == (1, 0, 0)
