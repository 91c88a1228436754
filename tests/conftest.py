from __future__ import annotations

from collections.abc import Iterator

import pytest
from helpers import StepClock

from quakesync.store.store import EventStore


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def store(clock: StepClock) -> Iterator[EventStore]:
    event_store = EventStore.from_url("sqlite://", clock=clock)
    event_store.create_schema()
    yield event_store
    event_store.dispose()
