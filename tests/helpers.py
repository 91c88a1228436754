"""Shared test doubles and feed builders."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from quakesync.results import FetchFailure


class StepClock:
    """Deterministic store clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


@dataclass
class FakeFeed:
    """In-memory feed source returning a fixed payload or failure."""

    payload: bytes | FetchFailure = b'{"type": "FeatureCollection", "features": []}'
    calls: int = 0
    history: list[bytes | FetchFailure] = field(default_factory=list)

    async def fetch(self) -> bytes | FetchFailure:
        self.calls += 1
        self.history.append(self.payload)
        return self.payload


def make_feature(
    external_id: str | None = "us7000abcd",
    *,
    mag: Any = 4.7,
    place: Any = "10 km SW of Somewhere",
    time_ms: Any = 1_700_000_000_000,
    coordinates: Any = None,
    drop: tuple[str, ...] = (),
) -> dict[str, Any]:
    feature: dict[str, Any] = {
        "type": "Feature",
        "properties": {"mag": mag, "place": place, "time": time_ms, "status": "reviewed"},
        "geometry": {
            "type": "Point",
            "coordinates": [142.37, 38.29, 10.0] if coordinates is None else coordinates,
        },
    }
    if external_id is not None:
        feature["id"] = external_id
    for key in drop:
        feature.pop(key, None)
    return feature


def feed_bytes(*features: dict[str, Any]) -> bytes:
    return json.dumps({"type": "FeatureCollection", "features": list(features)}).encode()


