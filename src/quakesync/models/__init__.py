"""Pydantic models for seismic events."""

from quakesync.models.event import SeismicEvent, StoredEvent

__all__ = [
    "SeismicEvent",
    "StoredEvent",
]
