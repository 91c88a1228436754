"""Event store layer.

This package is the only component allowed to write events. Every write
goes through :meth:`EventStore.unit_of_work`.
"""

from quakesync.store.schema import earthquakes, metadata
from quakesync.store.store import EventStore, StoreTransaction

__all__ = [
    "EventStore",
    "StoreTransaction",
    "earthquakes",
    "metadata",
]
