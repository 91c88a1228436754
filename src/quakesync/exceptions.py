"""Custom exception hierarchy for quakesync.

Expected failures of a sync pass (network, decode, per-record rejection) are
returned as values, see :mod:`quakesync.results`. Only conditions that must
unwind a block of work are raised.
"""

from __future__ import annotations


class QuakeSyncError(Exception):
    """Base exception for all quakesync errors."""


class QuakeSyncConfigError(QuakeSyncError):
    """Invalid or missing configuration."""


class PersistenceError(QuakeSyncError):
    """Store-level failure while applying a unit of work.

    Raising this inside :meth:`quakesync.store.EventStore.unit_of_work`
    rolls back every write made in that unit.
    """

    def __init__(self, message: str, *, external_id: str | None = None) -> None:
        self.external_id = external_id
        super().__init__(message)
