"""Tagged outcomes returned across the sync pipeline.

Each stage returns either its success value or one of these failure values,
so :class:`quakesync.sync.SyncEngine` can log precisely without catching
broad exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class FetchFailureKind(StrEnum):
    TIMEOUT = "timeout"
    NETWORK_UNREACHABLE = "network_unreachable"
    UPSTREAM_ERROR = "upstream_error"


class RejectReason(StrEnum):
    MISSING_REQUIRED_BLOCK = "missing_required_block"
    MALFORMED_COORDINATES = "malformed_coordinates"
    MISSING_EXTERNAL_ID = "missing_external_id"
    INVALID_TIME = "invalid_time"


class PassOutcome(StrEnum):
    OK = "ok"
    FETCH_FAILED = "fetch_failed"
    DECODE_FAILED = "decode_failed"
    PERSISTENCE_FAILED = "persistence_failed"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass(frozen=True, slots=True)
class FetchFailure:
    """Classified failure of a single feed fetch.

    ``status`` is only set for :attr:`FetchFailureKind.UPSTREAM_ERROR`.
    """

    kind: FetchFailureKind
    message: str = ""
    status: int | None = None

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.kind} (HTTP {self.status})"
        return f"{self.kind}: {self.message}" if self.message else str(self.kind)


@dataclass(frozen=True, slots=True)
class DecodeFailure:
    """The payload was fetched but is not a usable feature collection."""

    reason: str


@dataclass(frozen=True, slots=True)
class Rejection:
    """A feature that was excluded from the batch during validation."""

    reason: RejectReason
    external_id: str | None = None
    detail: str = ""


@dataclass(frozen=True, slots=True)
class UpsertResult:
    was_created: bool


@dataclass(frozen=True, slots=True)
class SyncSummary:
    """Counters of one sync pass."""

    created: int = 0
    updated: int = 0
    skipped: int = 0
    outcome: PassOutcome = PassOutcome.OK

    @classmethod
    def zero(cls, outcome: PassOutcome) -> SyncSummary:
        return cls(outcome=outcome)

    @property
    def counts(self) -> tuple[int, int, int]:
        return (self.created, self.updated, self.skipped)
