"""quakesync - Recurring USGS earthquake feed ingestion connector."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("quakesync")
except PackageNotFoundError:
    __version__ = "0+local"
from quakesync._transport import FeedClient
from quakesync.config import SyncConfig
from quakesync.exceptions import PersistenceError, QuakeSyncConfigError, QuakeSyncError
from quakesync.ingestion import normalize_feature, parse_feed
from quakesync.models import SeismicEvent, StoredEvent
from quakesync.results import (
    DecodeFailure,
    FetchFailure,
    FetchFailureKind,
    PassOutcome,
    RejectReason,
    Rejection,
    SyncSummary,
    UpsertResult,
)
from quakesync.scheduler import Scheduler, SchedulerState
from quakesync.store import EventStore
from quakesync.sync import SyncEngine

__all__ = [
    "__version__",
    "DecodeFailure",
    "EventStore",
    "FeedClient",
    "FetchFailure",
    "FetchFailureKind",
    "PassOutcome",
    "PersistenceError",
    "QuakeSyncConfigError",
    "QuakeSyncError",
    "RejectReason",
    "Rejection",
    "Scheduler",
    "SchedulerState",
    "SeismicEvent",
    "StoredEvent",
    "SyncConfig",
    "SyncEngine",
    "SyncSummary",
    "UpsertResult",
    "normalize_feature",
    "parse_feed",
]
