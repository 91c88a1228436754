"""Ingestion layer.

This package turns the raw feed payload into normalized
:class:`quakesync.models.SeismicEvent` values. It never touches the store.
"""

from quakesync.ingestion.normalize import normalize_feature
from quakesync.ingestion.parse import parse_feed

__all__ = [
    "normalize_feature",
    "parse_feed",
]
