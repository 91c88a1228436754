"""Normalization of raw feed features.

Centralizes defensive parsing of upstream values and the acceptance rules
for a feature. Rejections are returned, never raised.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from quakesync._constants import CONTINENT_PLACEHOLDER
from quakesync.models.event import SeismicEvent
from quakesync.results import RejectReason, Rejection


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def epoch_millis_to_datetime(value: Any) -> datetime | None:
    """Convert upstream epoch milliseconds to an absolute UTC datetime.

    Sub-millisecond precision lost in the division is acceptable.
    """
    millis = safe_float(value)
    if millis is None:
        return None
    try:
        return datetime.fromtimestamp(millis / 1000, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _non_empty_mapping(value: Any) -> bool:
    return isinstance(value, Mapping) and bool(value)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def feature_id(feature: Any) -> str | None:
    """Best-effort identifier of *feature* for log lines."""
    if isinstance(feature, Mapping):
        return safe_str(feature.get("id"))
    return None


def normalize_feature(
    feature: Any,
    *,
    continent: str = CONTINENT_PLACEHOLDER,
) -> SeismicEvent | Rejection:
    """Validate one raw feature and map it to a :class:`SeismicEvent`.

    Checks run in order: properties/geometry blocks, coordinates shape,
    external id, event time. Magnitude and place may be absent.
    """
    external_id = feature_id(feature)

    if not isinstance(feature, Mapping):
        return Rejection(RejectReason.MISSING_REQUIRED_BLOCK, detail="feature is not an object")

    props = feature.get("properties")
    geom = feature.get("geometry")
    if not _non_empty_mapping(props) or not _non_empty_mapping(geom):
        missing = [name for name, block in (("properties", props), ("geometry", geom)) if not _non_empty_mapping(block)]
        return Rejection(
            RejectReason.MISSING_REQUIRED_BLOCK,
            external_id=external_id,
            detail=f"missing {' and '.join(missing)}",
        )

    coordinates = geom.get("coordinates")
    if not isinstance(coordinates, list):
        return Rejection(
            RejectReason.MALFORMED_COORDINATES,
            external_id=external_id,
            detail=f"coordinates is {type(coordinates).__name__}, not an array",
        )
    if not all(_is_number(value) for value in coordinates):
        return Rejection(
            RejectReason.MALFORMED_COORDINATES,
            external_id=external_id,
            detail=f"coordinates {coordinates!r} are not all numbers",
        )

    if external_id is None:
        return Rejection(RejectReason.MISSING_EXTERNAL_ID, detail="feature has no id")

    occurred_at = epoch_millis_to_datetime(props.get("time"))
    if occurred_at is None:
        return Rejection(
            RejectReason.INVALID_TIME,
            external_id=external_id,
            detail=f"time={props.get('time')!r} is not epoch milliseconds",
        )

    return SeismicEvent(
        external_id=external_id,
        magnitude=safe_float(props.get("mag")),
        place=safe_str(props.get("place")),
        occurred_at=occurred_at,
        coordinates=[float(value) for value in coordinates],
        continent=continent,
    )
