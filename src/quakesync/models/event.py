"""Seismic event models.

:class:`SeismicEvent` is the canonical shape produced by the normalizer and
written by the store. :class:`StoredEvent` is the read side, carrying the
store-maintained row id and lifecycle timestamps.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class SeismicEvent(BaseModel):
    """One upstream feature mapped to the persisted event shape.

    Parameters
    ----------
    external_id : str
        Identifier assigned by the upstream feed; the merge key.
    magnitude : float or None
        Upstream-reported magnitude.
    place : str or None
        Human-readable location description.
    occurred_at : datetime
        Event time (UTC), derived from upstream epoch milliseconds.
    coordinates : list
        ``[longitude, latitude, depth]`` as reported; depth may be absent.
    continent : str
        Classification placeholder.
    is_verified : bool
        Reserved for a separate verification workflow.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    external_id: str
    magnitude: float | None = None
    place: str | None = None
    occurred_at: datetime
    coordinates: list[float] = Field(default_factory=list)
    continent: str
    is_verified: bool = False

    @field_validator("external_id")
    @classmethod
    def _strip_external_id(cls, value: str) -> str:
        external_id = value.strip()
        if not external_id:
            raise ValueError("external_id must be non-empty")
        return external_id

    @field_validator("occurred_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        return _ensure_utc(value)

    def store_attributes(self) -> dict[str, Any]:
        """Attributes overwritten on every observation (``is_verified`` excluded)."""
        return self.model_dump(exclude={"external_id", "is_verified"})


class StoredEvent(SeismicEvent):
    """A persisted event row, as served by the listing endpoint."""

    id: int
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _ensure_lifecycle_tz_aware(cls, value: datetime) -> datetime:
        return _ensure_utc(value)
