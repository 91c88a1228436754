"""Table definition for persisted seismic events."""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    UniqueConstraint,
    false,
)

metadata = MetaData()

earthquakes = Table(
    "earthquakes",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("external_id", String, nullable=False),
    Column("magnitude", Numeric(asdecimal=False), nullable=True),
    Column("place", String, nullable=True),
    Column("continent", String(32), nullable=True),
    Column("occurred_at", DateTime(timezone=True), nullable=False),
    Column("is_verified", Boolean, nullable=False, default=False, server_default=false()),
    # [longitude, latitude, depth]
    Column("coordinates", JSON, nullable=False, default=list),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("external_id", name="uq_earthquakes_external_id"),
    Index("ix_earthquakes_occurred_at", "occurred_at"),
)
