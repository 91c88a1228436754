"""SQL-backed event store.

Uniqueness of ``external_id`` is enforced by the table's unique constraint
and an ``INSERT ... ON CONFLICT DO UPDATE`` statement, so repeated or
concurrent upserts of the same id converge to one row.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Connection, Engine, create_engine, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from quakesync._constants import LIST_LIMIT_MAX
from quakesync.exceptions import PersistenceError
from quakesync.models.event import StoredEvent
from quakesync.results import UpsertResult
from quakesync.store.schema import earthquakes, metadata

_logger = logging.getLogger(__name__)

# Columns an observation overwrites. ``is_verified`` and ``created_at`` are
# never touched after insert.
_OVERWRITTEN_COLUMNS: tuple[str, ...] = ("magnitude", "place", "occurred_at", "coordinates", "continent")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _normalize_database_url(raw: str) -> str:
    """Map the ``postgres://`` scheme to the one SQLAlchemy expects."""
    url = (raw or "").strip()
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://") :]
    return url


def _engine_for_url(raw_url: str) -> Engine:
    url = make_url(_normalize_database_url(raw_url))
    kwargs: dict[str, Any] = {}
    if url.get_backend_name() == "sqlite":
        # The batch is applied from a worker thread.
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            # A single shared connection, otherwise each checkout sees an empty database.
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def _dialect_insert(dialect_name: str) -> Callable[..., Any]:
    if dialect_name == "sqlite":
        return sqlite.insert
    if dialect_name == "postgresql":
        return postgresql.insert
    raise PersistenceError(f"Unsupported database dialect for upsert: {dialect_name}")


class StoreTransaction:
    """Write handle bound to one open unit of work."""

    def __init__(self, connection: Connection, clock: Callable[[], datetime]) -> None:
        self._conn = connection
        self._clock = clock
        self._insert = _dialect_insert(connection.dialect.name)

    def upsert(self, external_id: str, attributes: dict[str, Any]) -> UpsertResult:
        """Insert or overwrite the row for *external_id*.

        ``was_created`` reflects whether the row existed before this
        statement within the current transaction.
        """
        values = {column: attributes.get(column) for column in _OVERWRITTEN_COLUMNS}
        if values["coordinates"] is None:
            values["coordinates"] = []
        now = self._clock()

        try:
            existed = (
                self._conn.execute(
                    select(earthquakes.c.id).where(earthquakes.c.external_id == external_id)
                ).first()
                is not None
            )

            stmt = self._insert(earthquakes).values(
                external_id=external_id,
                created_at=now,
                updated_at=now,
                **values,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[earthquakes.c.external_id],
                set_={
                    **{column: stmt.excluded[column] for column in _OVERWRITTEN_COLUMNS},
                    "updated_at": stmt.excluded.updated_at,
                },
            )
            self._conn.execute(stmt)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Upsert of {external_id} failed: {exc}", external_id=external_id) from exc

        return UpsertResult(was_created=not existed)


class EventStore:
    """Persistence for :class:`quakesync.models.SeismicEvent` rows."""

    def __init__(
        self,
        engine: Engine,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._engine = engine
        self._clock = clock

    @classmethod
    def from_url(cls, database_url: str, **kwargs: Any) -> EventStore:
        return cls(_engine_for_url(database_url), **kwargs)

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_schema(self) -> None:
        """Create the events table and its indexes if missing."""
        try:
            metadata.create_all(self._engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not create schema: {exc}") from exc

    def dispose(self) -> None:
        self._engine.dispose()

    @contextmanager
    def unit_of_work(self) -> Iterator[StoreTransaction]:
        """Open one transaction; commit on clean exit, roll back on any error.

        SQLAlchemy errors (including a failed commit) surface as
        :class:`PersistenceError`. Other exceptions also roll back and
        propagate unchanged.
        """
        try:
            with self._engine.begin() as conn:
                yield StoreTransaction(conn, self._clock)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Unit of work rolled back: {exc}") from exc

    def upsert(self, external_id: str, attributes: dict[str, Any]) -> UpsertResult:
        """Upsert a single row in its own unit of work."""
        with self.unit_of_work() as tx:
            return tx.upsert(external_id, attributes)

    def list_recent(self, limit: int = LIST_LIMIT_MAX) -> list[StoredEvent]:
        """Return up to *limit* rows, newest ``occurred_at`` first."""
        limit = max(1, min(int(limit), LIST_LIMIT_MAX))
        query = (
            select(earthquakes)
            .order_by(earthquakes.c.occurred_at.desc(), earthquakes.c.id.desc())
            .limit(limit)
        )
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(query).mappings().all()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Listing events failed: {exc}") from exc
        return [StoredEvent.model_validate(dict(row)) for row in rows]

    def count(self) -> int:
        with self._engine.connect() as conn:
            return int(conn.execute(select(func.count()).select_from(earthquakes)).scalar_one())
