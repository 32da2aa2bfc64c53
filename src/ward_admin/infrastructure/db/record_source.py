"""SQLAlchemy adapter implementing the ward record source port."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Final, cast

import sqlalchemy as sa
from sqlalchemy.engine import CursorResult, RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ward_admin.application.ports.record_source_port import (
    Collection,
    QueryFailure,
    RecordFilter,
    RecordOrder,
    RecordRow,
    RecordSourcePort,
    UnknownRecordFieldError,
)
from ward_admin.domain.record_status import AdmissionStatus, ConsultationStatus
from ward_admin.infrastructure.db.metadata import (
    clinic_appointments,
    consultations,
    daily_reports,
    patients,
)

_TABLES: Final[dict[Collection, sa.Table]] = {
    Collection.PATIENTS: patients,
    Collection.CONSULTATIONS: consultations,
    Collection.CLINIC_APPOINTMENTS: clinic_appointments,
    Collection.DAILY_REPORTS: daily_reports,
}
# At most one Active row per mrn; earlier episodes keep their closed status.
_ACTIVE_STATUS: Final[dict[Collection, tuple[str, str]]] = {
    Collection.PATIENTS: ("patient_status", AdmissionStatus.ACTIVE.value),
    Collection.CONSULTATIONS: ("status", ConsultationStatus.ACTIVE.value),
}


class RecordSourceError(QueryFailure):
    """Raised when the database rejects or fails a record source statement."""


def _to_utc(value: object) -> object:
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(UTC)
    return value


def _to_row(row: RowMapping) -> RecordRow:
    # SQLite drops tzinfo on the way back; stored values are UTC.
    return {
        key: value.replace(tzinfo=UTC)
        if isinstance(value, datetime) and value.tzinfo is None
        else value
        for key, value in row.items()
    }


def _column(table: sa.Table, name: str) -> sa.Column[Any]:
    column = table.c.get(name)
    if column is None:
        raise UnknownRecordFieldError(f"{table.name} has no column {name!r}")
    return column


def _where_clauses(table: sa.Table, filters: RecordFilter) -> list[sa.ColumnElement[bool]]:
    clauses: list[sa.ColumnElement[bool]] = [
        _column(table, name) == _to_utc(value) for name, value in filters.equals.items()
    ]
    clauses.extend(
        _column(table, name).in_([_to_utc(value) for value in values])
        for name, values in filters.one_of.items()
    )
    if filters.range is not None:
        column = _column(table, filters.range.field)
        if filters.range.lower is not None:
            clauses.append(column >= _to_utc(filters.range.lower))
        if filters.range.upper is not None:
            clauses.append(column < _to_utc(filters.range.upper))
    return clauses


class SqlAlchemyRecordSource(RecordSourcePort):
    """Record source backed by SQLAlchemy async sessions, one session per call."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def count(self, collection: Collection, filters: RecordFilter) -> int:
        """Return exact count of rows in `collection` matching `filters`."""

        table = _TABLES[collection]
        statement = sa.select(sa.func.count()).select_from(table).where(
            *_where_clauses(table, filters)
        )

        try:
            async with self._session_factory() as session:
                return int((await session.execute(statement)).scalar_one())
        except SQLAlchemyError as error:
            raise RecordSourceError(f"count failed on {collection.value}") from error

    async def query(
        self,
        collection: Collection,
        filters: RecordFilter,
        order_by: RecordOrder | None = None,
    ) -> list[RecordRow]:
        """Return full rows of `collection` matching `filters`."""

        table = _TABLES[collection]
        statement = sa.select(table).where(*_where_clauses(table, filters))
        if order_by is not None:
            column = _column(table, order_by.field)
            statement = statement.order_by(column.desc() if order_by.descending else column.asc())

        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
        except SQLAlchemyError as error:
            raise RecordSourceError(f"query failed on {collection.value}") from error

        return [_to_row(row) for row in result.mappings().all()]

    async def update(
        self,
        collection: Collection,
        *,
        mrn: str,
        fields: Mapping[str, object],
    ) -> bool:
        """Apply a partial update to the active row of `mrn`, without version checks."""

        if collection not in _ACTIVE_STATUS:
            raise UnknownRecordFieldError(f"{collection.value} is not keyed by mrn")
        if not fields:
            raise ValueError("update requires at least one field")

        table = _TABLES[collection]
        values = {_column(table, name).name: _to_utc(value) for name, value in fields.items()}
        status_column, active_value = _ACTIVE_STATUS[collection]
        statement = (
            sa.update(table)
            .where(table.c.mrn == mrn, table.c[status_column] == active_value)
            .values(**values)
        )

        try:
            async with self._session_factory() as session:
                result = cast(CursorResult[Any], await session.execute(statement))
                await session.commit()
        except SQLAlchemyError as error:
            raise RecordSourceError(f"update failed on {collection.value}") from error

        return int(result.rowcount or 0) == 1
