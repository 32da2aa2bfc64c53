"""Port for reading and updating ward record collections."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Any, Protocol

RecordRow = dict[str, Any]


class QueryFailure(RuntimeError):
    """Raised when a count, fetch or update against the record source fails."""


class UnknownRecordFieldError(ValueError):
    """Raised when a filter, ordering or update names a column the collection lacks."""


class Collection(StrEnum):
    """Record collections exposed by the ward record source."""

    PATIENTS = "patients"
    CONSULTATIONS = "consultations"
    CLINIC_APPOINTMENTS = "clinic_appointments"
    DAILY_REPORTS = "daily_reports"


@dataclass(frozen=True)
class FieldRange:
    """Half-open `[lower, upper)` bound on one column; either side may be open."""

    field: str
    lower: datetime | date | None = None
    upper: datetime | date | None = None


@dataclass(frozen=True)
class RecordFilter:
    """Conjunction of equality, membership and range predicates."""

    equals: Mapping[str, object] = field(default_factory=dict)
    one_of: Mapping[str, tuple[object, ...]] = field(default_factory=dict)
    range: FieldRange | None = None


@dataclass(frozen=True)
class RecordOrder:
    """Single-column ordering for fetched rows."""

    field: str
    descending: bool = True


class RecordSourcePort(Protocol):
    """Async contract over the external record store."""

    async def count(self, collection: Collection, filters: RecordFilter) -> int:
        """Return the exact number of rows matching `filters`."""

    async def query(
        self,
        collection: Collection,
        filters: RecordFilter,
        order_by: RecordOrder | None = None,
    ) -> list[RecordRow]:
        """Return full rows matching `filters`, ordered by `order_by` when given."""

    async def update(
        self,
        collection: Collection,
        *,
        mrn: str,
        fields: Mapping[str, object],
    ) -> bool:
        """Partially update the active row of `mrn`; return whether one row changed."""
