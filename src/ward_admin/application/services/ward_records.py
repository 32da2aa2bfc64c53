"""Normalized admission/consultation rows and the in-memory listing filters."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from enum import StrEnum
from typing import Any

from ward_admin.domain.record_kind import RecordKind
from ward_admin.domain.specialty import Specialty


class RecordSortField(StrEnum):
    """Columns listing views may sort normalized records by."""

    MRN = "mrn"
    PATIENT_NAME = "patient_name"
    SPECIALTY = "specialty"
    PATIENT_STATUS = "patient_status"
    RECORDED_AT = "recorded_at"
    UPDATED_AT = "updated_at"


@dataclass(frozen=True)
class WardRecord:
    """One admission or consultation in the shared listing shape.

    `kind` is fixed when the row is ingested and decides which collection a
    discharge writes to.
    """

    kind: RecordKind
    mrn: str
    patient_name: str
    specialty: str
    patient_status: str
    diagnosis: str | None
    recorded_at: datetime
    updated_at: datetime
    age: int | None = None
    gender: str | None = None
    assigned_doctor: str | None = None


@dataclass(frozen=True)
class RecordListQuery:
    """Immutable listing parameters selected by the caller."""

    search: str = ""
    specialty: Specialty | None = None
    on_date: date | None = None
    sort_field: RecordSortField = RecordSortField.RECORDED_AT
    descending: bool = True


def admission_to_record(row: Mapping[str, Any]) -> WardRecord:
    """Normalize a `patients` row."""

    return WardRecord(
        kind=RecordKind.ADMISSION,
        mrn=row["mrn"],
        patient_name=row["patient_name"],
        specialty=row["specialty"],
        patient_status=row["patient_status"],
        diagnosis=row.get("diagnosis"),
        recorded_at=row["admission_date"],
        updated_at=row["updated_at"],
        age=row.get("age"),
        gender=row.get("gender"),
        assigned_doctor=row.get("assigned_doctor"),
    )


def consultation_to_record(row: Mapping[str, Any]) -> WardRecord:
    """Normalize a `consultations` row onto admission field names."""

    return WardRecord(
        kind=RecordKind.CONSULTATION,
        mrn=row["mrn"],
        patient_name=row["patient_name"],
        specialty=row["consultation_specialty"],
        patient_status=row["status"],
        diagnosis=row.get("requesting_department"),
        recorded_at=row["created_at"],
        updated_at=row["updated_at"],
        age=row.get("age"),
        gender=row.get("gender"),
    )


def matches_search(record: WardRecord, search: str) -> bool:
    """Case-insensitive name match, or case-sensitive MRN substring match."""

    if not search:
        return True
    return search.lower() in record.patient_name.lower() or search in record.mrn


def filter_records(
    records: Iterable[WardRecord],
    query: RecordListQuery,
    *,
    timezone: tzinfo,
) -> list[WardRecord]:
    """Apply search, specialty and local-date filters, then sort per `query`."""

    filtered = [
        record
        for record in records
        if matches_search(record, query.search)
        and (query.specialty is None or record.specialty == query.specialty.value)
        and (
            query.on_date is None
            or record.recorded_at.astimezone(timezone).date() == query.on_date
        )
    ]
    return sort_records(filtered, field=query.sort_field, descending=query.descending)


def sort_records(
    records: Iterable[WardRecord],
    *,
    field: RecordSortField,
    descending: bool,
) -> list[WardRecord]:
    """Stable sort of records by one field."""

    return sorted(records, key=lambda record: getattr(record, field.value), reverse=descending)
