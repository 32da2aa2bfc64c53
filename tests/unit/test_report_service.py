from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, date, datetime
from uuid import uuid4

import pytest

from ward_admin.application.ports.record_source_port import (
    Collection,
    RecordFilter,
    RecordOrder,
    RecordRow,
)
from ward_admin.application.services.report_service import (
    InvalidReportPeriodError,
    ReportService,
)
from ward_admin.domain.appointment_type import AppointmentType
from ward_admin.domain.specialty import Specialty

_MORNING = datetime(2024, 3, 15, 9, 0, tzinfo=UTC)


class _RecordSourceSpy:
    def __init__(self, rows: Mapping[Collection, list[RecordRow]]) -> None:
        self._rows = rows
        self.query_calls: list[tuple[Collection, RecordFilter, RecordOrder | None]] = []

    async def count(self, collection: Collection, filters: RecordFilter) -> int:
        raise AssertionError("reports never count")

    async def query(
        self,
        collection: Collection,
        filters: RecordFilter,
        order_by: RecordOrder | None = None,
    ) -> list[RecordRow]:
        self.query_calls.append((collection, filters, order_by))
        rows = self._rows.get(collection, [])
        for name, values in filters.one_of.items():
            rows = [row for row in rows if row.get(name) in values]
        return list(rows)

    async def update(
        self,
        collection: Collection,
        *,
        mrn: str,
        fields: Mapping[str, object],
    ) -> bool:
        raise AssertionError("reports never update")


def _admission(mrn: str, name: str, specialty: Specialty) -> RecordRow:
    return {
        "mrn": mrn,
        "patient_name": name,
        "specialty": specialty.value,
        "patient_status": "Active",
        "diagnosis": None,
        "admission_date": _MORNING,
        "updated_at": _MORNING,
    }


def _consultation(mrn: str, name: str, specialty: Specialty) -> RecordRow:
    return {
        "mrn": mrn,
        "patient_name": name,
        "consultation_specialty": specialty.value,
        "status": "Active",
        "requesting_department": "Surgery",
        "created_at": _MORNING,
        "updated_at": _MORNING,
    }


@pytest.mark.asyncio
async def test_period_report_rejects_reversed_dates() -> None:
    source = _RecordSourceSpy({})
    service = ReportService(record_source=source)

    with pytest.raises(InvalidReportPeriodError):
        await service.period_report(from_date=date(2024, 3, 15), to_date=date(2024, 3, 14))

    assert source.query_calls == []


@pytest.mark.asyncio
async def test_period_report_lists_admissions_before_consultations() -> None:
    source = _RecordSourceSpy(
        {
            Collection.PATIENTS: [_admission("A-1", "Nina Reis", Specialty.NEUROLOGY)],
            Collection.CONSULTATIONS: [
                _consultation("C-1", "Otto Lins", Specialty.HEMATOLOGY)
            ],
        }
    )
    service = ReportService(record_source=source, timezone_name="America/Sao_Paulo")

    report = await service.period_report(from_date=date(2024, 3, 1), to_date=date(2024, 3, 15))

    assert [record.mrn for record in report.records] == ["A-1", "C-1"]
    ranges = {collection: filters.range for collection, filters, _ in source.query_calls}
    admission_range = ranges[Collection.PATIENTS]
    assert admission_range is not None
    assert admission_range.field == "admission_date"
    assert admission_range.lower == datetime(2024, 3, 1, 3, 0, tzinfo=UTC)
    assert admission_range.upper == datetime(2024, 3, 16, 3, 0, tzinfo=UTC)
    orders = {collection: order for collection, _, order in source.query_calls}
    assert orders[Collection.CONSULTATIONS] == RecordOrder(field="created_at", descending=False)


@pytest.mark.asyncio
async def test_single_day_period_is_allowed() -> None:
    service = ReportService(record_source=_RecordSourceSpy({}))

    report = await service.period_report(from_date=date(2024, 3, 15), to_date=date(2024, 3, 15))

    assert report.records == []


@pytest.mark.asyncio
async def test_daily_census_resolves_report_patient_names() -> None:
    appointment_id = uuid4()
    report_id = uuid4()
    source = _RecordSourceSpy(
        {
            Collection.PATIENTS: [_admission("A-1", "Paula Brito", Specialty.NEUROLOGY)],
            Collection.CONSULTATIONS: [
                _consultation("C-1", "Rui Faria", Specialty.HEMATOLOGY)
            ],
            Collection.CLINIC_APPOINTMENTS: [
                {
                    "appointment_id": appointment_id,
                    "patient_name": "Sara Mota",
                    "patient_medical_number": "OP-9",
                    "clinic_specialty": "Rheumatology",
                    "appointment_type": "Urgent",
                    "notes": None,
                    "created_at": _MORNING,
                }
            ],
            Collection.DAILY_REPORTS: [
                {
                    "report_id": report_id,
                    "patient_mrn": "A-1",
                    "report_date": date(2024, 3, 15),
                    "report_content": "Stable overnight.",
                    "created_at": _MORNING,
                }
            ],
        }
    )
    service = ReportService(record_source=source)

    census = await service.daily_census(day=date(2024, 3, 15), specialty=Specialty.NEUROLOGY)

    assert [record.mrn for record in census.records] == ["A-1"]
    assert len(census.appointments) == 1
    assert census.appointments[0].appointment_type is AppointmentType.URGENT
    assert [(report.report_id, report.patient_name) for report in census.reports] == [
        (report_id, "Paula Brito")
    ]
    report_filters = [
        filters for collection, filters, _ in source.query_calls
        if collection is Collection.DAILY_REPORTS
    ]
    assert report_filters[0].equals == {"report_date": date(2024, 3, 15)}
