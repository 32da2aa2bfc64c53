"""Application service assembling daily census and period report data."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from functools import partial
from typing import cast
from uuid import UUID
from zoneinfo import ZoneInfo

from ward_admin.application.ports.record_source_port import (
    Collection,
    FieldRange,
    RecordFilter,
    RecordOrder,
    RecordRow,
    RecordSourcePort,
)
from ward_admin.application.services.bounded_fanout import gather_bounded
from ward_admin.application.services.ward_records import (
    RecordListQuery,
    WardRecord,
    admission_to_record,
    consultation_to_record,
    filter_records,
)
from ward_admin.domain.appointment_type import AppointmentType
from ward_admin.domain.specialty import Specialty

logger = logging.getLogger(__name__)


class InvalidReportPeriodError(ValueError):
    """Raised when a report period ends before it starts."""


@dataclass(frozen=True)
class ClinicAppointmentEntry:
    """Clinic appointment booked during the reported day."""

    appointment_id: UUID
    patient_name: str
    patient_medical_number: str
    clinic_specialty: str
    appointment_type: AppointmentType
    notes: str | None
    created_at: datetime


@dataclass(frozen=True)
class DailyReportEntry:
    """Daily progress report filed for one admitted patient."""

    report_id: UUID
    patient_mrn: str
    patient_name: str | None
    report_date: date
    report_content: str
    created_at: datetime


@dataclass(frozen=True)
class DailyCensus:
    """Everything recorded on one ward day."""

    day: date
    records: list[WardRecord]
    appointments: list[ClinicAppointmentEntry]
    reports: list[DailyReportEntry]


@dataclass(frozen=True)
class PeriodReport:
    """Admissions then consultations recorded in an inclusive date period."""

    from_date: date
    to_date: date
    records: list[WardRecord]


def _to_appointment(row: RecordRow) -> ClinicAppointmentEntry:
    return ClinicAppointmentEntry(
        appointment_id=cast(UUID, row["appointment_id"]),
        patient_name=cast(str, row["patient_name"]),
        patient_medical_number=cast(str, row["patient_medical_number"]),
        clinic_specialty=cast(str, row["clinic_specialty"]),
        appointment_type=AppointmentType(cast(str, row["appointment_type"])),
        notes=cast(str | None, row["notes"]),
        created_at=cast(datetime, row["created_at"]),
    )


class ReportService:
    """Build report datasets consumed by the export layer."""

    def __init__(
        self,
        *,
        record_source: RecordSourcePort,
        timezone_name: str = "UTC",
        max_concurrency: int = 8,
    ) -> None:
        self._record_source = record_source
        self._timezone = ZoneInfo(timezone_name)
        self._max_concurrency = max_concurrency

    async def daily_census(self, *, day: date, specialty: Specialty | None = None) -> DailyCensus:
        """Return admissions, consultations, appointments and reports of one local day."""

        admission_rows, consultation_rows, appointment_rows, report_rows = await gather_bounded(
            [
                partial(
                    self._record_source.query,
                    Collection.PATIENTS,
                    RecordFilter(range=self._local_range("admission_date", day, day)),
                    RecordOrder(field="admission_date"),
                ),
                partial(
                    self._record_source.query,
                    Collection.CONSULTATIONS,
                    RecordFilter(range=self._local_range("created_at", day, day)),
                    RecordOrder(field="created_at"),
                ),
                partial(
                    self._record_source.query,
                    Collection.CLINIC_APPOINTMENTS,
                    RecordFilter(range=self._local_range("created_at", day, day)),
                    RecordOrder(field="created_at"),
                ),
                partial(
                    self._record_source.query,
                    Collection.DAILY_REPORTS,
                    RecordFilter(equals={"report_date": day}),
                    RecordOrder(field="created_at"),
                ),
            ],
            limit=self._max_concurrency,
        )

        records = [
            *(admission_to_record(row) for row in admission_rows),
            *(consultation_to_record(row) for row in consultation_rows),
        ]
        if specialty is not None:
            records = filter_records(
                records,
                RecordListQuery(specialty=specialty),
                timezone=self._timezone,
            )

        return DailyCensus(
            day=day,
            records=records,
            appointments=[_to_appointment(row) for row in appointment_rows],
            reports=await self._with_patient_names(report_rows),
        )

    async def period_report(self, *, from_date: date, to_date: date) -> PeriodReport:
        """Return admissions and consultations recorded between two dates, inclusive."""

        if to_date < from_date:
            raise InvalidReportPeriodError("to_date must be greater than or equal to from_date")

        admission_rows, consultation_rows = await gather_bounded(
            [
                partial(
                    self._record_source.query,
                    Collection.PATIENTS,
                    RecordFilter(range=self._local_range("admission_date", from_date, to_date)),
                    RecordOrder(field="admission_date", descending=False),
                ),
                partial(
                    self._record_source.query,
                    Collection.CONSULTATIONS,
                    RecordFilter(range=self._local_range("created_at", from_date, to_date)),
                    RecordOrder(field="created_at", descending=False),
                ),
            ],
            limit=self._max_concurrency,
        )
        logger.info(
            "period_report_built from_date=%s to_date=%s admissions=%s consultations=%s",
            from_date.isoformat(),
            to_date.isoformat(),
            len(admission_rows),
            len(consultation_rows),
        )
        return PeriodReport(
            from_date=from_date,
            to_date=to_date,
            records=[
                *(admission_to_record(row) for row in admission_rows),
                *(consultation_to_record(row) for row in consultation_rows),
            ],
        )

    def _local_range(self, field: str, first_day: date, last_day: date) -> FieldRange:
        """Bound `field` to `[first_day 00:00, last_day+1 00:00)` in the ward timezone."""

        lower = datetime.combine(first_day, time.min, tzinfo=self._timezone)
        upper = datetime.combine(last_day + timedelta(days=1), time.min, tzinfo=self._timezone)
        return FieldRange(field=field, lower=lower, upper=upper)

    async def _with_patient_names(self, report_rows: list[RecordRow]) -> list[DailyReportEntry]:
        mrns = tuple(sorted({cast(str, row["patient_mrn"]) for row in report_rows}))
        names: dict[str, str] = {}
        if mrns:
            patient_rows = await self._record_source.query(
                Collection.PATIENTS,
                RecordFilter(one_of={"mrn": mrns}),
            )
            names = {row["mrn"]: row["patient_name"] for row in patient_rows}

        return [
            DailyReportEntry(
                report_id=cast(UUID, row["report_id"]),
                patient_mrn=cast(str, row["patient_mrn"]),
                patient_name=names.get(cast(str, row["patient_mrn"])),
                report_date=cast(date, row["report_date"]),
                report_content=cast(str, row["report_content"]),
                created_at=cast(datetime, row["created_at"]),
            )
            for row in report_rows
        ]
