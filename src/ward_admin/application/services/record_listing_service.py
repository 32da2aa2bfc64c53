"""Application service for specialty-grouped and discharge-candidate listings."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from zoneinfo import ZoneInfo

from ward_admin.application.ports.record_source_port import (
    Collection,
    RecordFilter,
    RecordOrder,
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
from ward_admin.domain.record_status import AdmissionStatus, ConsultationStatus
from ward_admin.domain.specialty import SPECIALTIES, Specialty


@dataclass(frozen=True)
class SpecialtyGroup:
    """Listing rows filed under one specialty."""

    specialty: Specialty
    records: list[WardRecord]


class RecordListingService:
    """Fetch admissions and consultations, merge them and filter in memory."""

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

    async def list_specialty_groups(self, query: RecordListQuery) -> list[SpecialtyGroup]:
        """Return filtered records grouped under each listed specialty.

        Every specialty gets a group, empty or not, unless `query.specialty`
        narrows the listing to one.
        """

        records = await self._fetch_merged(
            admissions_filter=RecordFilter(),
            consultations_filter=RecordFilter(),
        )
        filtered = filter_records(records, query, timezone=self._timezone)
        specialties = SPECIALTIES if query.specialty is None else (query.specialty,)
        return [
            SpecialtyGroup(
                specialty=specialty,
                records=[record for record in filtered if record.specialty == specialty.value],
            )
            for specialty in specialties
        ]

    async def list_active_records(self, query: RecordListQuery) -> list[WardRecord]:
        """Return active admissions and consultations, i.e. discharge candidates."""

        records = await self._fetch_merged(
            admissions_filter=RecordFilter(
                equals={"patient_status": AdmissionStatus.ACTIVE.value}
            ),
            consultations_filter=RecordFilter(
                equals={"status": ConsultationStatus.ACTIVE.value}
            ),
        )
        return filter_records(records, query, timezone=self._timezone)

    async def _fetch_merged(
        self,
        *,
        admissions_filter: RecordFilter,
        consultations_filter: RecordFilter,
    ) -> list[WardRecord]:
        admission_rows, consultation_rows = await gather_bounded(
            [
                partial(
                    self._record_source.query,
                    Collection.PATIENTS,
                    admissions_filter,
                    RecordOrder(field="admission_date"),
                ),
                partial(
                    self._record_source.query,
                    Collection.CONSULTATIONS,
                    consultations_filter,
                    RecordOrder(field="created_at"),
                ),
            ],
            limit=self._max_concurrency,
        )
        return [
            *(admission_to_record(row) for row in admission_rows),
            *(consultation_to_record(row) for row in consultation_rows),
        ]
