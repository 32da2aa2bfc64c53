"""Application service for discharging admissions and completing consultations."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from enum import StrEnum

from ward_admin.application.ports.record_source_port import Collection, RecordSourcePort
from ward_admin.domain.record_kind import RecordKind
from ward_admin.domain.record_status import AdmissionStatus, ConsultationStatus

NowCallable = Callable[[], datetime]
logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class MissingDischargeFieldsError(ValueError):
    """Raised when an admission discharge lacks its date or time."""


class DischargeOutcome(StrEnum):
    """Result of one discharge/complete request."""

    DISCHARGED = "discharged"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class DischargeRequest:
    """Discharge details; date and time are only required for admissions."""

    kind: RecordKind
    mrn: str
    discharge_date: date | None = None
    discharge_time: time | None = None
    discharge_note: str = ""


class DischargeService:
    """Move one record out of the active census, keyed by MRN.

    Only the MRN's active row is updated. There is no version check: of two
    concurrent discharges of one MRN the first wins and the second finds no
    active row.
    """

    def __init__(self, *, record_source: RecordSourcePort, now: NowCallable = _utc_now) -> None:
        self._record_source = record_source
        self._now = now

    async def discharge(self, request: DischargeRequest) -> DischargeOutcome:
        """Discharge an admission or complete a consultation, by its explicit kind."""

        if request.kind is RecordKind.ADMISSION:
            updated = await self._discharge_admission(request)
        else:
            updated = await self._record_source.update(
                Collection.CONSULTATIONS,
                mrn=request.mrn,
                fields={
                    "status": ConsultationStatus.COMPLETED.value,
                    "updated_at": self._now(),
                },
            )

        outcome = DischargeOutcome.DISCHARGED if updated else DischargeOutcome.NOT_FOUND
        logger.info(
            "record_discharge kind=%s mrn=%s outcome=%s",
            request.kind.value,
            request.mrn,
            outcome.value,
        )
        return outcome

    async def _discharge_admission(self, request: DischargeRequest) -> bool:
        if request.discharge_date is None or request.discharge_time is None:
            raise MissingDischargeFieldsError("discharge_date and discharge_time are required")

        return await self._record_source.update(
            Collection.PATIENTS,
            mrn=request.mrn,
            fields={
                "patient_status": AdmissionStatus.DISCHARGED.value,
                "discharge_date": request.discharge_date,
                "discharge_time": request.discharge_time,
                "discharge_note": request.discharge_note,
                "updated_at": self._now(),
            },
        )
