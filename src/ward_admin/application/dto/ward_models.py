"""Pydantic models for ward statistics, listing and report endpoints."""

from __future__ import annotations

from datetime import date, datetime, time
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ward_admin.application.services.discharge_service import DischargeOutcome
from ward_admin.application.services.ward_records import WardRecord
from ward_admin.domain.appointment_type import AppointmentType
from ward_admin.domain.record_kind import RecordKind
from ward_admin.domain.specialty import Specialty
from ward_admin.domain.time_window import TimeWindowName


class StrictModel(BaseModel):
    """Base model with strict unknown-field rejection."""

    model_config = ConfigDict(extra="forbid")


class CensusResponse(StrictModel):
    """Ward-wide active totals shown on the main dashboard."""

    admissions: int = Field(ge=0)
    consultations: int = Field(ge=0)
    total_active: int = Field(ge=0)


class SpecialtyActiveStatItem(StrictModel):
    """One specialty row of the active census."""

    specialty: Specialty
    active_count: int = Field(gt=0)
    admissions: int = Field(ge=0)
    consultations: int = Field(ge=0)


class ActiveStatsResponse(StrictModel):
    items: list[SpecialtyActiveStatItem]


class CategoryCountsModel(StrictModel):
    admissions: int = Field(ge=0)
    consultations: int = Field(ge=0)


class SpecialtyDischargeStatItem(StrictModel):
    """One specialty row of the discharge statistics."""

    specialty: Specialty
    discharged_in_window: CategoryCountsModel
    total_discharged: CategoryCountsModel


class DischargeStatsResponse(StrictModel):
    """Discharge statistics for one window plus the refresh generation that built them."""

    window: TimeWindowName
    window_start: datetime | None
    window_end: datetime | None
    generation: int = Field(ge=1)
    published: bool
    computed_at: datetime
    items: list[SpecialtyDischargeStatItem]


class WardRecordItem(StrictModel):
    """Normalized admission or consultation row."""

    kind: RecordKind
    mrn: str
    patient_name: str
    specialty: str
    patient_status: str
    diagnosis: str | None
    recorded_at: datetime
    updated_at: datetime
    age: int | None
    gender: str | None
    assigned_doctor: str | None


class SpecialtyGroupItem(StrictModel):
    specialty: Specialty
    records: list[WardRecordItem]


class SpecialtyGroupsResponse(StrictModel):
    groups: list[SpecialtyGroupItem]


class WardRecordListResponse(StrictModel):
    items: list[WardRecordItem]


class DischargeRequestBody(StrictModel):
    """Discharge form payload; date and time only matter for admissions."""

    discharge_date: date | None = None
    discharge_time: time | None = None
    discharge_note: str = ""


class DischargeResponse(StrictModel):
    ok: bool
    outcome: DischargeOutcome


class ClinicAppointmentItem(StrictModel):
    appointment_id: UUID
    patient_name: str
    patient_medical_number: str
    clinic_specialty: str
    appointment_type: AppointmentType
    notes: str | None
    created_at: datetime


class DailyReportItem(StrictModel):
    report_id: UUID
    patient_mrn: str
    patient_name: str | None
    report_date: date
    report_content: str
    created_at: datetime


class DailyCensusResponse(StrictModel):
    """Daily census data consumed by the daily report export."""

    day: date
    records: list[WardRecordItem]
    appointments: list[ClinicAppointmentItem]
    reports: list[DailyReportItem]


class PeriodReportResponse(StrictModel):
    """Period report data consumed by the period report export."""

    from_date: date
    to_date: date
    records: list[WardRecordItem]


def to_ward_record_item(record: WardRecord) -> WardRecordItem:
    """Map a normalized service-layer record onto its response model."""

    return WardRecordItem(
        kind=record.kind,
        mrn=record.mrn,
        patient_name=record.patient_name,
        specialty=record.specialty,
        patient_status=record.patient_status,
        diagnosis=record.diagnosis,
        recorded_at=record.recorded_at,
        updated_at=record.updated_at,
        age=record.age,
        gender=record.gender,
        assigned_doctor=record.assigned_doctor,
    )
