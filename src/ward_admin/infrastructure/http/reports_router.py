"""FastAPI router serving report datasets to the export layer."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, HTTPException, Query

from ward_admin.application.dto.ward_models import (
    ClinicAppointmentItem,
    DailyCensusResponse,
    DailyReportItem,
    PeriodReportResponse,
    to_ward_record_item,
)
from ward_admin.application.ports.record_source_port import QueryFailure
from ward_admin.application.services.report_service import (
    InvalidReportPeriodError,
    ReportService,
)
from ward_admin.domain.specialty import Specialty

logger = logging.getLogger(__name__)


def build_reports_router(*, report_service: ReportService) -> APIRouter:
    """Build router exposing daily census and period report data."""

    router = APIRouter(tags=["reports"])

    @router.get("/reports/daily", response_model=DailyCensusResponse)
    async def get_daily_census(
        day: date = Query(alias="date"),
        specialty: Specialty | None = None,
    ) -> DailyCensusResponse:
        try:
            census = await report_service.daily_census(day=day, specialty=specialty)
        except QueryFailure as exc:
            logger.exception("daily_census_fetch_failed day=%s", day.isoformat())
            raise HTTPException(status_code=503, detail="Failed to fetch daily census") from exc

        return DailyCensusResponse(
            day=census.day,
            records=[to_ward_record_item(record) for record in census.records],
            appointments=[
                ClinicAppointmentItem(
                    appointment_id=item.appointment_id,
                    patient_name=item.patient_name,
                    patient_medical_number=item.patient_medical_number,
                    clinic_specialty=item.clinic_specialty,
                    appointment_type=item.appointment_type,
                    notes=item.notes,
                    created_at=item.created_at,
                )
                for item in census.appointments
            ],
            reports=[
                DailyReportItem(
                    report_id=item.report_id,
                    patient_mrn=item.patient_mrn,
                    patient_name=item.patient_name,
                    report_date=item.report_date,
                    report_content=item.report_content,
                    created_at=item.created_at,
                )
                for item in census.reports
            ],
        )

    @router.get("/reports/period", response_model=PeriodReportResponse)
    async def get_period_report(from_date: date, to_date: date) -> PeriodReportResponse:
        try:
            report = await report_service.period_report(from_date=from_date, to_date=to_date)
        except InvalidReportPeriodError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except QueryFailure as exc:
            logger.exception(
                "period_report_fetch_failed from_date=%s to_date=%s",
                from_date.isoformat(),
                to_date.isoformat(),
            )
            raise HTTPException(status_code=503, detail="Failed to generate report") from exc

        return PeriodReportResponse(
            from_date=report.from_date,
            to_date=report.to_date,
            records=[to_ward_record_item(record) for record in report.records],
        )

    return router
