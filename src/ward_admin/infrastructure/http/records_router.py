"""FastAPI router for patient listings and discharge actions."""

from __future__ import annotations

import logging
from datetime import date
from typing import Literal

from fastapi import APIRouter, HTTPException, Query

from ward_admin.application.dto.ward_models import (
    DischargeRequestBody,
    DischargeResponse,
    SpecialtyGroupItem,
    SpecialtyGroupsResponse,
    WardRecordListResponse,
    to_ward_record_item,
)
from ward_admin.application.ports.record_source_port import QueryFailure
from ward_admin.application.services.discharge_service import (
    DischargeOutcome,
    DischargeRequest,
    DischargeService,
    MissingDischargeFieldsError,
)
from ward_admin.application.services.record_listing_service import RecordListingService
from ward_admin.application.services.ward_records import RecordListQuery, RecordSortField
from ward_admin.domain.record_kind import RecordKind
from ward_admin.domain.specialty import Specialty

logger = logging.getLogger(__name__)


def build_records_router(
    *,
    listing_service: RecordListingService,
    discharge_service: DischargeService,
) -> APIRouter:
    """Build router exposing merged record listings and discharge endpoints."""

    router = APIRouter(tags=["records"])

    @router.get("/records/specialties", response_model=SpecialtyGroupsResponse)
    async def list_specialty_groups(
        search: str = "",
        specialty: Specialty | None = None,
        on_date: date | None = Query(default=None, alias="date"),
        sort: RecordSortField = RecordSortField.RECORDED_AT,
        direction: Literal["ascending", "descending"] = "descending",
    ) -> SpecialtyGroupsResponse:
        query = RecordListQuery(
            search=search,
            specialty=specialty,
            on_date=on_date,
            sort_field=sort,
            descending=direction == "descending",
        )
        try:
            groups = await listing_service.list_specialty_groups(query)
        except QueryFailure as exc:
            logger.exception("specialty_groups_fetch_failed")
            raise HTTPException(
                status_code=503,
                detail="Failed to fetch specialties data",
            ) from exc

        return SpecialtyGroupsResponse(
            groups=[
                SpecialtyGroupItem(
                    specialty=group.specialty,
                    records=[to_ward_record_item(record) for record in group.records],
                )
                for group in groups
            ]
        )

    @router.get("/records/active", response_model=WardRecordListResponse)
    async def list_active_records(
        search: str = "",
        specialty: Specialty | None = None,
    ) -> WardRecordListResponse:
        try:
            records = await listing_service.list_active_records(
                RecordListQuery(search=search, specialty=specialty)
            )
        except QueryFailure as exc:
            logger.exception("active_records_fetch_failed")
            raise HTTPException(status_code=503, detail="Failed to fetch active records") from exc

        return WardRecordListResponse(items=[to_ward_record_item(record) for record in records])

    @router.post("/records/{kind}/{mrn}/discharge", response_model=DischargeResponse)
    async def discharge_record(
        kind: RecordKind,
        mrn: str,
        body: DischargeRequestBody,
    ) -> DischargeResponse:
        request = DischargeRequest(
            kind=kind,
            mrn=mrn,
            discharge_date=body.discharge_date,
            discharge_time=body.discharge_time,
            discharge_note=body.discharge_note,
        )
        try:
            outcome = await discharge_service.discharge(request)
        except MissingDischargeFieldsError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except QueryFailure as exc:
            logger.exception("record_discharge_failed kind=%s mrn=%s", kind.value, mrn)
            raise HTTPException(status_code=503, detail="Failed to discharge record") from exc

        if outcome is DischargeOutcome.NOT_FOUND:
            raise HTTPException(status_code=404, detail="record not found")

        return DischargeResponse(ok=True, outcome=outcome)

    return router
