"""FastAPI router for census and discharge statistics endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query

from ward_admin.application.dto.ward_models import (
    ActiveStatsResponse,
    CategoryCountsModel,
    CensusResponse,
    DischargeStatsResponse,
    SpecialtyActiveStatItem,
    SpecialtyDischargeStatItem,
)
from ward_admin.application.ports.record_source_port import QueryFailure
from ward_admin.application.services.discharge_stats_refresh import (
    DischargeStatsRefreshCoordinator,
    DischargeStatsSnapshot,
)
from ward_admin.application.services.specialty_stats_service import SpecialtyStatsService
from ward_admin.domain.time_window import TimeWindowName

logger = logging.getLogger(__name__)


def build_stats_router(
    *,
    stats_service: SpecialtyStatsService,
    refresh_coordinator: DischargeStatsRefreshCoordinator,
) -> APIRouter:
    """Build router exposing dashboard and discharge statistics endpoints."""

    router = APIRouter(tags=["stats"])

    @router.get("/stats/census", response_model=CensusResponse)
    async def get_census() -> CensusResponse:
        try:
            totals = await stats_service.compute_census()
        except QueryFailure as exc:
            logger.exception("census_fetch_failed")
            raise HTTPException(status_code=503, detail="Failed to fetch census") from exc

        return CensusResponse(
            admissions=totals.admissions,
            consultations=totals.consultations,
            total_active=totals.total_active,
        )

    @router.get("/stats/active", response_model=ActiveStatsResponse)
    async def get_active_stats() -> ActiveStatsResponse:
        try:
            stats = await stats_service.compute_active_stats()
        except QueryFailure as exc:
            logger.exception("active_stats_fetch_failed")
            raise HTTPException(
                status_code=503,
                detail="Failed to fetch specialty statistics",
            ) from exc

        return ActiveStatsResponse(
            items=[
                SpecialtyActiveStatItem(
                    specialty=stat.specialty,
                    active_count=stat.active_count,
                    admissions=stat.admissions,
                    consultations=stat.consultations,
                )
                for stat in stats
            ]
        )

    @router.get("/stats/discharges", response_model=DischargeStatsResponse)
    async def get_discharge_stats(
        window: TimeWindowName = Query(default=TimeWindowName.TODAY),
    ) -> DischargeStatsResponse:
        try:
            snapshot = await refresh_coordinator.refresh(window)
        except QueryFailure as exc:
            logger.exception("discharge_stats_fetch_failed window=%s", window.value)
            raise HTTPException(
                status_code=503,
                detail="Failed to fetch discharge statistics",
            ) from exc

        return _to_discharge_response(snapshot)

    @router.get("/stats/discharges/latest", response_model=DischargeStatsResponse)
    async def get_latest_discharge_stats() -> DischargeStatsResponse:
        snapshot = refresh_coordinator.latest
        if snapshot is None:
            raise HTTPException(status_code=404, detail="no discharge statistics computed yet")
        return _to_discharge_response(snapshot)

    return router


def _to_discharge_response(snapshot: DischargeStatsSnapshot) -> DischargeStatsResponse:
    return DischargeStatsResponse(
        window=snapshot.window_name,
        window_start=snapshot.window.start,
        window_end=snapshot.window.end,
        generation=snapshot.generation,
        published=snapshot.published,
        computed_at=snapshot.computed_at,
        items=[
            SpecialtyDischargeStatItem(
                specialty=stat.specialty,
                discharged_in_window=CategoryCountsModel(
                    admissions=stat.discharged_in_window.admissions,
                    consultations=stat.discharged_in_window.consultations,
                ),
                total_discharged=CategoryCountsModel(
                    admissions=stat.total_discharged.admissions,
                    consultations=stat.total_discharged.consultations,
                ),
            )
            for stat in snapshot.stats
        ],
    )
