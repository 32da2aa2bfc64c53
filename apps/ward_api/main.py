"""ward-api entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI

from ward_admin.application.ports.record_source_port import RecordSourcePort
from ward_admin.application.services.discharge_service import DischargeService
from ward_admin.application.services.discharge_stats_refresh import (
    DischargeStatsRefreshCoordinator,
)
from ward_admin.application.services.record_listing_service import RecordListingService
from ward_admin.application.services.report_service import ReportService
from ward_admin.application.services.specialty_stats_service import SpecialtyStatsService
from ward_admin.config.settings import load_settings
from ward_admin.infrastructure.db.record_source import SqlAlchemyRecordSource
from ward_admin.infrastructure.db.session import create_session_factory
from ward_admin.infrastructure.http.records_router import build_records_router
from ward_admin.infrastructure.http.reports_router import build_reports_router
from ward_admin.infrastructure.http.stats_router import build_stats_router
from ward_admin.infrastructure.logging import configure_logging

logger = logging.getLogger(__name__)


def build_record_source(database_url: str) -> RecordSourcePort:
    """Build the SQLAlchemy-backed record source for `database_url`."""

    return SqlAlchemyRecordSource(create_session_factory(database_url, pool_pre_ping=True))


def create_app(
    *,
    record_source: RecordSourcePort | None = None,
    database_url: str | None = None,
    timezone_name: str | None = None,
    max_concurrency: int | None = None,
) -> FastAPI:
    """Create FastAPI app for ward statistics, listings, discharges and reports."""

    should_load_settings = (
        (record_source is None and database_url is None)
        or timezone_name is None
        or max_concurrency is None
    )
    if should_load_settings:
        settings = load_settings()
        configure_logging(level=settings.log_level)
        if database_url is None:
            database_url = settings.database_url
        if timezone_name is None:
            timezone_name = settings.ward_timezone
        if max_concurrency is None:
            max_concurrency = settings.stats_max_concurrency

    if record_source is None:
        assert database_url is not None
        record_source = build_record_source(database_url)
    assert timezone_name is not None
    assert max_concurrency is not None

    stats_service = SpecialtyStatsService(
        record_source=record_source,
        timezone_name=timezone_name,
        max_concurrency=max_concurrency,
    )

    app = FastAPI(title="ward-api")
    app.include_router(
        build_stats_router(
            stats_service=stats_service,
            refresh_coordinator=DischargeStatsRefreshCoordinator(stats_service=stats_service),
        )
    )
    app.include_router(
        build_records_router(
            listing_service=RecordListingService(
                record_source=record_source,
                timezone_name=timezone_name,
                max_concurrency=max_concurrency,
            ),
            discharge_service=DischargeService(record_source=record_source),
        )
    )
    app.include_router(
        build_reports_router(
            report_service=ReportService(
                record_source=record_source,
                timezone_name=timezone_name,
                max_concurrency=max_concurrency,
            )
        )
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    logger.info(
        "ward_api_created timezone=%s max_concurrency=%s",
        timezone_name,
        max_concurrency,
    )
    return app


def run_asgi_server() -> None:
    """Run ward-api as a long-lived ASGI process using application factory mode."""

    settings = load_settings()
    uvicorn.run(
        "apps.ward_api.main:create_app",
        host=settings.api_host,
        port=settings.api_port,
        factory=True,
    )


def main() -> None:
    """Run ward-api runtime process."""

    run_asgi_server()


if __name__ == "__main__":
    main()
