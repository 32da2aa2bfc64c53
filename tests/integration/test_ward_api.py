from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic.config import Config
from fastapi.testclient import TestClient

from alembic import command
from apps.ward_api.main import create_app
from ward_admin.application.ports.record_source_port import (
    Collection,
    QueryFailure,
    RecordFilter,
    RecordOrder,
    RecordRow,
    RecordSourcePort,
)
from ward_admin.infrastructure.db.metadata import consultations, patients
from ward_admin.infrastructure.db.record_source import SqlAlchemyRecordSource
from ward_admin.infrastructure.db.session import create_session_factory


def _upgrade_head(tmp_path: Path, filename: str) -> tuple[str, str]:
    db_path = tmp_path / filename
    sync_url = f"sqlite+pysqlite:///{db_path}"
    async_url = f"sqlite+aiosqlite:///{db_path}"

    alembic_config = Config("alembic.ini")
    alembic_config.set_main_option("sqlalchemy.url", sync_url)
    command.upgrade(alembic_config, "head")
    return sync_url, async_url


def _insert_admission(
    connection: sa.Connection,
    *,
    mrn: str,
    name: str,
    specialty: str,
    status: str = "Active",
    admitted_at: datetime,
    updated_at: datetime | None = None,
) -> None:
    connection.execute(
        sa.insert(patients).values(
            mrn=mrn,
            patient_name=name,
            specialty=specialty,
            patient_status=status,
            diagnosis="Observation",
            admission_date=admitted_at,
            updated_at=updated_at or admitted_at,
        )
    )


def _insert_consultation(
    connection: sa.Connection,
    *,
    mrn: str,
    name: str,
    specialty: str,
    status: str = "Active",
    created_at: datetime,
) -> None:
    connection.execute(
        sa.insert(consultations).values(
            mrn=mrn,
            patient_name=name,
            consultation_specialty=specialty,
            status=status,
            requesting_department="Emergency",
            created_at=created_at,
            updated_at=created_at,
        )
    )


def _seed_neurology_scenario(sync_url: str) -> None:
    admitted_at = datetime(2024, 3, 15, 8, 0, tzinfo=UTC)
    engine = sa.create_engine(sync_url)
    with engine.begin() as connection:
        for index in range(3):
            _insert_admission(
                connection,
                mrn=f"A-{index}",
                name=f"Neuro Patient {index}",
                specialty="Neurology",
                admitted_at=admitted_at,
            )
        for index in range(2):
            _insert_consultation(
                connection,
                mrn=f"C-{index}",
                name=f"Neuro Consult {index}",
                specialty="Neurology",
                created_at=admitted_at,
            )
        _insert_admission(
            connection,
            mrn="H-1",
            name="Heme Discharged",
            specialty="Hematology",
            status="Discharged",
            admitted_at=datetime(2024, 3, 1, 8, 0, tzinfo=UTC),
            updated_at=datetime(2024, 3, 5, 8, 0, tzinfo=UTC),
        )
    engine.dispose()


def _build_client(record_source: RecordSourcePort) -> TestClient:
    app = create_app(record_source=record_source, timezone_name="UTC", max_concurrency=4)
    return TestClient(app)


def _sqlite_source(async_url: str) -> SqlAlchemyRecordSource:
    return SqlAlchemyRecordSource(create_session_factory(async_url))


class _FailingRecordSource:
    async def count(self, collection: Collection, filters: RecordFilter) -> int:
        raise QueryFailure(f"count failed on {collection.value}")

    async def query(
        self,
        collection: Collection,
        filters: RecordFilter,
        order_by: RecordOrder | None = None,
    ) -> list[RecordRow]:
        raise QueryFailure(f"query failed on {collection.value}")

    async def update(
        self,
        collection: Collection,
        *,
        mrn: str,
        fields: Mapping[str, object],
    ) -> bool:
        raise QueryFailure(f"update failed on {collection.value}")


@pytest.mark.asyncio
async def test_health_endpoint(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "ward_api_health.db")

    with _build_client(_sqlite_source(async_url)) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_active_stats_and_census_endpoints(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "ward_api_active_stats.db")
    _seed_neurology_scenario(sync_url)

    with _build_client(_sqlite_source(async_url)) as client:
        active = client.get("/stats/active")
        census = client.get("/stats/census")

    assert active.status_code == 200
    assert active.json() == {
        "items": [
            {
                "specialty": "Neurology",
                "active_count": 5,
                "admissions": 3,
                "consultations": 2,
            }
        ]
    }
    assert census.status_code == 200
    assert census.json() == {"admissions": 3, "consultations": 2, "total_active": 5}


@pytest.mark.asyncio
async def test_discharge_stats_for_all_window_and_latest_snapshot(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "ward_api_discharge_stats.db")
    _seed_neurology_scenario(sync_url)

    with _build_client(_sqlite_source(async_url)) as client:
        before = client.get("/stats/discharges/latest")
        response = client.get("/stats/discharges?window=all")
        latest = client.get("/stats/discharges/latest")

    assert before.status_code == 404
    assert response.status_code == 200
    payload = response.json()
    assert payload["window"] == "all"
    assert payload["window_start"] is None
    assert payload["window_end"] is None
    assert payload["generation"] == 1
    assert payload["published"] is True
    assert payload["items"] == [
        {
            "specialty": "Hematology",
            "discharged_in_window": {"admissions": 1, "consultations": 0},
            "total_discharged": {"admissions": 1, "consultations": 0},
        }
    ]
    assert latest.json() == payload


@pytest.mark.asyncio
async def test_discharge_stats_reject_unknown_window(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "ward_api_bad_window.db")

    with _build_client(_sqlite_source(async_url)) as client:
        response = client.get("/stats/discharges?window=year")

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_specialty_listing_groups_and_filters(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "ward_api_specialties.db")
    _seed_neurology_scenario(sync_url)

    with _build_client(_sqlite_source(async_url)) as client:
        all_groups = client.get("/records/specialties")
        narrowed = client.get(
            "/records/specialties",
            params={
                "specialty": "Neurology",
                "search": "consult",
                "date": "2024-03-15",
                "sort": "mrn",
                "direction": "ascending",
            },
        )

    assert all_groups.status_code == 200
    groups = all_groups.json()["groups"]
    assert len(groups) == 11
    by_specialty = {group["specialty"]: group["records"] for group in groups}
    assert len(by_specialty["Neurology"]) == 5
    assert [record["mrn"] for record in by_specialty["Hematology"]] == ["H-1"]

    assert narrowed.status_code == 200
    narrowed_groups = narrowed.json()["groups"]
    assert [group["specialty"] for group in narrowed_groups] == ["Neurology"]
    records = narrowed_groups[0]["records"]
    assert [record["mrn"] for record in records] == ["C-0", "C-1"]
    assert {record["kind"] for record in records} == {"consultation"}


@pytest.mark.asyncio
async def test_discharge_admission_and_complete_consultation(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "ward_api_discharge.db")
    _seed_neurology_scenario(sync_url)

    with _build_client(_sqlite_source(async_url)) as client:
        admission = client.post(
            "/records/admission/A-0/discharge",
            json={
                "discharge_date": "2024-03-16",
                "discharge_time": "10:30:00",
                "discharge_note": "Discharged home.",
            },
        )
        consultation = client.post("/records/consultation/C-0/discharge", json={})
        active = client.get("/records/active", params={"specialty": "Neurology"})
        census = client.get("/stats/census")

    assert admission.status_code == 200
    assert admission.json() == {"ok": True, "outcome": "discharged"}
    assert consultation.status_code == 200
    assert {record["mrn"] for record in active.json()["items"]} == {"A-1", "A-2", "C-1"}
    assert census.json() == {"admissions": 2, "consultations": 1, "total_active": 3}

    engine = sa.create_engine(sync_url)
    with engine.connect() as connection:
        row = connection.execute(
            sa.select(
                patients.c.patient_status,
                patients.c.discharge_note,
            ).where(patients.c.mrn == "A-0")
        ).one()
    engine.dispose()
    assert row.patient_status == "Discharged"
    assert row.discharge_note == "Discharged home."


@pytest.mark.asyncio
async def test_discharge_validation_and_not_found(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "ward_api_discharge_errors.db")
    _seed_neurology_scenario(sync_url)

    with _build_client(_sqlite_source(async_url)) as client:
        missing_fields = client.post(
            "/records/admission/A-0/discharge",
            json={"discharge_date": "2024-03-16"},
        )
        unknown_mrn = client.post("/records/consultation/C-404/discharge", json={})
        unknown_kind = client.post("/records/transfer/A-0/discharge", json={})

    assert missing_fields.status_code == 422
    assert unknown_mrn.status_code == 404
    assert unknown_kind.status_code == 422


@pytest.mark.asyncio
async def test_period_report_endpoint(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "ward_api_period_report.db")
    _seed_neurology_scenario(sync_url)

    with _build_client(_sqlite_source(async_url)) as client:
        report = client.get(
            "/reports/period",
            params={"from_date": "2024-03-15", "to_date": "2024-03-15"},
        )
        reversed_period = client.get(
            "/reports/period",
            params={"from_date": "2024-03-15", "to_date": "2024-03-01"},
        )

    assert report.status_code == 200
    kinds = [record["kind"] for record in report.json()["records"]]
    assert kinds == ["admission"] * 3 + ["consultation"] * 2
    assert reversed_period.status_code == 422


@pytest.mark.asyncio
async def test_daily_census_endpoint_filters_by_specialty(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "ward_api_daily_census.db")
    _seed_neurology_scenario(sync_url)

    with _build_client(_sqlite_source(async_url)) as client:
        neurology = client.get(
            "/reports/daily",
            params={"date": "2024-03-15", "specialty": "Neurology"},
        )
        hematology = client.get(
            "/reports/daily",
            params={"date": "2024-03-15", "specialty": "Hematology"},
        )

    assert neurology.status_code == 200
    assert len(neurology.json()["records"]) == 5
    assert neurology.json()["appointments"] == []
    assert hematology.json()["records"] == []


@pytest.mark.asyncio
async def test_record_source_failures_map_to_service_unavailable() -> None:
    with _build_client(_FailingRecordSource()) as client:
        active = client.get("/stats/active")
        discharges = client.get("/stats/discharges?window=week")
        listing = client.get("/records/specialties")
        discharge = client.post("/records/consultation/C-1/discharge", json={})
        report = client.get(
            "/reports/period",
            params={"from_date": "2024-03-01", "to_date": "2024-03-15"},
        )

    assert active.status_code == 503
    assert active.json() == {"detail": "Failed to fetch specialty statistics"}
    assert discharges.status_code == 503
    assert discharges.json() == {"detail": "Failed to fetch discharge statistics"}
    assert listing.status_code == 503
    assert discharge.status_code == 503
    assert discharge.json() == {"detail": "Failed to discharge record"}
    assert report.status_code == 503
    assert report.json() == {"detail": "Failed to generate report"}
