"""Application service computing per-specialty census and discharge statistics."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from functools import partial
from zoneinfo import ZoneInfo

from ward_admin.application.ports.record_source_port import (
    Collection,
    FieldRange,
    RecordFilter,
    RecordSourcePort,
)
from ward_admin.application.services.bounded_fanout import gather_bounded
from ward_admin.domain.record_status import AdmissionStatus, ConsultationStatus
from ward_admin.domain.specialty import SPECIALTIES, Specialty
from ward_admin.domain.time_window import TimeWindow

NowCallable = Callable[[], datetime]
logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class CategoryCounts:
    """Admission/consultation split of one count."""

    admissions: int
    consultations: int

    @property
    def total(self) -> int:
        return self.admissions + self.consultations


@dataclass(frozen=True)
class SpecialtyActiveStat:
    """Active census for one specialty."""

    specialty: Specialty
    admissions: int
    consultations: int

    @property
    def active_count(self) -> int:
        return self.admissions + self.consultations


@dataclass(frozen=True)
class SpecialtyDischargeStat:
    """Discharges/completions for one specialty, in a window and all-time."""

    specialty: Specialty
    discharged_in_window: CategoryCounts
    total_discharged: CategoryCounts


@dataclass(frozen=True)
class CensusTotals:
    """Ward-wide active admissions and consultations."""

    admissions: int
    consultations: int

    @property
    def total_active(self) -> int:
        return self.admissions + self.consultations


def _admission_filter(
    specialty: Specialty,
    status: AdmissionStatus,
    window: TimeWindow | None = None,
) -> RecordFilter:
    return RecordFilter(
        equals={"specialty": specialty.value, "patient_status": status.value},
        range=_updated_at_range(window),
    )


def _consultation_filter(
    specialty: Specialty,
    status: ConsultationStatus,
    window: TimeWindow | None = None,
) -> RecordFilter:
    return RecordFilter(
        equals={"consultation_specialty": specialty.value, "status": status.value},
        range=_updated_at_range(window),
    )


def _updated_at_range(window: TimeWindow | None) -> FieldRange | None:
    if window is None or window.is_unbounded:
        return None
    return FieldRange(field="updated_at", lower=window.start, upper=window.end)


class SpecialtyStatsService:
    """Fan out count queries per specialty and merge them into statistics rows."""

    def __init__(
        self,
        *,
        record_source: RecordSourcePort,
        timezone_name: str = "UTC",
        max_concurrency: int = 8,
        specialties: Sequence[Specialty] = SPECIALTIES,
        now: NowCallable = _utc_now,
    ) -> None:
        self._record_source = record_source
        self._timezone = ZoneInfo(timezone_name)
        self._max_concurrency = max_concurrency
        self._specialties = tuple(specialties)
        self._now = now

    def local_now(self) -> datetime:
        """Return the current time in the ward timezone."""

        return self._now().astimezone(self._timezone)

    async def compute_census(self) -> CensusTotals:
        """Return ward-wide active admission and consultation counts."""

        admissions, consultations = await gather_bounded(
            [
                partial(
                    self._record_source.count,
                    Collection.PATIENTS,
                    RecordFilter(equals={"patient_status": AdmissionStatus.ACTIVE.value}),
                ),
                partial(
                    self._record_source.count,
                    Collection.CONSULTATIONS,
                    RecordFilter(equals={"status": ConsultationStatus.ACTIVE.value}),
                ),
            ],
            limit=self._max_concurrency,
        )
        return CensusTotals(admissions=admissions, consultations=consultations)

    async def compute_active_stats(self) -> list[SpecialtyActiveStat]:
        """Return active counts per specialty, omitting specialties with none."""

        factories: list[Callable[[], Awaitable[int]]] = []
        for specialty in self._specialties:
            factories.append(
                partial(
                    self._record_source.count,
                    Collection.PATIENTS,
                    _admission_filter(specialty, AdmissionStatus.ACTIVE),
                )
            )
            factories.append(
                partial(
                    self._record_source.count,
                    Collection.CONSULTATIONS,
                    _consultation_filter(specialty, ConsultationStatus.ACTIVE),
                )
            )

        counts = await gather_bounded(factories, limit=self._max_concurrency)

        stats = [
            SpecialtyActiveStat(
                specialty=specialty,
                admissions=counts[2 * index],
                consultations=counts[2 * index + 1],
            )
            for index, specialty in enumerate(self._specialties)
        ]
        result = [stat for stat in stats if stat.active_count > 0]
        logger.info(
            "stats_computed kind=active queries=%s specialties=%s",
            len(factories),
            len(result),
        )
        return result

    async def compute_discharge_stats(self, window: TimeWindow) -> list[SpecialtyDischargeStat]:
        """Return discharged/completed counts per specialty in `window` and all-time."""

        factories: list[Callable[[], Awaitable[int]]] = []
        for specialty in self._specialties:
            factories.extend(
                [
                    partial(
                        self._record_source.count,
                        Collection.PATIENTS,
                        _admission_filter(specialty, AdmissionStatus.DISCHARGED, window),
                    ),
                    partial(
                        self._record_source.count,
                        Collection.CONSULTATIONS,
                        _consultation_filter(specialty, ConsultationStatus.COMPLETED, window),
                    ),
                    partial(
                        self._record_source.count,
                        Collection.PATIENTS,
                        _admission_filter(specialty, AdmissionStatus.DISCHARGED),
                    ),
                    partial(
                        self._record_source.count,
                        Collection.CONSULTATIONS,
                        _consultation_filter(specialty, ConsultationStatus.COMPLETED),
                    ),
                ]
            )

        counts = await gather_bounded(factories, limit=self._max_concurrency)

        result: list[SpecialtyDischargeStat] = []
        for index, specialty in enumerate(self._specialties):
            base = 4 * index
            in_window = CategoryCounts(admissions=counts[base], consultations=counts[base + 1])
            total = CategoryCounts(admissions=counts[base + 2], consultations=counts[base + 3])
            if in_window.total == 0 and total.total == 0:
                continue
            result.append(
                SpecialtyDischargeStat(
                    specialty=specialty,
                    discharged_in_window=in_window,
                    total_discharged=total,
                )
            )

        logger.info(
            "stats_computed kind=discharge window_start=%s window_end=%s specialties=%s",
            window.start.isoformat() if window.start is not None else None,
            window.end.isoformat() if window.end is not None else None,
            len(result),
        )
        return result
