"""Generation-stamped refresh of the displayed discharge statistics."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from ward_admin.application.services.specialty_stats_service import (
    SpecialtyDischargeStat,
    SpecialtyStatsService,
)
from ward_admin.domain.time_window import TimeWindow, TimeWindowName, resolve_time_window

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DischargeStatsSnapshot:
    """One completed discharge aggregation and the refresh call that produced it."""

    generation: int
    window_name: TimeWindowName
    window: TimeWindow
    computed_at: datetime
    stats: list[SpecialtyDischargeStat]
    published: bool


class DischargeStatsRefreshCoordinator:
    """Keep the latest displayed discharge statistics, dropping superseded results.

    Every refresh takes the next generation number. A finished refresh becomes
    the displayed snapshot only when no higher generation has already been
    published; otherwise its result is returned to its caller but not shown.
    """

    def __init__(self, *, stats_service: SpecialtyStatsService) -> None:
        self._stats_service = stats_service
        self._issued_generation = 0
        self._published_generation = 0
        self._latest: DischargeStatsSnapshot | None = None

    @property
    def latest(self) -> DischargeStatsSnapshot | None:
        """Return the currently displayed snapshot, if any refresh has completed."""

        return self._latest

    async def refresh(self, window_name: TimeWindowName) -> DischargeStatsSnapshot:
        """Compute discharge statistics for `window_name` and publish unless stale."""

        self._issued_generation += 1
        generation = self._issued_generation
        computed_at = self._stats_service.local_now()
        window = resolve_time_window(window_name, computed_at)

        stats = await self._stats_service.compute_discharge_stats(window)

        published = generation > self._published_generation
        snapshot = DischargeStatsSnapshot(
            generation=generation,
            window_name=window_name,
            window=window,
            computed_at=computed_at,
            stats=stats,
            published=published,
        )
        if published:
            self._published_generation = generation
            self._latest = snapshot
        else:
            logger.info(
                "discharge_stats_discarded generation=%s published_generation=%s window=%s",
                generation,
                self._published_generation,
                window_name.value,
            )
        return snapshot
