"""Named time windows and their resolution to concrete timestamp bounds."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum


class TimeWindowName(StrEnum):
    """Discharge statistics period filters offered to ward staff."""

    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


@dataclass(frozen=True)
class TimeWindow:
    """Half-open `[start, end)` bounds; `None` on both sides means unbounded."""

    start: datetime | None
    end: datetime | None

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None


def resolve_time_window(window: TimeWindowName, now: datetime) -> TimeWindow:
    """Resolve a named window against `now`, using `now`'s own timezone as local time.

    Day and week spans are elapsed time, so a DST change inside the window
    does not shorten or stretch it.
    """

    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if window is TimeWindowName.TODAY:
        return TimeWindow(start=midnight, end=_shift(midnight, timedelta(hours=24)))
    if window is TimeWindowName.WEEK:
        # Rolling 7x24h, not calendar-aligned.
        return TimeWindow(start=_shift(now, -timedelta(days=7)), end=now)
    if window is TimeWindowName.MONTH:
        return TimeWindow(start=midnight.replace(day=1), end=now)
    return TimeWindow(start=None, end=None)


def _shift(value: datetime, delta: timedelta) -> datetime:
    # Aware arithmetic within one zone is wall-clock; go through UTC for elapsed time.
    if value.tzinfo is None:
        return value + delta
    return (value.astimezone(UTC) + delta).astimezone(value.tzinfo)
