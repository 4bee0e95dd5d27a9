from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import days_inclusive
from ..common.math_utils import percent, round_half_up
from ..reservations.repository import ReservationRepository
from .model import OccupancySnapshot, OccupancySummary


class OccupancyCalculator:
    """Per-date headcount derived from reservation intervals."""

    def __init__(self, reservations: ReservationRepository):
        self._reservations = reservations

    def occupancy_for_range(self, start: date, end: date) -> dict[date, int]:
        counts = {day: 0 for day in days_inclusive(start, end)}
        for r in self._reservations.list_overlapping(start=start, end=end):
            lo = max(r.start_date, start)
            hi = min(r.effective_end, end)
            for day in days_inclusive(lo, hi):
                counts[day] += 1
        return counts

    def occupancy_for_date(self, day: date) -> int:
        return self.occupancy_for_range(day, day)[day]


def occupancy_rate(occupancy: int, quota: Optional[int]) -> Optional[int]:
    if not quota:
        return None
    return percent(occupancy, quota)


def build_snapshot(day: date, quota: Optional[int], occupancy: int) -> OccupancySnapshot:
    capacity_left = max(0, quota - occupancy) if quota else 0
    return OccupancySnapshot(
        day=day,
        quota=quota,
        current_occupancy=occupancy,
        occupancy_rate=occupancy_rate(occupancy, quota),
        capacity_left=capacity_left,
        capacity_left_percent=percent(capacity_left, quota) if quota else 0,
    )


def summarize(snapshots: Iterable[OccupancySnapshot]) -> OccupancySummary:
    items = list(snapshots)
    rates = [s.occupancy_rate for s in items if s.occupancy_rate is not None]
    return OccupancySummary(
        total_quotas=sum(s.quota or 0 for s in items),
        total_occupancy=sum(s.current_occupancy for s in items),
        total_capacity_left=sum(s.capacity_left for s in items),
        average_occupancy_rate=round_half_up(sum(rates) / len(rates)) if rates else 0,
    )
