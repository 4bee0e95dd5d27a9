from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import format_iso_date
from ..core.enums import BulkItemStatus


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Quota:
    """Administrator-set headcount for one calendar date."""

    quota_id: int
    day: date
    quota: int
    created_by: str
    notes: Optional[str] = None
    manager_reported: bool = False
    manager_reported_at: Optional[datetime] = None
    manager_reported_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.quota_id,
            "date": format_iso_date(self.day),
            "quota": self.quota,
            "notes": self.notes,
            "createdBy": self.created_by,
            "managerReported": self.manager_reported,
            "managerReportedAt": _iso(self.manager_reported_at),
            "managerReportedBy": self.manager_reported_by,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class QuotaUpdate:
    """Partial update; None means "leave unchanged"."""

    quota: Optional[int] = None
    notes: Optional[str] = None

    def columns(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.quota is not None:
            out["quota"] = self.quota
        if self.notes is not None:
            out["notes"] = self.notes
        return out


@dataclass(frozen=True)
class NewQuota:
    day: date
    quota: int
    created_by: str
    notes: Optional[str] = None


@dataclass(frozen=True)
class QuotaPage:
    quotas: list[Quota]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0

    def to_dict(self) -> dict:
        return {
            "data": {"quotas": [q.to_dict() for q in self.quotas]},
            "pagination": {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages},
        }


@dataclass(frozen=True)
class RangeUpsertResult:
    quotas: list[Quota]
    created: int
    updated: int

    @property
    def count(self) -> int:
        return len(self.quotas)


@dataclass(frozen=True)
class BulkItemResult:
    key: Any
    status: BulkItemStatus
    data: Optional[Quota] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"id": self.key, "status": self.status.value}
        if self.data is not None:
            out["data"] = self.data.to_dict()
        if self.error is not None:
            out["error"] = self.error
        return out


@dataclass
class BulkResult:
    results: list[BulkItemResult] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.status == BulkItemStatus.SUCCESS)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results if r.status == BulkItemStatus.ERROR)

    def summary(self) -> dict:
        return {
            "successCount": self.success_count,
            "errorCount": self.error_count,
            "totalCount": len(self.results),
        }


@dataclass(frozen=True)
class OccupancySnapshot:
    """Quota and headcount for one date; derived, never persisted."""

    day: date
    quota: Optional[int]
    current_occupancy: int
    occupancy_rate: Optional[int]
    capacity_left: int
    capacity_left_percent: int

    def to_dict(self) -> dict:
        return {
            "date": format_iso_date(self.day),
            "quota": self.quota,
            "currentOccupancy": self.current_occupancy,
            "occupancyRate": self.occupancy_rate,
            "capacityLeft": self.capacity_left,
            "capacityLeftPercent": self.capacity_left_percent,
        }


@dataclass(frozen=True)
class OccupancySummary:
    total_quotas: int
    total_occupancy: int
    total_capacity_left: int
    average_occupancy_rate: int

    def to_dict(self) -> dict:
        return {
            "totalQuotas": self.total_quotas,
            "totalOccupancy": self.total_occupancy,
            "totalCapacityLeft": self.total_capacity_left,
            "averageOccupancyRate": self.average_occupancy_rate,
        }
