from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import format_iso_date
from ..core.enums import BulkItemStatus
from ..reservations.model import AttendanceRecord


@dataclass(frozen=True)
class AttendanceHistory:
    total_days: int
    attended_days: int
    attendance_rate: int
    records: list[AttendanceRecord]

    def to_dict(self) -> dict:
        return {
            "totalDays": self.total_days,
            "attendedDays": self.attended_days,
            "attendanceRate": self.attendance_rate,
            "records": [r.to_dict() for r in self.records],
        }


@dataclass(frozen=True)
class DailyAttendanceSummary:
    day: date
    total_required: int
    total_attended: int
    attendance_rate: int
    manager_reported: bool
    has_data: bool

    def to_dict(self) -> dict:
        return {
            "totalRequired": self.total_required,
            "totalAttended": self.total_attended,
            "attendanceRate": self.attendance_rate,
            "managerReported": self.manager_reported,
            "hasData": self.has_data,
        }


@dataclass(frozen=True)
class ManagerReport:
    day: date
    reported_by: Optional[str]
    reported_at: Optional[datetime]

    def to_dict(self) -> dict:
        return {
            "date": format_iso_date(self.day),
            "reportedBy": self.reported_by,
            "reportedAt": self.reported_at.isoformat() if self.reported_at else None,
        }


@dataclass(frozen=True)
class ManagerReportStatus:
    has_reported: bool
    report: Optional[ManagerReport] = None

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"hasReported": self.has_reported}
        if self.report is not None:
            out["reportData"] = self.report.to_dict()
        return out


@dataclass(frozen=True)
class AttendanceMark:
    reservation_id: str
    day: date
    has_attended: bool
    status: BulkItemStatus = BulkItemStatus.SUCCESS
    error: Optional[str] = None

    def to_dict(self) -> dict:
        out: dict[str, Any] = {
            "employeeId": self.reservation_id,
            "date": format_iso_date(self.day),
            "hasAttended": self.has_attended,
            "status": "updated" if self.status == BulkItemStatus.SUCCESS else "error",
        }
        if self.error is not None:
            out["error"] = self.error
        return out


@dataclass
class AttendanceSaveResult:
    day: date
    results: list[AttendanceMark] = field(default_factory=list)

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.status == BulkItemStatus.SUCCESS)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == BulkItemStatus.ERROR)

    def to_dict(self) -> dict:
        return {
            "date": format_iso_date(self.day),
            "results": [r.to_dict() for r in self.results],
            "totalProcessed": len(self.results),
            "successful": self.successful,
            "failed": self.failed,
        }
