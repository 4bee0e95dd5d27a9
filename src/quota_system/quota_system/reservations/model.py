from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from ..common.datetime_utils import days_inclusive, format_iso_date, parse_iso_date
from ..forms.model import FormSubmission
from ..forms.resolver import Reference, as_reference

logger = logging.getLogger(__name__)

DETAIL_FIELDS = ("personalNumber", "reserveUnit", "workPlace", "orderNumber", "orderType", "fundingSource")


def _parse_optional_date(value: Any) -> Optional[date]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return parse_iso_date(value[:10])
    except ValueError:
        return None


@dataclass(frozen=True)
class Reservation:
    """A reserve-days submission: one employee assigned to a date interval."""

    reservation_id: str
    employee: Optional[Reference]
    start_date: date
    end_date: Optional[date] = None
    attendance: dict[date, bool] = field(default_factory=dict)
    reserve_days: tuple[date, ...] = ()
    details: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_submission(cls, sub: FormSubmission, *, employee_field: str) -> Optional["Reservation"]:
        data = sub.form_data or {}
        start = _parse_optional_date(data.get("startDate"))
        if start is None:
            logger.warning("Reservation %s has no valid startDate; skipped", sub.submission_id)
            return None

        attendance: dict[date, bool] = {}
        for key, value in (data.get("attendance") or {}).items():
            day = _parse_optional_date(key)
            if day is not None:
                attendance[day] = value is True

        reserve_days = tuple(
            sorted({d for d in (_parse_optional_date(v) for v in data.get("reserveDays") or ()) if d is not None})
        )

        return cls(
            reservation_id=sub.submission_id,
            employee=as_reference(data.get(employee_field)),
            start_date=start,
            end_date=_parse_optional_date(data.get("endDate")),
            attendance=attendance,
            reserve_days=reserve_days,
            details={k: str(data.get(k) or "") for k in DETAIL_FIELDS},
        )

    @property
    def effective_end(self) -> date:
        # Absent end date means a single-day reservation.
        return self.end_date or self.start_date

    @property
    def employee_id(self) -> Optional[str]:
        return self.employee.id if self.employee else None

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.effective_end

    def day_set(self) -> list[date]:
        """Days this reservation asks for, as explicit markers or the whole interval."""

        if self.reserve_days:
            return list(self.reserve_days)
        return list(days_inclusive(self.start_date, self.effective_end))

    def attendance_on(self, day: date) -> "AttendanceRecord":
        return AttendanceRecord(
            day=day,
            has_attended=self.attendance.get(day) is True,
            is_reported=day in self.attendance,
        )


@dataclass(frozen=True)
class AttendanceRecord:
    day: date
    has_attended: bool
    is_reported: bool

    def to_dict(self) -> dict:
        return {
            "date": format_iso_date(self.day),
            "hasAttended": self.has_attended,
            "isReported": self.is_reported,
        }
