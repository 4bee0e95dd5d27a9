from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Mapping, Optional

from ..common.datetime_utils import days_inclusive, format_iso_date, now_local
from ..common.math_utils import percent
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import BulkItemStatus
from ..core.exceptions import ConflictError, DomainError, NotFoundError
from ..quotas.repository import QuotaRepository
from ..reservations.model import AttendanceRecord, Reservation
from ..reservations.repository import ReservationRepository
from .model import (
    AttendanceHistory,
    AttendanceMark,
    AttendanceSaveResult,
    DailyAttendanceSummary,
    ManagerReport,
    ManagerReportStatus,
)

logger = logging.getLogger(__name__)


class AttendanceService:
    """Per-employee attendance marks and the once-per-date manager report."""

    def __init__(
        self,
        quotas: QuotaRepository,
        reservations: ReservationRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._quotas = quotas
        self._reservations = reservations
        self._clock = clock

    def _covering_reservation(self, employee_id: str, day: date) -> Optional[Reservation]:
        for r in self._reservations.list_overlapping(start=day, end=day, employee_id=employee_id):
            if r.covers(day):
                return r
        return None

    def set_attendance(self, *, employee_id: str, day: date, has_attended: bool) -> AttendanceRecord:
        reservation = self._covering_reservation(employee_id, day)
        if reservation is None:
            raise NotFoundError("No reservation found for this employee on this date")

        if not self._reservations.set_attendance(
            reservation_id=reservation.reservation_id, work_date=day, has_attended=has_attended
        ):
            raise NotFoundError("Reservation not found")

        logger.info(
            "Attendance for employee %s on %s set to %s",
            employee_id,
            format_iso_date(day),
            has_attended,
        )
        return AttendanceRecord(day=day, has_attended=has_attended, is_reported=True)

    def save_attendance(self, day: date, changes: Mapping[str, bool]) -> AttendanceSaveResult:
        """Mark several reservations for one date; each item succeeds or fails on its own."""

        result = AttendanceSaveResult(day=day)
        for reservation_id, has_attended in changes.items():
            try:
                if not self._reservations.set_attendance(
                    reservation_id=reservation_id, work_date=day, has_attended=has_attended
                ):
                    raise NotFoundError("Reservation not found")
                result.results.append(AttendanceMark(reservation_id, day, has_attended))
            except DomainError as exc:
                logger.warning("Attendance save failed for reservation %s: %s", reservation_id, exc.message)
                result.results.append(
                    AttendanceMark(reservation_id, day, has_attended, status=BulkItemStatus.ERROR, error=exc.message)
                )

        logger.info(
            "Attendance saved for %s: %d successful, %d failed",
            format_iso_date(day),
            result.successful,
            result.failed,
        )
        return result

    def submit_manager_report(self, *, day: date, reported_by: str) -> ManagerReport:
        won, quota = self._quotas.mark_manager_reported(day=day, reported_by=reported_by, reported_at=self._clock())
        report = ManagerReport(day=day, reported_by=quota.manager_reported_by, reported_at=quota.manager_reported_at)
        if not won:
            details = report.to_dict()
            details.pop("date")
            raise ConflictError("Attendance for this date has already been reported by a manager", details=details)

        logger.info("Manager report for %s submitted by %s", format_iso_date(day), reported_by)
        return report

    def report_status(self, day: date) -> ManagerReportStatus:
        quota = self._quotas.get_by_date(day)
        if not quota or not quota.manager_reported:
            return ManagerReportStatus(has_reported=False)
        return ManagerReportStatus(
            has_reported=True,
            report=ManagerReport(day=day, reported_by=quota.manager_reported_by, reported_at=quota.manager_reported_at),
        )

    def attendance_range(self, start: date, end: date) -> dict[date, DailyAttendanceSummary]:
        required = {day: 0 for day in days_inclusive(start, end)}
        attended = dict(required)
        for r in self._reservations.list_overlapping(start=start, end=end):
            for day in days_inclusive(max(r.start_date, start), min(r.effective_end, end)):
                required[day] += 1
                if r.attendance.get(day) is True:
                    attended[day] += 1

        reported = {q.day for q in self._quotas.list_range(start=start, end=end) if q.manager_reported}
        return {
            day: DailyAttendanceSummary(
                day=day,
                total_required=required[day],
                total_attended=attended[day],
                attendance_rate=percent(attended[day], required[day]) if required[day] else 0,
                manager_reported=day in reported,
                has_data=attended[day] > 0,
            )
            for day in required
        }

    def history(self, employee_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> AttendanceHistory:
        marks: dict[date, bool] = {}
        for r in self._reservations.list_for_employee(employee_id):
            for day, value in r.attendance.items():
                marks[day] = marks.get(day, False) or value

        # The rate covers only the returned window, not the whole history.
        records = [
            AttendanceRecord(day=day, has_attended=marks[day], is_reported=True)
            for day in sorted(marks, reverse=True)[:limit]
        ]
        attended_days = sum(1 for r in records if r.has_attended)
        return AttendanceHistory(
            total_days=len(records),
            attended_days=attended_days,
            attendance_rate=percent(attended_days, len(records)) if records else 0,
            records=records,
        )
