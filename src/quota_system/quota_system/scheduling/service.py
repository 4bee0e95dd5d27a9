from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..attendance.consecutive import is_ending_on
from ..core.constants import UNKNOWN_EMPLOYEE
from ..forms.resolver import ReferenceResolver, Unresolved
from ..forms.service import FormSubmissionService
from ..quotas.model import OccupancySnapshot, OccupancySummary
from ..quotas.occupancy import OccupancyCalculator, build_snapshot, summarize
from ..quotas.repository import QuotaRepository
from ..reservations.model import Reservation
from ..reservations.repository import ReservationRepository
from .model import Roster, RosterEntry

logger = logging.getLogger(__name__)


class SchedulingService:
    """Read-side facade joining quotas, occupancy and the daily roster."""

    def __init__(
        self,
        quotas: QuotaRepository,
        reservations: ReservationRepository,
        occupancy: OccupancyCalculator,
        forms: FormSubmissionService,
        resolver: ReferenceResolver,
        *,
        reserve_form_name: str,
        employee_field: str,
    ):
        self._quotas = quotas
        self._reservations = reservations
        self._occupancy = occupancy
        self._forms = forms
        self._resolver = resolver
        self._reserve_form_name = reserve_form_name
        self._employee_field = employee_field

    def quota_with_occupancy(self, day: date) -> OccupancySnapshot:
        quota = self._quotas.get_by_date(day)
        return build_snapshot(day, quota.quota if quota else None, self._occupancy.occupancy_for_date(day))

    def occupancy_range(self, start: date, end: date) -> dict[date, int]:
        return self._occupancy.occupancy_for_range(start, end)

    def quotas_with_occupancy_for_range(
        self, start: date, end: date
    ) -> tuple[list[OccupancySnapshot], OccupancySummary]:
        counts = self._occupancy.occupancy_for_range(start, end)
        quotas = {q.day: q.quota for q in self._quotas.list_range(start=start, end=end)}
        snapshots = [build_snapshot(day, quotas.get(day), counts[day]) for day in sorted(counts)]
        return snapshots, summarize(snapshots)

    def _employee_names(self, reservations: list[Reservation]) -> dict[str, str]:
        names: dict[str, str] = {}
        pending: list[str] = []
        for r in reservations:
            if r.employee is None:
                continue
            if isinstance(r.employee, Unresolved):
                pending.append(r.employee.id)
            else:
                names[r.employee.id] = r.employee.display

        field = self._forms.field_for(self._reserve_form_name, self._employee_field)
        if pending and field is not None:
            for ref_id, ref in self._resolver.resolve_ids(pending, field).items():
                names[ref_id] = ref.display
        return names

    @staticmethod
    def _display_name(r: Reservation, names: dict[str, str]) -> str:
        employee_id: Optional[str] = r.employee_id
        if employee_id is None:
            return UNKNOWN_EMPLOYEE
        return names.get(employee_id) or employee_id

    def roster_for_date(self, day: date) -> Roster:
        reservations = [r for r in self._reservations.list_overlapping(start=day, end=day) if r.covers(day)]
        names = self._employee_names(reservations)

        entries: list[RosterEntry] = []
        for r in reservations:
            record = r.attendance_on(day)
            entries.append(
                RosterEntry(
                    reservation_id=r.reservation_id,
                    employee_id=r.employee_id,
                    name=self._display_name(r, names),
                    start_date=r.start_date,
                    end_date=r.end_date,
                    is_starting_today=r.start_date == day,
                    is_ending_today=is_ending_on(r.day_set(), day),
                    has_attended=record.has_attended,
                    is_reported=record.is_reported,
                    reserve_days=r.reserve_days,
                    details=dict(r.details),
                )
            )

        quota = self._quotas.get_by_date(day)
        roster = Roster(day=day, entries=entries, manager_reported=bool(quota and quota.manager_reported))
        logger.debug("Roster for %s has %d entries", day, len(entries))
        return roster
