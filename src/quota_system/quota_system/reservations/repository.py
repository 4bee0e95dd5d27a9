from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Reservation


class ReservationRepository(Protocol):
    def list_overlapping(self, *, start: date, end: date, employee_id: Optional[str] = None) -> Sequence[Reservation]:
        """Reservations whose interval intersects [start, end]."""

        raise NotImplementedError

    def list_for_employee(self, employee_id: str) -> Sequence[Reservation]:
        raise NotImplementedError

    def get_by_id(self, reservation_id: str) -> Optional[Reservation]:
        raise NotImplementedError

    def set_attendance(self, *, reservation_id: str, work_date: date, has_attended: bool) -> bool:
        """Upsert one (date -> bool) mark atomically.

        Returns False when the reservation does not exist.
        """

        raise NotImplementedError
