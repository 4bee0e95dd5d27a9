from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..common.datetime_utils import format_iso_date


@dataclass(frozen=True)
class RosterEntry:
    """One reservation as shown on the daily attendance sheet."""

    reservation_id: str
    employee_id: Optional[str]
    name: str
    start_date: date
    end_date: Optional[date]
    is_starting_today: bool
    is_ending_today: bool
    has_attended: bool
    is_reported: bool
    reserve_days: tuple[date, ...] = ()
    details: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.reservation_id,
            "employeeId": self.employee_id,
            "name": self.name,
            **self.details,
            "startDate": format_iso_date(self.start_date),
            "endDate": format_iso_date(self.end_date) if self.end_date else None,
            "isStartingToday": self.is_starting_today,
            "isEndingToday": self.is_ending_today,
            "hasAttended": self.has_attended,
            "isReported": self.is_reported,
            "reserveDays": [format_iso_date(d) for d in self.reserve_days],
        }


@dataclass(frozen=True)
class Roster:
    day: date
    entries: list[RosterEntry]
    manager_reported: bool = False

    def statistics(self) -> dict:
        return {
            "startingToday": sum(1 for e in self.entries if e.is_starting_today),
            "endingToday": sum(1 for e in self.entries if e.is_ending_today),
            "totalRequired": len(self.entries),
            "totalAttended": sum(1 for e in self.entries if e.has_attended),
        }

    def to_dict(self) -> dict:
        return {
            "date": format_iso_date(self.day),
            "employees": [e.to_dict() for e in self.entries],
            "statistics": self.statistics(),
            "managerReported": self.manager_reported,
        }
