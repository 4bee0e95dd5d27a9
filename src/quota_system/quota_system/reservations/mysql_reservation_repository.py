from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import format_iso_date
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..forms.mysql_submission_repository import row_to_submission
from .model import Reservation
from .repository import ReservationRepository

_START = "JSON_UNQUOTE(JSON_EXTRACT(form_data, '$.startDate'))"
_END = "JSON_UNQUOTE(JSON_EXTRACT(form_data, '$.endDate'))"

# Three ways a reservation can touch [start, end]: a closed interval that
# intersects the range, a single-day reservation (no endDate) starting inside
# it, or a same-day reservation inside it. A JSON null endDate unquotes to
# 'null', which sorts after every ISO date.
_OVERLAP_SQL = f"""
    (
        ({_START} <= %(end)s AND {_END} NOT IN ('', 'null') AND {_END} >= %(start)s)
        OR ({_START} BETWEEN %(start)s AND %(end)s AND ({_END} IS NULL OR {_END} IN ('', 'null')))
        OR ({_START} BETWEEN %(start)s AND %(end)s AND {_END} = {_START})
    )
"""

_EMPLOYEE_SQL = """
    (
        JSON_UNQUOTE(JSON_EXTRACT(form_data, CONCAT('$.', %(employee_field)s, '.id'))) = %(employee_id)s
        OR JSON_UNQUOTE(JSON_EXTRACT(form_data, CONCAT('$.', %(employee_field)s))) = %(employee_id)s
    )
"""


class MySQLReservationRepository(ReservationRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, form_name: str, employee_field: str):
        self._conn_factory = conn_factory
        self._form_name = form_name
        self._employee_field = employee_field

    def _query(self, where: str, params: dict) -> list[Reservation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT submission_id, form_name, form_data, created_at, updated_at
                FROM form_submissions
                WHERE form_name=%(form_name)s AND {where}
                ORDER BY submission_id ASC
                """,
                {"form_name": self._form_name, "employee_field": self._employee_field, **params},
            )
            rows = fetchall(cur)

        out: list[Reservation] = []
        for r in rows:
            reservation = Reservation.from_submission(row_to_submission(r), employee_field=self._employee_field)
            if reservation is not None:
                out.append(reservation)
        return out

    def list_overlapping(self, *, start: date, end: date, employee_id: Optional[str] = None) -> Sequence[Reservation]:
        where = _OVERLAP_SQL
        params = {"start": format_iso_date(start), "end": format_iso_date(end)}
        if employee_id is not None:
            where = f"{where} AND {_EMPLOYEE_SQL}"
            params["employee_id"] = str(employee_id)
        return self._query(where, params)

    def list_for_employee(self, employee_id: str) -> Sequence[Reservation]:
        return self._query(_EMPLOYEE_SQL, {"employee_id": str(employee_id)})

    def get_by_id(self, reservation_id: str) -> Optional[Reservation]:
        if not str(reservation_id).isdigit():
            return None
        found = self._query("submission_id=%(reservation_id)s", {"reservation_id": int(reservation_id)})
        return found[0] if found else None

    def set_attendance(self, *, reservation_id: str, work_date: date, has_attended: bool) -> bool:
        if not str(reservation_id).isdigit():
            return False
        with db_cursor(self._conn_factory) as (_, cur):
            # Single-row update: creates the attendance map if missing, then sets the day.
            cur.execute(
                """
                UPDATE form_submissions
                SET form_data = JSON_SET(
                    JSON_SET(form_data, '$.attendance', COALESCE(JSON_EXTRACT(form_data, '$.attendance'), JSON_OBJECT())),
                    CONCAT('$.attendance."', %s, '"'),
                    CAST(%s AS JSON)
                )
                WHERE submission_id=%s AND form_name=%s
                """,
                (
                    format_iso_date(work_date),
                    "true" if has_attended else "false",
                    int(reservation_id),
                    self._form_name,
                ),
            )
            if cur.rowcount > 0:
                return True
            # rowcount is 0 when the stored value was already identical.
            cur.execute(
                "SELECT submission_id FROM form_submissions WHERE submission_id=%s AND form_name=%s",
                (int(reservation_id), self._form_name),
            )
            return fetchone(cur) is not None
