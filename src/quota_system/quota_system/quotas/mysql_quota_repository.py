from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Quota, QuotaUpdate
from .repository import QuotaRepository

_COLUMNS = """
    quota_id, quota_date, quota, notes, created_by,
    manager_reported, manager_reported_at, manager_reported_by,
    created_at, updated_at
"""


def _row_to_quota(r: dict) -> Quota:
    return Quota(
        quota_id=int(r["quota_id"]),
        day=r["quota_date"],
        quota=int(r["quota"]),
        notes=r.get("notes"),
        created_by=r.get("created_by") or "",
        manager_reported=bool(r.get("manager_reported")),
        manager_reported_at=r.get("manager_reported_at"),
        manager_reported_by=r.get("manager_reported_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _range_clause(start: Optional[date], end: Optional[date]) -> tuple[str, list[object]]:
    clauses: list[str] = []
    params: list[object] = []
    if start is not None:
        clauses.append("quota_date >= %s")
        params.append(start)
    if end is not None:
        clauses.append("quota_date <= %s")
        params.append(end)
    where = " AND ".join(clauses) if clauses else "1=1"
    return where, params


def _set_clause(changes: QuotaUpdate) -> tuple[str, list[object]]:
    cols = changes.columns()
    return ", ".join(f"{name}=%s" for name in cols), list(cols.values())


class MySQLQuotaRepository(QuotaRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _select_one(cur, where: str, params: tuple) -> Optional[Quota]:
        cur.execute(f"SELECT {_COLUMNS} FROM quotas WHERE {where}", params)
        r = fetchone(cur)
        return _row_to_quota(r) if r else None

    def get_by_id(self, quota_id: int) -> Optional[Quota]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_one(cur, "quota_id=%s", (int(quota_id),))

    def get_by_date(self, day: date) -> Optional[Quota]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_one(cur, "quota_date=%s", (day,))

    def list_range(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Sequence[Quota]:
        where, params = _range_clause(start, end)
        sql = f"SELECT {_COLUMNS} FROM quotas WHERE {where} ORDER BY quota_date ASC"
        if limit is not None:
            sql += " LIMIT %s OFFSET %s"
            params += [int(limit), int(offset)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_quota(r) for r in fetchall(cur)]

    def count_range(self, *, start: Optional[date] = None, end: Optional[date] = None) -> int:
        where, params = _range_clause(start, end)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM quotas WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def insert(self, *, day: date, quota: int, notes: Optional[str], created_by: str) -> Quota:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    "INSERT INTO quotas(quota_date, quota, notes, created_by) VALUES(%s,%s,%s,%s)",
                    (day, int(quota), notes, created_by),
                )
            except mysql.connector.IntegrityError as exc:
                raise ConflictError("Quota already exists for this date") from exc
            return self._select_one(cur, "quota_id=%s", (int(cur.lastrowid),))

    def upsert(self, *, day: date, quota: int, notes: Optional[str], created_by: str) -> tuple[Quota, bool]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO quotas(quota_date, quota, notes, created_by)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE quota=VALUES(quota), notes=VALUES(notes), created_by=VALUES(created_by)
                """,
                (day, int(quota), notes, created_by),
            )
            # 1 = inserted, 2 = updated, 0 = unchanged existing row.
            created = cur.rowcount == 1
            return self._select_one(cur, "quota_date=%s", (day,)), created

    def _update(self, where: str, key: object, changes: QuotaUpdate) -> Optional[Quota]:
        set_sql, params = _set_clause(changes)
        with db_cursor(self._conn_factory) as (_, cur):
            if set_sql:
                cur.execute(f"UPDATE quotas SET {set_sql} WHERE {where}", (*params, key))
            return self._select_one(cur, where, (key,))

    def update_by_id(self, quota_id: int, changes: QuotaUpdate) -> Optional[Quota]:
        return self._update("quota_id=%s", int(quota_id), changes)

    def update_by_date(self, day: date, changes: QuotaUpdate) -> Optional[Quota]:
        return self._update("quota_date=%s", day, changes)

    def update_range(self, *, start: date, end: date, changes: QuotaUpdate) -> tuple[int, int]:
        set_sql, params = _set_clause(changes)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS total FROM quotas WHERE quota_date BETWEEN %s AND %s",
                (start, end),
            )
            matched = int(fetchone(cur)["total"])
            if not set_sql:
                return matched, 0
            cur.execute(
                f"UPDATE quotas SET {set_sql} WHERE quota_date BETWEEN %s AND %s",
                (*params, start, end),
            )
            return matched, int(cur.rowcount)

    def _delete(self, where: str, key: object) -> Optional[Quota]:
        with db_cursor(self._conn_factory) as (_, cur):
            existing = self._select_one(cur, where, (key,))
            if existing is None:
                return None
            cur.execute(f"DELETE FROM quotas WHERE {where}", (key,))
            return existing

    def delete_by_id(self, quota_id: int) -> Optional[Quota]:
        return self._delete("quota_id=%s", int(quota_id))

    def delete_by_date(self, day: date) -> Optional[Quota]:
        return self._delete("quota_date=%s", day)

    def delete_many(self, quota_ids: Sequence[int]) -> int:
        ids = [int(i) for i in quota_ids]
        if not ids:
            return 0
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM quotas WHERE quota_id IN ({placeholders})", tuple(ids))
            return int(cur.rowcount)

    def delete_range(self, *, start: date, end: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM quotas WHERE quota_date BETWEEN %s AND %s", (start, end))
            return int(cur.rowcount)

    def delete_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM quotas")
            return int(cur.rowcount)

    def mark_manager_reported(self, *, day: date, reported_by: str, reported_at: datetime) -> tuple[bool, Quota]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO quotas(quota_date, quota, created_by) VALUES(%s, 0, %s)",
                (day, reported_by),
            )
            # Compare-and-set: only the first reporter flips the flag.
            cur.execute(
                """
                UPDATE quotas
                SET manager_reported=1, manager_reported_at=%s, manager_reported_by=%s
                WHERE quota_date=%s AND manager_reported=0
                """,
                (reported_at, reported_by, day),
            )
            won = cur.rowcount == 1
            return won, self._select_one(cur, "quota_date=%s", (day,))
