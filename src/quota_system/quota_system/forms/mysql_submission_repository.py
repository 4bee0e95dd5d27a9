from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import FormSubmission
from .repository import SubmissionRepository


def _as_row_id(submission_id: str) -> Optional[int]:
    value = str(submission_id).strip()
    return int(value) if value.isdigit() else None


def row_to_submission(r: dict) -> FormSubmission:
    return FormSubmission(
        submission_id=str(r["submission_id"]),
        form_name=r["form_name"],
        form_data=load_json(r.get("form_data"), {}),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLSubmissionRepository(SubmissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, form_name: str, submission_id: str) -> Optional[FormSubmission]:
        row_id = _as_row_id(submission_id)
        if row_id is None:
            return None
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT submission_id, form_name, form_data, created_at, updated_at
                FROM form_submissions
                WHERE submission_id=%s AND form_name=%s
                """,
                (row_id, form_name),
            )
            r = fetchone(cur)
            return row_to_submission(r) if r else None

    def get_many(self, form_name: str, submission_ids: Sequence[str]) -> dict[str, FormSubmission]:
        row_ids = sorted({rid for rid in (_as_row_id(s) for s in submission_ids) if rid is not None})
        if not row_ids:
            return {}

        placeholders = ",".join(["%s"] * len(row_ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT submission_id, form_name, form_data, created_at, updated_at
                FROM form_submissions
                WHERE form_name=%s AND submission_id IN ({placeholders})
                """,
                (form_name, *row_ids),
            )
            subs = [row_to_submission(r) for r in fetchall(cur)]
            return {s.submission_id: s for s in subs}

    def list_for_form(self, form_name: str) -> Sequence[FormSubmission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT submission_id, form_name, form_data, created_at, updated_at
                FROM form_submissions
                WHERE form_name=%s
                ORDER BY submission_id ASC
                """,
                (form_name,),
            )
            return [row_to_submission(r) for r in fetchall(cur)]

    def create(self, form_name: str, form_data: dict) -> FormSubmission:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO form_submissions(form_name, form_data) VALUES(%s,%s)",
                (form_name, dump_json(form_data)),
            )
            cur.execute(
                """
                SELECT submission_id, form_name, form_data, created_at, updated_at
                FROM form_submissions
                WHERE submission_id=%s
                """,
                (int(cur.lastrowid),),
            )
            return row_to_submission(fetchone(cur))

    @staticmethod
    def _select_by_id(cur, row_id: int) -> Optional[FormSubmission]:
        cur.execute(
            """
            SELECT submission_id, form_name, form_data, created_at, updated_at
            FROM form_submissions
            WHERE submission_id=%s
            """,
            (row_id,),
        )
        r = fetchone(cur)
        return row_to_submission(r) if r else None

    def find(self, submission_id: str) -> Optional[FormSubmission]:
        row_id = _as_row_id(submission_id)
        if row_id is None:
            return None
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_by_id(cur, row_id)

    def update(self, submission_id: str, form_data: dict) -> Optional[FormSubmission]:
        row_id = _as_row_id(submission_id)
        if row_id is None:
            return None
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE form_submissions SET form_data=%s WHERE submission_id=%s",
                (dump_json(form_data), row_id),
            )
            return self._select_by_id(cur, row_id)

    def delete(self, submission_id: str) -> Optional[FormSubmission]:
        row_id = _as_row_id(submission_id)
        if row_id is None:
            return None
        with db_cursor(self._conn_factory) as (_, cur):
            existing = self._select_by_id(cur, row_id)
            if existing is not None:
                cur.execute("DELETE FROM form_submissions WHERE submission_id=%s", (row_id,))
            return existing
