from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

import pytest

from src.quota_system.quota_system import create_app
from src.quota_system.quota_system.attendance.service import AttendanceService
from src.quota_system.quota_system.common.datetime_utils import format_iso_date
from src.quota_system.quota_system.container import ServiceSettings, wire
from src.quota_system.quota_system.core.exceptions import ConflictError
from src.quota_system.quota_system.forms.model import FormSchema, FormSubmission
from src.quota_system.quota_system.quotas.model import Quota, QuotaUpdate
from src.quota_system.quota_system.reservations.model import Reservation

RESERVE_FORM = "Reserve Days Management"
PERSONNEL_FORM = "Personnel"
FIXED_NOW = datetime(2025, 6, 20, 9, 30, 0)

PERSONNEL_SCHEMA = {
    "sections": [
        {
            "id": "main",
            "name": "Personnel",
            "fields": [
                {"name": "firstName", "type": "text"},
                {"name": "lastName", "type": "text"},
                {"name": "rank", "type": "text"},
            ],
        }
    ]
}

RESERVE_SCHEMA = {
    "sections": [
        {
            "id": "main",
            "name": "Reserve days",
            "fields": [
                {
                    "name": "employeeName",
                    "type": "enhancedSelect",
                    "foreignFormName": PERSONNEL_FORM,
                    "foreignFields": ["rank", "firstName", "lastName"],
                },
                {"name": "startDate", "type": "date"},
                {"name": "endDate", "type": "date"},
                {"name": "orderNumber", "type": "text"},
            ],
        }
    ]
}


class InMemorySchemas:
    def __init__(self):
        self._by_name: dict[str, FormSchema] = {}

    def get(self, form_name: str) -> Optional[FormSchema]:
        return self._by_name.get(form_name)

    def save(self, schema: FormSchema) -> None:
        self._by_name[schema.form_name] = schema


class InMemorySubmissions:
    def __init__(self):
        self._next_id = 1
        self._by_id: dict[str, FormSubmission] = {}
        self.get_many_calls = 0

    def get_by_id(self, form_name: str, submission_id: str) -> Optional[FormSubmission]:
        sub = self._by_id.get(str(submission_id))
        return sub if sub and sub.form_name == form_name else None

    def get_many(self, form_name: str, submission_ids: Sequence[str]) -> dict[str, FormSubmission]:
        self.get_many_calls += 1
        found = (self.get_by_id(form_name, i) for i in submission_ids)
        return {s.submission_id: s for s in found if s is not None}

    def list_for_form(self, form_name: str) -> Sequence[FormSubmission]:
        return [s for s in self._by_id.values() if s.form_name == form_name]

    def create(self, form_name: str, form_data: dict) -> FormSubmission:
        sub = FormSubmission(submission_id=str(self._next_id), form_name=form_name, form_data=dict(form_data))
        self._next_id += 1
        self._by_id[sub.submission_id] = sub
        return sub

    def find(self, submission_id: str) -> Optional[FormSubmission]:
        return self._by_id.get(str(submission_id))

    def update(self, submission_id: str, form_data: dict) -> Optional[FormSubmission]:
        existing = self._by_id.get(str(submission_id))
        if existing is None:
            return None
        sub = replace(existing, form_data=dict(form_data))
        self._by_id[sub.submission_id] = sub
        return sub

    def delete(self, submission_id: str) -> Optional[FormSubmission]:
        return self._by_id.pop(str(submission_id), None)


class InMemoryReservations:
    """Reservations read back from reserve-days submissions, like the MySQL repository."""

    def __init__(self, submissions: InMemorySubmissions, *, employee_field: str = "employeeName"):
        self._submissions = submissions
        self._employee_field = employee_field

    def _all(self) -> list[Reservation]:
        out = []
        for sub in self._submissions.list_for_form(RESERVE_FORM):
            r = Reservation.from_submission(sub, employee_field=self._employee_field)
            if r is not None:
                out.append(r)
        return out

    def list_overlapping(self, *, start: date, end: date, employee_id: Optional[str] = None):
        return [
            r
            for r in self._all()
            if r.start_date <= end and r.effective_end >= start and (employee_id is None or r.employee_id == employee_id)
        ]

    def list_for_employee(self, employee_id: str):
        return [r for r in self._all() if r.employee_id == employee_id]

    def get_by_id(self, reservation_id: str) -> Optional[Reservation]:
        return next((r for r in self._all() if r.reservation_id == str(reservation_id)), None)

    def set_attendance(self, *, reservation_id: str, work_date: date, has_attended: bool) -> bool:
        sub = self._submissions.get_by_id(RESERVE_FORM, reservation_id)
        if sub is None:
            return False
        attendance = dict(sub.form_data.get("attendance") or {})
        attendance[format_iso_date(work_date)] = has_attended
        sub.form_data["attendance"] = attendance
        return True


class InMemoryQuotas:
    def __init__(self):
        self._next_id = 1
        self._by_date: dict[date, Quota] = {}
        self._lock = threading.Lock()

    def _by_id(self, quota_id: int) -> Optional[Quota]:
        return next((q for q in self._by_date.values() if q.quota_id == int(quota_id)), None)

    def _new(self, *, day: date, quota: int, notes, created_by: str) -> Quota:
        row = Quota(quota_id=self._next_id, day=day, quota=quota, notes=notes, created_by=created_by)
        self._next_id += 1
        self._by_date[day] = row
        return row

    def get_by_id(self, quota_id: int) -> Optional[Quota]:
        return self._by_id(quota_id)

    def get_by_date(self, day: date) -> Optional[Quota]:
        return self._by_date.get(day)

    def list_range(self, *, start=None, end=None, offset: int = 0, limit=None):
        rows = sorted(
            (q for q in self._by_date.values() if (start is None or q.day >= start) and (end is None or q.day <= end)),
            key=lambda q: q.day,
        )
        return rows[offset:] if limit is None else rows[offset : offset + limit]

    def count_range(self, *, start=None, end=None) -> int:
        return len(self.list_range(start=start, end=end))

    def insert(self, *, day: date, quota: int, notes, created_by: str) -> Quota:
        with self._lock:
            if day in self._by_date:
                raise ConflictError("Quota already exists for this date")
            return self._new(day=day, quota=quota, notes=notes, created_by=created_by)

    def upsert(self, *, day: date, quota: int, notes, created_by: str):
        with self._lock:
            existing = self._by_date.get(day)
            if existing is None:
                return self._new(day=day, quota=quota, notes=notes, created_by=created_by), True
            row = replace(existing, quota=quota, notes=notes, created_by=created_by)
            self._by_date[day] = row
            return row, False

    def update_by_id(self, quota_id: int, changes: QuotaUpdate) -> Optional[Quota]:
        existing = self._by_id(quota_id)
        return self.update_by_date(existing.day, changes) if existing else None

    def update_by_date(self, day: date, changes: QuotaUpdate) -> Optional[Quota]:
        existing = self._by_date.get(day)
        if existing is None:
            return None
        row = replace(existing, **changes.columns())
        self._by_date[day] = row
        return row

    def update_range(self, *, start: date, end: date, changes: QuotaUpdate):
        matched = self.list_range(start=start, end=end)
        modified = 0
        for q in matched:
            updated = self.update_by_date(q.day, changes)
            modified += int(updated != q)
        return len(matched), modified

    def delete_by_id(self, quota_id: int) -> Optional[Quota]:
        existing = self._by_id(quota_id)
        return self._by_date.pop(existing.day) if existing else None

    def delete_by_date(self, day: date) -> Optional[Quota]:
        return self._by_date.pop(day, None)

    def delete_many(self, quota_ids) -> int:
        return sum(1 for i in quota_ids if self.delete_by_id(i) is not None)

    def delete_range(self, *, start: date, end: date) -> int:
        return sum(1 for q in self.list_range(start=start, end=end) if self._by_date.pop(q.day, None))

    def delete_all(self) -> int:
        count = len(self._by_date)
        self._by_date.clear()
        return count

    def mark_manager_reported(self, *, day: date, reported_by: str, reported_at: datetime):
        with self._lock:
            existing = self._by_date.get(day) or self._new(day=day, quota=0, notes=None, created_by=reported_by)
            if existing.manager_reported:
                return False, existing
            row = replace(
                existing,
                manager_reported=True,
                manager_reported_at=reported_at,
                manager_reported_by=reported_by,
            )
            self._by_date[day] = row
            return True, row


class FakeCursor:
    """Replays scripted outcomes for each statement after the session timeout SET."""

    def __init__(self, db: "FakeDatabase"):
        self._db = db
        self._rows: list[dict] = []
        self.rowcount = 0
        self.lastrowid = None
        self.closed = False

    def execute(self, sql: str, params=None) -> None:
        self._db.executed.append((" ".join(sql.split()), params))
        if sql.startswith("SET SESSION"):
            return
        outcome = self._db.outcomes.pop(0) if self._db.outcomes else {}
        if isinstance(outcome, Exception):
            raise outcome
        self._rows = list(outcome.get("rows", ()))
        self.rowcount = outcome.get("rowcount", len(self._rows))
        self.lastrowid = outcome.get("lastrowid")

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    def __init__(self, db: "FakeDatabase"):
        self._db = db
        self.commits = 0
        self.rollbacks = 0
        self.closed = False
        self.cursors: list[FakeCursor] = []

    def cursor(self, dictionary: bool = False) -> FakeCursor:
        cur = FakeCursor(self._db)
        self.cursors.append(cur)
        return cur

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1

    def close(self) -> None:
        self.closed = True


class FakeDatabase:
    """Stands in for DatabaseConnection; each connect() hands out a FakeConnection."""

    statement_timeout_ms = 1500

    def __init__(self):
        self.outcomes: list = []
        self.executed: list[tuple[str, object]] = []
        self.connections: list[FakeConnection] = []
        self.connect_error: Optional[Exception] = None

    def script(self, *outcomes) -> None:
        self.outcomes.extend(outcomes)

    def connect(self) -> FakeConnection:
        if self.connect_error is not None:
            raise self.connect_error
        conn = FakeConnection(self)
        self.connections.append(conn)
        return conn

    def statements(self) -> list[str]:
        return [sql for sql, _ in self.executed if not sql.startswith("SET SESSION")]


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def schemas() -> InMemorySchemas:
    return InMemorySchemas()


@pytest.fixture
def submissions() -> InMemorySubmissions:
    return InMemorySubmissions()


@pytest.fixture
def reservations(submissions) -> InMemoryReservations:
    return InMemoryReservations(submissions)


@pytest.fixture
def quotas_repo() -> InMemoryQuotas:
    return InMemoryQuotas()


@pytest.fixture
def container(schemas, submissions, reservations, quotas_repo):
    return wire(
        settings=ServiceSettings(),
        schemas_repo=schemas,
        submissions_repo=submissions,
        quotas_repo=quotas_repo,
        reservations_repo=reservations,
        attendance_service=AttendanceService(quotas_repo, reservations, clock=lambda: FIXED_NOW),
    )


@pytest.fixture
def registered_schemas(container):
    container.form_service.register_schema(PERSONNEL_FORM, PERSONNEL_SCHEMA)
    container.form_service.register_schema(RESERVE_FORM, RESERVE_SCHEMA)
    return container


@pytest.fixture
def add_person(submissions):
    def _add(first: str, last: str, rank: str = "") -> str:
        return submissions.create(PERSONNEL_FORM, {"firstName": first, "lastName": last, "rank": rank}).submission_id

    return _add


@pytest.fixture
def add_reservation(submissions):
    def _add(employee, start: str, end: Optional[str] = None, **extra) -> str:
        data = {"employeeName": employee, "startDate": start, **extra}
        if end is not None:
            data["endDate"] = end
        return submissions.create(RESERVE_FORM, data).submission_id

    return _add


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()
