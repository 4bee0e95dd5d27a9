from __future__ import annotations

from datetime import date, datetime

import mysql.connector
import pytest

from src.quota_system.quota_system.core.exceptions import ConflictError
from src.quota_system.quota_system.quotas.mysql_quota_repository import MySQLQuotaRepository

DAY = date(2025, 6, 20)
REPORTED_AT = datetime(2025, 6, 20, 18, 0, 0)


def _quota_row(**overrides) -> dict:
    row = {
        "quota_id": 11,
        "quota_date": DAY,
        "quota": 10,
        "notes": None,
        "created_by": "admin",
        "manager_reported": 0,
        "manager_reported_at": None,
        "manager_reported_by": None,
        "created_at": None,
        "updated_at": None,
    }
    row.update(overrides)
    return row


def test_insert_reads_back_the_new_row(fake_db):
    fake_db.script({"rowcount": 1, "lastrowid": 11}, {"rows": [_quota_row()]})

    quota = MySQLQuotaRepository(fake_db).insert(day=DAY, quota=10, notes=None, created_by="admin")

    assert quota.quota_id == 11
    assert quota.quota == 10
    assert fake_db.executed[-1][1] == (11,)
    assert fake_db.connections[0].commits == 1


def test_duplicate_date_on_insert_is_conflict(fake_db):
    fake_db.script(mysql.connector.IntegrityError(msg="Duplicate entry '2025-06-20'", errno=1062))

    with pytest.raises(ConflictError) as exc_info:
        MySQLQuotaRepository(fake_db).insert(day=DAY, quota=10, notes=None, created_by="admin")

    assert exc_info.value.status_code == 409
    conn = fake_db.connections[0]
    assert conn.rollbacks == 1
    assert conn.commits == 0


def test_first_manager_report_wins(fake_db):
    reported = _quota_row(manager_reported=1, manager_reported_at=REPORTED_AT, manager_reported_by="lead")
    fake_db.script({"rowcount": 1}, {"rowcount": 1}, {"rows": [reported]})

    won, quota = MySQLQuotaRepository(fake_db).mark_manager_reported(
        day=DAY, reported_by="lead", reported_at=REPORTED_AT
    )

    assert won is True
    assert quota.manager_reported is True
    assert quota.manager_reported_by == "lead"
    statements = fake_db.statements()
    assert statements[0].startswith("INSERT IGNORE INTO quotas")
    assert "WHERE quota_date=%s AND manager_reported=0" in statements[1]


def test_second_manager_report_loses_and_sees_first_reporter(fake_db):
    stored = _quota_row(manager_reported=1, manager_reported_at=REPORTED_AT, manager_reported_by="lead")
    fake_db.script({"rowcount": 0}, {"rowcount": 0}, {"rows": [stored]})

    won, quota = MySQLQuotaRepository(fake_db).mark_manager_reported(
        day=DAY, reported_by="other", reported_at=datetime(2025, 6, 20, 19, 0, 0)
    )

    assert won is False
    assert quota.manager_reported_by == "lead"
    assert quota.manager_reported_at == REPORTED_AT


def test_delete_all_returns_affected_rows(fake_db):
    fake_db.script({"rowcount": 4})

    assert MySQLQuotaRepository(fake_db).delete_all() == 4
    assert fake_db.statements() == ["DELETE FROM quotas"]
