from __future__ import annotations

import threading
from datetime import date

import pytest

from src.quota_system.quota_system.core.exceptions import ConflictError, NotFoundError

JUNE_20 = date(2025, 6, 20)


@pytest.fixture
def attendance(container):
    return container.attendance_service


def test_set_attendance_round_trips_into_history(attendance, add_reservation):
    add_reservation({"id": "p1", "display": "Dana Levi"}, "2025-06-18", "2025-06-22")

    attendance.set_attendance(employee_id="p1", day=JUNE_20, has_attended=True)
    history = attendance.history("p1").to_dict()

    assert {"date": "2025-06-20", "hasAttended": True, "isReported": True} in history["records"]


def test_set_attendance_without_covering_reservation_is_not_found(attendance, add_reservation):
    add_reservation("p1", "2025-06-01", "2025-06-05")

    with pytest.raises(NotFoundError):
        attendance.set_attendance(employee_id="p1", day=JUNE_20, has_attended=True)


def test_set_attendance_picks_the_covering_period(attendance, reservations, add_reservation):
    first = add_reservation("p1", "2025-06-01", "2025-06-05")
    second = add_reservation("p1", "2025-06-19", "2025-06-21")

    attendance.set_attendance(employee_id="p1", day=JUNE_20, has_attended=False)

    assert reservations.get_by_id(first).attendance == {}
    assert reservations.get_by_id(second).attendance == {JUNE_20: False}


def test_history_unions_periods_sorted_desc_and_rates_returned_page(attendance, add_reservation):
    add_reservation(
        "p1",
        "2025-06-01",
        "2025-06-03",
        attendance={"2025-06-01": True, "2025-06-02": False, "2025-06-03": True},
    )
    add_reservation("p1", "2025-06-10", attendance={"2025-06-10": False})
    add_reservation("p2", "2025-06-10", attendance={"2025-06-10": True})

    full = attendance.history("p1").to_dict()
    assert [r["date"] for r in full["records"]] == ["2025-06-10", "2025-06-03", "2025-06-02", "2025-06-01"]
    assert (full["totalDays"], full["attendedDays"], full["attendanceRate"]) == (4, 2, 50)

    window = attendance.history("p1", limit=2).to_dict()
    assert (window["totalDays"], window["attendedDays"], window["attendanceRate"]) == (2, 1, 50)


def test_history_for_unknown_employee_is_empty(attendance):
    assert attendance.history("nobody").to_dict() == {
        "totalDays": 0,
        "attendedDays": 0,
        "attendanceRate": 0,
        "records": [],
    }


def test_manager_report_is_one_shot(attendance, quotas_repo):
    first = attendance.submit_manager_report(day=JUNE_20, reported_by="alice")

    with pytest.raises(ConflictError) as exc:
        attendance.submit_manager_report(day=JUNE_20, reported_by="bob")

    assert first.reported_by == "alice"
    assert exc.value.details["reportedBy"] == "alice"
    assert quotas_repo.get_by_date(JUNE_20).quota == 0

    status = attendance.report_status(JUNE_20).to_dict()
    assert status["hasReported"] is True
    assert status["reportData"]["reportedBy"] == "alice"


def test_manager_report_keeps_existing_quota(attendance, quotas_repo):
    quotas_repo.insert(day=JUNE_20, quota=7, notes=None, created_by="admin")

    attendance.submit_manager_report(day=JUNE_20, reported_by="alice")

    assert quotas_repo.get_by_date(JUNE_20).quota == 7


def test_concurrent_manager_reports_have_single_winner(attendance):
    barrier = threading.Barrier(8)
    outcomes: list[str] = []
    lock = threading.Lock()

    def report(name: str) -> None:
        barrier.wait()
        try:
            attendance.submit_manager_report(day=JUNE_20, reported_by=name)
            result = "ok"
        except ConflictError:
            result = "conflict"
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=report, args=(f"m{i}",)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["conflict"] * 7 + ["ok"]


def test_report_status_without_report(attendance):
    assert attendance.report_status(JUNE_20).to_dict() == {"hasReported": False}


def test_save_attendance_reports_missing_reservations_per_item(attendance, reservations, add_reservation):
    rid = add_reservation("p1", "2025-06-20")

    result = attendance.save_attendance(JUNE_20, {rid: True, "999": False}).to_dict()

    assert (result["totalProcessed"], result["successful"], result["failed"]) == (2, 1, 1)
    assert reservations.get_by_id(rid).attendance == {JUNE_20: True}


def test_attendance_range_counts_required_and_attended(attendance, quotas_repo, add_reservation):
    add_reservation("p1", "2025-06-19", "2025-06-21", attendance={"2025-06-20": True})
    add_reservation("p2", "2025-06-20", attendance={"2025-06-20": False})
    attendance.submit_manager_report(day=JUNE_20, reported_by="alice")

    summary = attendance.attendance_range(date(2025, 6, 19), date(2025, 6, 21))

    june_20 = summary[JUNE_20].to_dict()
    assert june_20 == {
        "totalRequired": 2,
        "totalAttended": 1,
        "attendanceRate": 50,
        "managerReported": True,
        "hasData": True,
    }
    assert summary[date(2025, 6, 19)].to_dict()["hasData"] is False
    assert summary[date(2025, 6, 21)].manager_reported is False
