from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.quota_system.quota_system.attendance.consecutive import is_ending_on, run_length_ending_at


def _days(start: date, n: int) -> list[date]:
    return [start + timedelta(days=i) for i in range(n)]


@pytest.mark.parametrize("length", [1, 2])
def test_short_orders_never_end(length):
    days = _days(date(2025, 6, 1), length)

    assert not any(is_ending_on(days, d) for d in days)


@pytest.mark.parametrize("length", [3, 4, 10])
def test_long_orders_end_exactly_on_last_day(length):
    days = _days(date(2025, 6, 1), length)

    assert [d for d in days if is_ending_on(days, d)] == [days[-1]]


def test_gaps_split_runs():
    days = [date(2025, 6, 1), date(2025, 6, 2), date(2025, 6, 4), date(2025, 6, 5), date(2025, 6, 6)]

    assert run_length_ending_at(days, date(2025, 6, 2)) == 2
    assert run_length_ending_at(days, date(2025, 6, 6)) == 3
    assert not is_ending_on(days, date(2025, 6, 2))
    assert is_ending_on(days, date(2025, 6, 6))


def test_day_outside_set_has_no_run():
    assert run_length_ending_at(_days(date(2025, 6, 1), 3), date(2025, 6, 10)) == 0
