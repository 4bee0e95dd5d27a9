from __future__ import annotations

from datetime import date
from typing import Iterable

from ..common.datetime_utils import ONE_DAY
from ..core.constants import CONSECUTIVE_DAYS_THRESHOLD


def run_length_ending_at(days: Iterable[date], target: date) -> int:
    """Length of the consecutive-day run that contains ``target`` up to and including it.

    Returns 0 when ``target`` is not one of the days.
    """

    run = 0
    prev = None
    for day in sorted(set(days)):
        if day > target:
            break
        run = run + 1 if prev is not None and day - prev == ONE_DAY else 1
        prev = day
        if day == target:
            return run
    return 0


def is_ending_on(days: Iterable[date], target: date, *, threshold: int = CONSECUTIVE_DAYS_THRESHOLD) -> bool:
    """True when ``target`` closes a run of more than ``threshold`` consecutive days."""

    day_set = set(days)
    if target not in day_set or target + ONE_DAY in day_set:
        return False
    return run_length_ending_at(day_set, target) > threshold
