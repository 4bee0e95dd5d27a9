from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (round() would go to even)."""
    return int(math.floor(value + 0.5))


def percent(part: float, whole: float) -> int:
    """Whole-number percentage of part over whole; callers guard whole == 0."""
    return round_half_up(part / whole * 100)
