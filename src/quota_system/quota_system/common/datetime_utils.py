from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator

from ..core.constants import ISO_DATE_FORMAT

ONE_DAY = timedelta(days=1)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, ISO_DATE_FORMAT).date()


def format_iso_date(value: date) -> str:
    return value.strftime(ISO_DATE_FORMAT)


def date_range(start: date, stop: date) -> Iterator[date]:
    """Yield every calendar day in the half-open interval [start, stop).

    Each call builds fresh date objects, so the sequence can be restarted
    by calling again with the same bounds.
    """
    for offset in range((stop - start).days):
        yield start + timedelta(days=offset)


def days_inclusive(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start through end."""
    return date_range(start, end + ONE_DAY)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
