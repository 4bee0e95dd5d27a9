from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import Quota, QuotaUpdate


class QuotaRepository(Protocol):
    def get_by_id(self, quota_id: int) -> Optional[Quota]:
        raise NotImplementedError

    def get_by_date(self, day: date) -> Optional[Quota]:
        raise NotImplementedError

    def list_range(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Sequence[Quota]:
        """Quotas within the optional bounds, ascending by date."""

        raise NotImplementedError

    def count_range(self, *, start: Optional[date] = None, end: Optional[date] = None) -> int:
        raise NotImplementedError

    def insert(self, *, day: date, quota: int, notes: Optional[str], created_by: str) -> Quota:
        """Create a new row; raises ConflictError when the date already exists."""

        raise NotImplementedError

    def upsert(self, *, day: date, quota: int, notes: Optional[str], created_by: str) -> tuple[Quota, bool]:
        """Create or overwrite quota/notes/createdBy keyed by date.

        Returns (quota, created).
        """

        raise NotImplementedError

    def update_by_id(self, quota_id: int, changes: QuotaUpdate) -> Optional[Quota]:
        raise NotImplementedError

    def update_by_date(self, day: date, changes: QuotaUpdate) -> Optional[Quota]:
        raise NotImplementedError

    def update_range(self, *, start: date, end: date, changes: QuotaUpdate) -> tuple[int, int]:
        """Returns (matched, modified)."""

        raise NotImplementedError

    def delete_by_id(self, quota_id: int) -> Optional[Quota]:
        raise NotImplementedError

    def delete_by_date(self, day: date) -> Optional[Quota]:
        raise NotImplementedError

    def delete_many(self, quota_ids: Sequence[int]) -> int:
        raise NotImplementedError

    def delete_range(self, *, start: date, end: date) -> int:
        raise NotImplementedError

    def delete_all(self) -> int:
        raise NotImplementedError

    def mark_manager_reported(self, *, day: date, reported_by: str, reported_at: datetime) -> tuple[bool, Quota]:
        """Atomic write-once gate on the date's manager report.

        Creates a zero quota row when none exists. Returns (won, row) where
        ``won`` is False if the date had already been reported; in that case
        ``row`` carries the original reporter and timestamp.
        """

        raise NotImplementedError
