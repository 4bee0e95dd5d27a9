from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import days_inclusive, format_iso_date
from ..core.enums import BulkItemStatus
from ..core.exceptions import ConflictError, DomainError, NotFoundError
from .model import (
    BulkItemResult,
    BulkResult,
    NewQuota,
    Quota,
    QuotaPage,
    QuotaUpdate,
    RangeUpsertResult,
)
from .repository import QuotaRepository

logger = logging.getLogger(__name__)


class QuotaService:
    """Per-date capacity records.

    Inputs are expected to be validated at the boundary; this layer owns the
    conflict/not-found rules and per-item bulk semantics.
    """

    def __init__(self, quotas: QuotaRepository):
        self._quotas = quotas

    def get(self, day: date) -> Optional[Quota]:
        return self._quotas.get_by_date(day)

    def get_by_id(self, quota_id: int) -> Quota:
        quota = self._quotas.get_by_id(quota_id)
        if not quota:
            raise NotFoundError("Quota not found")
        return quota

    def list_range(self, start: date, end: date) -> list[Quota]:
        return sorted(self._quotas.list_range(start=start, end=end), key=lambda q: q.day)

    def list_page(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        page: int = 1,
        limit: int = 100,
    ) -> QuotaPage:
        quotas = self._quotas.list_range(start=start, end=end, offset=(page - 1) * limit, limit=limit)
        total = self._quotas.count_range(start=start, end=end)
        return QuotaPage(quotas=list(quotas), page=page, limit=limit, total=total)

    def create(self, *, day: date, quota: int, notes: Optional[str], created_by: str) -> Quota:
        # Create is deliberately not an upsert.
        if self._quotas.get_by_date(day):
            raise ConflictError("Quota already exists for this date. Use PUT to update.")
        created = self._quotas.insert(day=day, quota=quota, notes=notes, created_by=created_by)
        logger.info("Quota created for date %s by %s", format_iso_date(day), created_by)
        return created

    def create_range(
        self,
        *,
        start: date,
        end: Optional[date],
        quota: int,
        notes: Optional[str],
        created_by: str,
    ) -> RangeUpsertResult:
        quotas: list[Quota] = []
        created = 0
        for day in days_inclusive(start, end or start):
            row, was_created = self._quotas.upsert(day=day, quota=quota, notes=notes, created_by=created_by)
            quotas.append(row)
            created += int(was_created)

        result = RangeUpsertResult(quotas=quotas, created=created, updated=len(quotas) - created)
        logger.info(
            "%d quotas upserted for %s to %s by %s",
            result.count,
            format_iso_date(start),
            format_iso_date(end or start),
            created_by,
        )
        return result

    def bulk_create(self, items: Sequence[NewQuota]) -> BulkResult:
        result = BulkResult()
        for item in items:
            key = format_iso_date(item.day)
            try:
                row = self.create(day=item.day, quota=item.quota, notes=item.notes, created_by=item.created_by)
                result.results.append(BulkItemResult(key=key, status=BulkItemStatus.SUCCESS, data=row))
            except DomainError as exc:
                logger.warning("Bulk create failed for %s: %s", key, exc.message)
                result.results.append(BulkItemResult(key=key, status=BulkItemStatus.ERROR, error=exc.message))
        logger.info("Bulk create completed: %d successful, %d failed", result.success_count, result.error_count)
        return result

    def update_by_id(self, quota_id: int, changes: QuotaUpdate) -> Quota:
        updated = self._quotas.update_by_id(quota_id, changes)
        if not updated:
            raise NotFoundError("Quota not found")
        logger.info("Quota %s updated", quota_id)
        return updated

    def update_by_date(self, day: date, changes: QuotaUpdate) -> Quota:
        updated = self._quotas.update_by_date(day, changes)
        if not updated:
            raise NotFoundError("Quota not found for this date")
        logger.info("Quota for date %s updated", format_iso_date(day))
        return updated

    def update_range(self, *, start: date, end: date, changes: QuotaUpdate) -> tuple[int, int]:
        matched, modified = self._quotas.update_range(start=start, end=end, changes=changes)
        logger.info("%d quotas updated for %s to %s", modified, format_iso_date(start), format_iso_date(end))
        return matched, modified

    def bulk_update(self, updates: Sequence[tuple[int, QuotaUpdate]]) -> BulkResult:
        result = BulkResult()
        for quota_id, changes in updates:
            try:
                row = self.update_by_id(quota_id, changes)
                result.results.append(BulkItemResult(key=quota_id, status=BulkItemStatus.SUCCESS, data=row))
            except DomainError as exc:
                logger.warning("Bulk update failed for quota %s: %s", quota_id, exc.message)
                result.results.append(BulkItemResult(key=quota_id, status=BulkItemStatus.ERROR, error=exc.message))
        logger.info("Bulk update completed: %d successful, %d failed", result.success_count, result.error_count)
        return result

    def delete_by_id(self, quota_id: int) -> Quota:
        deleted = self._quotas.delete_by_id(quota_id)
        if not deleted:
            raise NotFoundError("Quota not found")
        logger.info("Quota %s deleted", quota_id)
        return deleted

    def delete_by_date(self, day: date) -> Quota:
        deleted = self._quotas.delete_by_date(day)
        if not deleted:
            raise NotFoundError("Quota not found for this date")
        logger.info("Quota for date %s deleted", format_iso_date(day))
        return deleted

    def bulk_delete(self, quota_ids: Sequence[int]) -> int:
        count = self._quotas.delete_many(quota_ids)
        if count == 0:
            raise NotFoundError("No quotas found for the given ids")
        logger.info("%d quotas deleted via bulk operation", count)
        return count

    def delete_range(self, *, start: date, end: Optional[date]) -> int:
        count = self._quotas.delete_range(start=start, end=end or start)
        if count == 0:
            raise NotFoundError("No quotas found in this date range")
        logger.info("%d quotas deleted for %s to %s", count, format_iso_date(start), format_iso_date(end or start))
        return count

    def delete_all(self) -> int:
        count = self._quotas.delete_all()
        logger.warning("ALL %d quotas deleted", count)
        return count
