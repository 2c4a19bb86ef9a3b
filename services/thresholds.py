"""Alert threshold history."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from app.errors import StoreError, ValidationError
from app.schemas import Pagination, Threshold, ThresholdPage
from datastore.mock_table import THRESHOLDS_TABLE, MockTableStore, StoreFailure
from services.pagination import fetch_page
from services.readings import is_number

logger = logging.getLogger(__name__)

_COLUMNS = ("id", "threshold_value", "created_at")


def _normalize(row: Dict[str, Any]) -> Threshold:
    return Threshold(
        id=row["id"],
        threshold_value=float(row["threshold_value"]),
        created_at=row["created_at"],
    )


class ThresholdsService:

    def __init__(self, store: MockTableStore) -> None:
        self.table = store.table(THRESHOLDS_TABLE)

    def list(self, page: int, limit: int) -> ThresholdPage:
        try:
            window = fetch_page(self.table, page, limit, "created_at", _COLUMNS)
        except StoreFailure as exc:
            raise self._store_error("list", exc) from exc
        return ThresholdPage(
            data=[_normalize(row) for row in window.rows],
            pagination=Pagination(
                page=window.page,
                limit=window.limit,
                total=window.total,
                total_pages=window.total_pages,
            ),
        )

    def latest(self) -> Optional[Threshold]:
        try:
            row = self.table.first("created_at", descending=True, columns=_COLUMNS)
        except StoreFailure as exc:
            raise self._store_error("latest", exc) from exc
        return None if row is None else _normalize(row)

    def create(self, threshold_value: Any, user_id: Optional[str] = None) -> Threshold:
        if not is_number(threshold_value):
            raise ValidationError("threshold_value must be a number")

        try:
            row = self.table.insert({"threshold_value": threshold_value}, columns=_COLUMNS)
        except StoreFailure as exc:
            raise self._store_error("create", exc) from exc
        threshold = _normalize(row)
        logger.info(
            "Stored threshold %s",
            threshold.id,
            extra={"table": THRESHOLDS_TABLE, "user_id": user_id},
        )
        return threshold

    @staticmethod
    def _store_error(operation: str, exc: StoreFailure) -> StoreError:
        logger.error(
            "Thresholds %s failed",
            operation,
            extra={"table": THRESHOLDS_TABLE, "reason": str(exc)},
        )
        return StoreError(str(exc))
