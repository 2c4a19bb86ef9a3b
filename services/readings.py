"""Sensor reading listing and ingestion."""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Optional

from app.errors import StoreError, ValidationError
from app.schemas import Pagination, Reading, ReadingPage
from datastore.mock_table import READINGS_TABLE, MockTableStore, StoreFailure
from services.pagination import fetch_page

logger = logging.getLogger(__name__)

_COLUMNS = ("id", "temperature", "threshold_value", "recorded_at")


def is_number(value: Any) -> bool:
    """True for finite JSON numbers; booleans do not count."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _normalize(row: Dict[str, Any]) -> Reading:
    threshold = row.get("threshold_value")
    return Reading(
        id=row["id"],
        temperature=float(row["temperature"]),
        threshold_value=None if threshold is None else float(threshold),
        recorded_at=row["recorded_at"],
    )


class ReadingsService:

    def __init__(self, store: MockTableStore) -> None:
        self.table = store.table(READINGS_TABLE)

    def list(self, page: int, limit: int) -> ReadingPage:
        try:
            window = fetch_page(self.table, page, limit, "recorded_at", _COLUMNS)
        except StoreFailure as exc:
            raise self._store_error("list", exc) from exc
        logger.debug(
            "Listed readings",
            extra={"page": page, "limit": limit, "total": window.total},
        )
        return ReadingPage(
            data=[_normalize(row) for row in window.rows],
            pagination=Pagination(
                page=window.page,
                limit=window.limit,
                total=window.total,
                total_pages=window.total_pages,
            ),
        )

    def latest(self) -> Optional[Reading]:
        try:
            row = self.table.first("recorded_at", descending=True, columns=_COLUMNS)
        except StoreFailure as exc:
            raise self._store_error("latest", exc) from exc
        return None if row is None else _normalize(row)

    def create(self, temperature: Any, threshold_value: Any = None) -> Reading:
        if not is_number(temperature):
            raise ValidationError("temperature must be a number")
        if threshold_value is not None and not is_number(threshold_value):
            raise ValidationError("threshold_value must be a number")

        try:
            row = self.table.insert(
                {"temperature": temperature, "threshold_value": threshold_value},
                columns=_COLUMNS,
            )
        except StoreFailure as exc:
            raise self._store_error("create", exc) from exc
        reading = _normalize(row)
        logger.info("Stored reading %s", reading.id, extra={"table": READINGS_TABLE})
        return reading

    @staticmethod
    def _store_error(operation: str, exc: StoreFailure) -> StoreError:
        logger.error(
            "Readings %s failed",
            operation,
            extra={"table": READINGS_TABLE, "reason": str(exc)},
        )
        return StoreError(str(exc))
