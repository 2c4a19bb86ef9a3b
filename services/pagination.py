"""Offset/limit windows over store tables."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from app.errors import ValidationError
from datastore.mock_table import MockTable

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass
class PageWindow:
    page: int
    limit: int
    total: int
    rows: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)


def validate_window(page: int, limit: int) -> None:
    if page < 1 or limit < 1 or limit > MAX_LIMIT:
        raise ValidationError("Invalid pagination parameters")


def fetch_page(
    table: MockTable,
    page: int,
    limit: int,
    order_by: str,
    columns: Sequence[str],
) -> PageWindow:
    """Count the table, then fetch rows ``(page - 1) * limit`` onwards, newest first."""
    validate_window(page, limit)
    total = table.count()
    rows = table.select_range(
        order_by,
        descending=True,
        offset=(page - 1) * limit,
        limit=limit,
        columns=columns,
    )
    return PageWindow(page=page, limit=limit, total=total, rows=rows)
