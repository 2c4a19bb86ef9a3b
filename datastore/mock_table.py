"""In-process stand-in for the hosted relational store."""

from __future__ import annotations

import copy
import json
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional, Sequence
from uuid import uuid4

from settings import Settings

Row = Dict[str, Any]

USERS_TABLE = "users"
READINGS_TABLE = "sensor_readings"
THRESHOLDS_TABLE = "thresholds"

# Columns the store enforces for the tables the service knows about.
TABLE_SCHEMAS: Dict[str, Dict[str, Any]] = {
    USERS_TABLE: {"unique": ("email",), "timestamp_column": "created_at"},
    READINGS_TABLE: {"timestamp_column": "recorded_at"},
    THRESHOLDS_TABLE: {"timestamp_column": "created_at"},
}


class StoreFailure(Exception):
    """Any failure reported by the store."""

    code = "store_failure"


class UniqueViolation(StoreFailure):
    code = "23505"

    def __init__(self, table: str, column: str, value: Any) -> None:
        super().__init__(
            f"Duplicate value {value!r} for unique column {column!r} in table {table!r}."
        )
        self.table = table
        self.column = column
        self.value = value


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _project(row: Row, columns: Optional[Sequence[str]]) -> Row:
    if columns is None:
        return copy.deepcopy(row)
    return {column: copy.deepcopy(row.get(column)) for column in columns}


class MockTable:

    def __init__(
        self,
        name: str,
        unique: Iterable[str] = (),
        timestamp_column: Optional[str] = None,
        on_change=None,
    ) -> None:
        self.name = name
        self.unique = tuple(unique)
        self.timestamp_column = timestamp_column
        self._rows: List[Row] = []
        self._lock = Lock()
        self._on_change = on_change

    def insert(self, row: Row, columns: Optional[Sequence[str]] = None) -> Row:
        """Store a new row, assigning ``id`` and the server timestamp."""
        record = copy.deepcopy(row)
        record["id"] = str(uuid4())
        if self.timestamp_column:
            record[self.timestamp_column] = _utc_timestamp()

        with self._lock:
            for column in self.unique:
                value = record.get(column)
                if any(existing.get(column) == value for existing in self._rows):
                    raise UniqueViolation(self.name, column, value)
            self._rows.append(record)
            stored = _project(record, columns)

        if self._on_change is not None:
            try:
                self._on_change()
            except StoreFailure:
                with self._lock:
                    self._rows.remove(record)
                raise
        return stored

    def find_one(
        self, column: str, value: Any, columns: Optional[Sequence[str]] = None
    ) -> Optional[Row]:
        with self._lock:
            for row in self._rows:
                if row.get(column) == value:
                    return _project(row, columns)
        return None

    def count(self) -> int:
        with self._lock:
            return len(self._rows)

    def select_range(
        self,
        order_by: str,
        descending: bool = False,
        offset: int = 0,
        limit: Optional[int] = None,
        columns: Optional[Sequence[str]] = None,
    ) -> List[Row]:
        """Return an ordered window of rows; ties keep insertion order."""
        with self._lock:
            indexed = list(enumerate(self._rows))
            indexed.sort(
                key=lambda pair: (pair[1].get(order_by) or "", pair[0]),
                reverse=descending,
            )
            end = None if limit is None else offset + limit
            return [_project(row, columns) for _, row in indexed[offset:end]]

    def first(
        self,
        order_by: str,
        descending: bool = False,
        columns: Optional[Sequence[str]] = None,
    ) -> Optional[Row]:
        rows = self.select_range(order_by, descending=descending, limit=1, columns=columns)
        return rows[0] if rows else None

    def dump(self) -> List[Row]:
        with self._lock:
            return copy.deepcopy(self._rows)

    def load(self, rows: Iterable[Row]) -> None:
        with self._lock:
            self._rows = [dict(row) for row in rows]


class MockTableStore:
    """Holds named tables and optionally mirrors them to a JSON file."""

    def __init__(self, persistence_path: Optional[Path] = None) -> None:
        self.persistence_path = persistence_path
        self._tables: Dict[str, MockTable] = {}
        self._pending: Dict[str, List[Row]] = {}
        self._persist_lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def define_table(
        self,
        name: str,
        unique: Iterable[str] = (),
        timestamp_column: Optional[str] = None,
    ) -> MockTable:
        table = MockTable(
            name,
            unique=unique,
            timestamp_column=timestamp_column,
            on_change=self._persist,
        )
        rows = self._pending.pop(name, None)
        if rows:
            table.load(rows)
        self._tables[name] = table
        return table

    def table(self, name: str) -> MockTable:
        table = self._tables.get(name)
        if table is None:
            table = self.define_table(name, **TABLE_SCHEMAS.get(name, {}))
        return table

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        with self._persist_lock:
            payload = {name: table.dump() for name, table in self._tables.items()}
            payload.update(self._pending)
            try:
                self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))
            except OSError as exc:
                raise StoreFailure(f"Could not write {self.persistence_path}: {exc}") from exc

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            data = {}

        for name, rows in data.items():
            if isinstance(rows, list):
                self._pending[name] = rows


def build_store(settings: Settings) -> MockTableStore:
    """Construct the store with every table the service reads and writes."""
    path = settings.store_persistence_path
    store = MockTableStore(persistence_path=Path(path) if path else None)
    for name, schema in TABLE_SCHEMAS.items():
        store.define_table(name, **schema)
    return store
