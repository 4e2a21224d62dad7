# =============================================================================
# lib/memory_store.py - In-Process Document Store
# =============================================================================
# A DocumentStore that keeps rows in process memory. Used for local
# development (STORE_BACKEND=memory) and by the test suite.
#
# Unique constraints are declared per table and checked under the same lock
# as the write, so insert-with-constraint is atomic just like a unique index.
# Rows are deep-copied on the way in and out; callers never share state with
# the store.
# =============================================================================

from __future__ import annotations

import copy
import logging
import threading

from lib.store import DocumentStore, DuplicateKeyError, Filters, Row
from lib.utils import new_id

logger = logging.getLogger(__name__)


# Mirrors the unique indexes of the Postgres schema
DEFAULT_UNIQUE_FIELDS: dict[str, tuple[str, ...]] = {
    "users": ("id", "email"),
    "todos": ("id",),
    "profiles": ("id", "user_id"),
}


def _matches(row: Row, filters: Filters) -> bool:
    return all(field in row and row[field] == value for field, value in filters.items())


class InMemoryStore(DocumentStore):
    """
    Thread-safe in-memory implementation of DocumentStore.

    Example:
        store = InMemoryStore()
        row = store.insert("todos", {"title": "Buy milk", "user_id": "u1"})
        store.find_one("todos", {"id": row["id"], "user_id": "u1"})
    """

    def __init__(self, unique_fields: dict[str, tuple[str, ...]] | None = None):
        self._tables: dict[str, list[Row]] = {}
        self._unique = dict(DEFAULT_UNIQUE_FIELDS if unique_fields is None else unique_fields)
        self._lock = threading.RLock()

    def _table(self, table: str) -> list[Row]:
        return self._tables.setdefault(table, [])

    def _check_unique(self, table: str, row: Row, ignore: Row | None = None) -> None:
        for field in self._unique.get(table, ()):
            if row.get(field) is None:
                continue
            for existing in self._table(table):
                if existing is ignore:
                    continue
                if existing.get(field) == row[field]:
                    raise DuplicateKeyError(table, field, row[field])

    def insert(self, table: str, row: Row) -> Row:
        stored = copy.deepcopy(row)
        stored.setdefault("id", new_id())
        with self._lock:
            self._check_unique(table, stored)
            self._table(table).append(stored)
        logger.debug(f"Inserted {table} row {stored['id']}")
        return copy.deepcopy(stored)

    def find(
        self,
        table: str,
        filters: Filters,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        with self._lock:
            rows = [copy.deepcopy(r) for r in self._table(table) if _matches(r, filters)]
        if order_by:
            # Rows missing the key sort first
            rows.sort(
                key=lambda r: (r.get(order_by) is not None, r.get(order_by) or ""),
                reverse=descending,
            )
        return rows

    def find_one(self, table: str, filters: Filters) -> Row | None:
        with self._lock:
            for row in self._table(table):
                if _matches(row, filters):
                    return copy.deepcopy(row)
        return None

    def update(self, table: str, filters: Filters, changes: Row) -> Row | None:
        with self._lock:
            for row in self._table(table):
                if _matches(row, filters):
                    candidate = {**row, **copy.deepcopy(changes)}
                    self._check_unique(table, candidate, ignore=row)
                    row.clear()
                    row.update(candidate)
                    return copy.deepcopy(row)
        return None

    def delete(self, table: str, filters: Filters) -> Row | None:
        with self._lock:
            rows = self._table(table)
            for index, row in enumerate(rows):
                if _matches(row, filters):
                    return rows.pop(index)
        return None

    def count(self, table: str) -> int:
        """Number of rows in a table."""
        with self._lock:
            return len(self._table(table))

    def clear(self) -> None:
        """Drop every row from every table."""
        with self._lock:
            self._tables.clear()
