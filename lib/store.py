# =============================================================================
# lib/store.py - Document Store Interface
# =============================================================================
# Every persistence call in the application goes through a DocumentStore.
# Rows are plain dicts, tables are addressed by name, and lookups take an
# equality filter dict that is applied as a single conjunctive predicate.
#
# Implementations:
# - lib/memory_store.py: in-process store (development and tests)
# - lib/supabase_client.py: Supabase/PostgREST store (production)
#
# Usage:
#   store.insert("todos", {"title": "Buy milk", "user_id": owner_id})
#   store.find_one("todos", {"id": todo_id, "user_id": owner_id})
# =============================================================================

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from lib.utils import ApplicationError


Row = dict[str, Any]
Filters = dict[str, Any]


class StoreError(ApplicationError):
    """Raised when the backing store fails or rejects an operation."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "STORE_ERROR")
        super().__init__(message, **kwargs)


class DuplicateKeyError(StoreError):
    """
    Raised when an insert violates a unique constraint.

    The insert is rejected atomically: no row is written.
    """

    def __init__(self, table: str, field: str, value: Any = None):
        super().__init__(
            f"Duplicate value for {table}.{field}",
            code="DUPLICATE_KEY",
            details={"table": table, "field": field},
        )
        self.table = table
        self.field = field
        self.value = value


class DocumentStore(ABC):
    """
    Abstract table/row store.

    Filters are equality matches combined with AND. Implementations must
    evaluate the whole filter inside one lookup so that callers can rely on
    compound predicates (e.g. id AND owner) never exposing a partial match.
    """

    @abstractmethod
    def insert(self, table: str, row: Row) -> Row:
        """
        Insert a row and return the stored representation.

        Raises:
            DuplicateKeyError: If a unique field already holds the value
        """

    @abstractmethod
    def find(
        self,
        table: str,
        filters: Filters,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        """Return all rows matching every filter."""

    @abstractmethod
    def find_one(self, table: str, filters: Filters) -> Row | None:
        """Return the first row matching every filter, or None."""

    @abstractmethod
    def update(self, table: str, filters: Filters, changes: Row) -> Row | None:
        """Apply changes to the row matching every filter; None if no match."""

    @abstractmethod
    def delete(self, table: str, filters: Filters) -> Row | None:
        """Delete the row matching every filter and return it; None if no match."""

    def ping(self) -> None:
        """Raise if the store is unreachable. Used by readiness checks."""
