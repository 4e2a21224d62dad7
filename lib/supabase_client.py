# =============================================================================
# lib/supabase_client.py - Supabase Document Store
# =============================================================================
# DocumentStore implementation backed by Supabase (PostgREST over Postgres).
# Filters become chained .eq() calls on one query, so a compound predicate
# such as (id AND user_id) is evaluated by Postgres in a single statement.
#
# Expected schema (unique indexes enforce the constraints the app relies on):
#   users(id uuid pk, email text unique, password_hash text, created_at timestamptz)
#   todos(id uuid pk, user_id uuid references users, title text,
#         completed bool, created_at timestamptz, updated_at timestamptz)
#   profiles(id uuid pk, user_id uuid unique references users, ... jsonb columns
#            preferences, stats, social_links, privacy, account)
#
# Usage:
#   store = SupabaseStore.from_settings(settings)
#   store.find_one("todos", {"id": todo_id, "user_id": owner_id})
# =============================================================================

from __future__ import annotations

import logging
import re
from typing import Any

from supabase import Client, create_client

from lib.store import DocumentStore, DuplicateKeyError, Filters, Row, StoreError

# Set up logging for this module
logger = logging.getLogger(__name__)

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"
_KEY_PATTERN = re.compile(r"Key \((?P<field>[^)]+)\)")


class SupabaseClientError(StoreError):
    """
    Error during Supabase operations.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(self, message: str, code: str = "SUPABASE_ERROR", **kwargs):
        super().__init__(message, code=code, **kwargs)


def _duplicate_from(error: Exception, table: str) -> DuplicateKeyError | None:
    """Translate a PostgREST unique violation into DuplicateKeyError."""
    code = getattr(error, "code", None)
    if code != UNIQUE_VIOLATION and UNIQUE_VIOLATION not in str(error):
        return None
    details = getattr(error, "details", None) or str(error)
    match = _KEY_PATTERN.search(details)
    field = match.group("field") if match else "unknown"
    return DuplicateKeyError(table, field)


class SupabaseStore(DocumentStore):
    """
    Typed wrapper for Supabase table operations.

    One client instance is shared per store. Uses the service_role key,
    which bypasses Row Level Security; ownership is enforced by the
    repositories that build the filters.
    """

    def __init__(self, client: Client):
        self._client = client

    @classmethod
    def from_settings(cls, settings: Any) -> "SupabaseStore":
        """
        Create a store from application settings.

        Raises:
            SupabaseClientError: If client creation fails
        """
        try:
            client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
            logger.info("Supabase client initialized successfully")
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create Supabase client: {e}",
                code="CLIENT_INIT_FAILED",
                suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file",
            ) from e
        return cls(client)

    def _filtered(self, query, filters: Filters):
        for field, value in filters.items():
            query = query.eq(field, value)
        return query

    # -------------------------------------------------------------------------
    # DocumentStore
    # -------------------------------------------------------------------------

    def insert(self, table: str, row: Row) -> Row:
        try:
            response = self._client.table(table).insert(row).execute()
        except Exception as e:
            duplicate = _duplicate_from(e, table)
            if duplicate:
                raise duplicate from e
            raise SupabaseClientError(
                message=f"Failed to insert into {table}: {e}",
                code="INSERT_FAILED",
                details={"table": table},
            ) from e

        if not response.data:
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA",
                details={"table": table},
            )
        return response.data[0]

    def find(
        self,
        table: str,
        filters: Filters,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        try:
            query = self._filtered(self._client.table(table).select("*"), filters)
            if order_by:
                query = query.order(order_by, desc=descending)
            response = query.execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to query {table}: {e}",
                code="FETCH_FAILED",
                details={"table": table},
            ) from e

        rows = response.data or []
        logger.debug(f"Fetched {len(rows)} rows from {table}")
        return rows

    def find_one(self, table: str, filters: Filters) -> Row | None:
        try:
            query = self._filtered(self._client.table(table).select("*"), filters)
            response = query.limit(1).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code="FETCH_FAILED",
                details={"table": table},
            ) from e

        return response.data[0] if response.data else None

    def update(self, table: str, filters: Filters, changes: Row) -> Row | None:
        try:
            query = self._filtered(self._client.table(table).update(changes), filters)
            response = query.execute()
        except Exception as e:
            duplicate = _duplicate_from(e, table)
            if duplicate:
                raise duplicate from e
            raise SupabaseClientError(
                message=f"Failed to update {table}: {e}",
                code="UPDATE_FAILED",
                details={"table": table},
            ) from e

        return response.data[0] if response.data else None

    def delete(self, table: str, filters: Filters) -> Row | None:
        try:
            query = self._filtered(self._client.table(table).delete(), filters)
            response = query.execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete from {table}: {e}",
                code="DELETE_FAILED",
                details={"table": table},
            ) from e

        return response.data[0] if response.data else None

    def ping(self) -> None:
        try:
            self._client.table("users").select("id").limit(1).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Supabase is unreachable: {e}",
                code="PING_FAILED",
            ) from e
