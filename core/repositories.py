# =============================================================================
# core/repositories.py - Owner-Scoped Data Access
# =============================================================================
# All reads and writes of user-owned records go through these classes.
#
# ScopedRepository is bound to one owner at construction. Every lookup it
# issues is the single predicate {"id": record_id, "user_id": owner_id}, so a
# record owned by someone else is indistinguishable from one that doesn't
# exist. Services turn a None result into NotFoundError.
#
# Usage:
#   todos = ScopedRepository(store, "todos", owner_id=user.id)
#   todo = todos.get(todo_id)          # None if missing OR not owned
#   todos.update(todo_id, {"completed": True})
# =============================================================================

import logging
from typing import Any

from lib.store import DocumentStore, DuplicateKeyError, Row
from lib.utils import new_id, parse_uuid, utc_now_iso

logger = logging.getLogger(__name__)


class ScopedRepository:
    """
    Table access restricted to the records of a single owner.

    Args:
        store: Backing document store
        table: Table name
        owner_id: The authenticated user's id
        owner_field: Column holding the owner id
    """

    def __init__(
        self,
        store: DocumentStore,
        table: str,
        owner_id: str,
        owner_field: str = "user_id",
    ):
        if not owner_id:
            raise ValueError("ScopedRepository requires an owner id")
        self.store = store
        self.table = table
        self.owner_id = str(owner_id)
        self.owner_field = owner_field

    def _predicate(self, record_id: Any) -> dict[str, Any] | None:
        """Build the id AND owner predicate; None when the id can't match anything."""
        parsed = parse_uuid(record_id)
        if parsed is None:
            return None
        return {"id": parsed, self.owner_field: self.owner_id}

    def list(self, order_by: str = "created_at", descending: bool = True) -> list[Row]:
        """All of the owner's records, newest first by default."""
        return self.store.find(
            self.table,
            {self.owner_field: self.owner_id},
            order_by=order_by,
            descending=descending,
        )

    def create(self, data: dict[str, Any]) -> Row:
        """Insert a record owned by the bound owner (any owner in data is overwritten)."""
        now = utc_now_iso()
        row = {
            **data,
            "id": new_id(),
            self.owner_field: self.owner_id,
            "created_at": now,
            "updated_at": now,
        }
        created = self.store.insert(self.table, row)
        logger.info(f"Created {self.table} record {created['id']} for owner {self.owner_id}")
        return created

    def get(self, record_id: Any) -> Row | None:
        predicate = self._predicate(record_id)
        if predicate is None:
            return None
        return self.store.find_one(self.table, predicate)

    def update(self, record_id: Any, changes: dict[str, Any]) -> Row | None:
        """
        Apply changes to an owned record and return the updated row.

        The id and owner columns can't be changed through this method.
        """
        predicate = self._predicate(record_id)
        if predicate is None:
            return None
        safe = {k: v for k, v in changes.items() if k not in ("id", self.owner_field)}
        safe["updated_at"] = utc_now_iso()
        return self.store.update(self.table, predicate, safe)

    def delete(self, record_id: Any) -> Row | None:
        predicate = self._predicate(record_id)
        if predicate is None:
            return None
        deleted = self.store.delete(self.table, predicate)
        if deleted:
            logger.info(f"Deleted {self.table} record {deleted['id']} for owner {self.owner_id}")
        return deleted


class ProfileRepository:
    """
    The one profile row belonging to an owner.

    Profiles are looked up by owner alone; there is no way to address
    another user's profile for writing.
    """

    table = "profiles"

    def __init__(self, store: DocumentStore, owner_id: str):
        if not owner_id:
            raise ValueError("ProfileRepository requires an owner id")
        self.store = store
        self.owner_id = str(owner_id)

    def _predicate(self) -> dict[str, Any]:
        return {"user_id": self.owner_id}

    def get(self) -> Row | None:
        return self.store.find_one(self.table, self._predicate())

    def create(self, data: dict[str, Any]) -> Row:
        now = utc_now_iso()
        row = {**data, "id": new_id(), "user_id": self.owner_id, "created_at": now, "updated_at": now}
        try:
            return self.store.insert(self.table, row)
        except DuplicateKeyError:
            # Created concurrently by another request for the same owner
            existing = self.get()
            if existing is None:
                raise
            return existing

    def update(self, changes: dict[str, Any]) -> Row | None:
        safe = {k: v for k, v in changes.items() if k not in ("id", "user_id")}
        safe["updated_at"] = utc_now_iso()
        return self.store.update(self.table, self._predicate(), safe)

    def delete(self) -> Row | None:
        return self.store.delete(self.table, self._predicate())

    @staticmethod
    def find_by_owner(store: DocumentStore, user_id: Any) -> Row | None:
        """Read-only lookup of any user's profile (for the public view)."""
        parsed = parse_uuid(user_id)
        if parsed is None:
            return None
        return store.find_one(ProfileRepository.table, {"user_id": parsed})


class UserRepository:
    """Credential records. Email uniqueness is enforced by the store."""

    table = "users"

    def __init__(self, store: DocumentStore):
        self.store = store

    def find_by_email(self, email: str) -> Row | None:
        return self.store.find_one(self.table, {"email": email.lower()})

    def find_by_id(self, user_id: Any) -> Row | None:
        parsed = parse_uuid(user_id)
        if parsed is None:
            return None
        return self.store.find_one(self.table, {"id": parsed})

    def create(self, email: str, password_hash: str) -> Row:
        """
        Insert a new user.

        Raises:
            DuplicateKeyError: If the email is already registered
        """
        row = {
            "id": new_id(),
            "email": email.lower(),
            "password_hash": password_hash,
            "created_at": utc_now_iso(),
        }
        created = self.store.insert(self.table, row)
        logger.info(f"Created user {created['id']}")
        return created
