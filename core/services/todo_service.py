# =============================================================================
# core/services/todo_service.py - Todo Business Logic
# =============================================================================
# Handles todo CRUD for one authenticated owner. Every lookup goes through a
# ScopedRepository, so "missing" and "someone else's" are the same 404.
#
# Each write follows the same steps: validate the input, look up the owned
# record, mutate it in the store, return the stored representation.
# =============================================================================

import logging
from typing import Any

from app.exceptions import NotFoundError
from core.metrics import Metric, MetricsRecorder
from core.models import TodoResponse
from core.repositories import ScopedRepository
from core.validation import validate_todo_create, validate_todo_update
from lib.observability import ObservabilitySink
from lib.store import DocumentStore

logger = logging.getLogger(__name__)


class TodoService:
    """
    Todo operations scoped to a single owner.

    Args:
        store: Backing document store
        owner_id: The authenticated user's id
        metrics: Advisory counters
        sink: Observability sink (best-effort)
    """

    table = "todos"

    def __init__(
        self,
        store: DocumentStore,
        owner_id: str,
        metrics: MetricsRecorder,
        sink: ObservabilitySink,
    ):
        self.todos = ScopedRepository(store, self.table, owner_id)
        self.metrics = metrics
        self.sink = sink

    def list(self) -> list[TodoResponse]:
        """The owner's todos, newest first."""
        return [TodoResponse.from_row(row) for row in self.todos.list()]

    def create(self, payload: Any) -> TodoResponse:
        """
        Create a todo.

        Raises:
            ValidationFailedError: If the title is missing or out of bounds
        """
        data = validate_todo_create(payload)
        row = self.todos.create({"title": data.title, "completed": False})
        self.metrics.increment(Metric.TODOS_CREATED)
        self.sink.add_breadcrumb("todo", "Todo created", data={"todo_id": row["id"]})
        return TodoResponse.from_row(row)

    def get(self, todo_id: str) -> TodoResponse:
        """
        Raises:
            NotFoundError: If the todo doesn't exist or isn't the owner's
        """
        row = self.todos.get(todo_id)
        if row is None:
            raise NotFoundError("Todo")
        return TodoResponse.from_row(row)

    def update(self, todo_id: str, payload: Any) -> TodoResponse:
        """
        Apply a partial update (title and/or completed).

        Raises:
            ValidationFailedError: If a sent field is invalid (nothing is changed)
            NotFoundError: If the todo doesn't exist or isn't the owner's
        """
        changes = validate_todo_update(payload).model_dump(exclude_unset=True)

        existing = self.todos.get(todo_id)
        if existing is None:
            raise NotFoundError("Todo")

        row = self.todos.update(todo_id, changes)
        if row is None:
            # Deleted between the lookup and the write
            raise NotFoundError("Todo")

        self.metrics.increment(Metric.TODOS_UPDATED)
        if changes.get("completed") is True and not existing.get("completed"):
            self.metrics.increment(Metric.TODOS_COMPLETED)
        self.sink.add_breadcrumb(
            "todo", "Todo updated", data={"todo_id": row["id"], "fields": sorted(changes)}
        )
        return TodoResponse.from_row(row)

    def delete(self, todo_id: str) -> None:
        """
        Raises:
            NotFoundError: If the todo doesn't exist or isn't the owner's
        """
        row = self.todos.delete(todo_id)
        if row is None:
            raise NotFoundError("Todo")
        self.metrics.increment(Metric.TODOS_DELETED)
        self.sink.add_breadcrumb("todo", "Todo deleted", level="warning", data={"todo_id": row["id"]})
