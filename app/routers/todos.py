# =============================================================================
# app/routers/todos.py - Todo Endpoints
# =============================================================================
# CRUD for the authenticated user's todos:
# - GET    /api/todos          - List own todos (newest first)
# - POST   /api/todos          - Create a todo
# - GET    /api/todos/{id}     - Get one todo
# - PUT    /api/todos/{id}     - Partially update a todo
# - DELETE /api/todos/{id}     - Delete a todo
#
# Creating is rate limited on top of the general API limit.
#
# A todo that belongs to someone else is reported exactly like a missing
# one (404).
# =============================================================================

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, status

from app.auth import CurrentUser
from app.dependencies import MetricsDep, SinkDep, StoreDep
from app.rate_limit import TODO_CREATE, rate_limit
from core.services.todo_service import TodoService

logger = logging.getLogger(__name__)

router = APIRouter()

JsonBody = Annotated[Any, Body()]


def get_todo_service(
    user: CurrentUser,
    store: StoreDep,
    metrics: MetricsDep,
    sink: SinkDep,
) -> TodoService:
    """TodoService bound to the authenticated owner."""
    return TodoService(store, user.id, metrics, sink)


TodoServiceDep = Annotated[TodoService, Depends(get_todo_service)]


@router.get("")
def list_todos(todos: TodoServiceDep) -> dict:
    """List the current user's todos."""
    return {
        "success": True,
        "data": [t.model_dump(by_alias=True, mode="json") for t in todos.list()],
    }


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit(TODO_CREATE))],
)
def create_todo(todos: TodoServiceDep, payload: JsonBody = None) -> dict:
    """
    Create a todo.

    Raises:
        400: If the title is missing or not 1-100 characters after trimming
    """
    todo = todos.create(payload)
    return {
        "success": True,
        "message": "Todo created successfully",
        "data": todo.model_dump(by_alias=True, mode="json"),
    }


@router.get("/{todo_id}")
def get_todo(todo_id: str, todos: TodoServiceDep) -> dict:
    """
    Raises:
        404: If the todo doesn't exist or isn't yours
    """
    return {
        "success": True,
        "data": todos.get(todo_id).model_dump(by_alias=True, mode="json"),
    }


@router.put("/{todo_id}")
def update_todo(todo_id: str, todos: TodoServiceDep, payload: JsonBody = None) -> dict:
    """
    Update a todo's title and/or completed flag.

    Raises:
        400: If a sent field is invalid
        404: If the todo doesn't exist or isn't yours
    """
    todo = todos.update(todo_id, payload)
    return {
        "success": True,
        "message": "Todo updated successfully",
        "data": todo.model_dump(by_alias=True, mode="json"),
    }


@router.delete("/{todo_id}")
def delete_todo(todo_id: str, todos: TodoServiceDep) -> dict:
    """
    Raises:
        404: If the todo doesn't exist or isn't yours
    """
    todos.delete(todo_id)
    return {"success": True, "message": "Todo deleted successfully"}
