# =============================================================================
# core/models/todo.py - Todo Schemas
# =============================================================================
# These models define the API contract for todo operations:
# - TodoCreate: Input for POST /api/todos
# - TodoUpdate: Partial input for PUT /api/todos/{id}
# - TodoResponse: A todo as returned to clients
#
# A todo moves between Active (completed=false) and Completed
# (completed=true) only through an explicit owner update.
# =============================================================================

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

TITLE_MAX_LENGTH = 100
TITLE_LENGTH_MESSAGE = f"Title must be between 1 and {TITLE_MAX_LENGTH} characters"


def _clean_title(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("Title must be a string")
    title = value.strip()
    if not 1 <= len(title) <= TITLE_MAX_LENGTH:
        raise ValueError(TITLE_LENGTH_MESSAGE)
    return title


def _check_completed(value: Any) -> bool:
    # Strings like "true" are rejected, not coerced
    if not isinstance(value, bool):
        raise ValueError("Completed must be a boolean value")
    return value


class TodoCreate(BaseModel):
    """
    Schema for creating a todo.

    Example:
        {"title": " Buy milk "}  ->  title == "Buy milk"
    """

    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., description="What needs doing (trimmed, 1-100 chars)")

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value):
        return _clean_title(value)


class TodoUpdate(BaseModel):
    """
    Schema for a partial todo update.

    Omitted fields are left alone; use model_dump(exclude_unset=True) to get
    only what the client sent. An explicit null is rejected.
    """

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    completed: bool | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value):
        return _clean_title(value)

    @field_validator("completed", mode="before")
    @classmethod
    def _completed(cls, value):
        return _check_completed(value)


class TodoResponse(BaseModel):
    """Schema for returning a todo to clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    completed: bool = False
    owner: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "TodoResponse":
        return cls(
            id=row["id"],
            title=row["title"],
            completed=bool(row.get("completed", False)),
            owner=row["user_id"],
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
