# =============================================================================
# core/validation.py - Request Validation
# =============================================================================
# One pure function per endpoint shape. Each takes the raw JSON payload and
# returns a validated, normalized model, or raises ValidationFailedError with
# every {field, message} violation at once.
#
# The returned models remember which fields were actually sent, so
# model_dump(exclude_unset=True) gives exactly the partial update to apply.
#
# Usage:
#   data = validate_todo_create({"title": " Buy milk "})
#   data.title  # "Buy milk"
# =============================================================================

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from app.exceptions import ValidationFailedError, format_pydantic_errors
from core.models import (
    AvatarUpdate,
    LoginRequest,
    PreferencesRequest,
    ProfileUpdate,
    RegisterRequest,
    TodoCreate,
    TodoUpdate,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _validate(model: type[ModelT], payload: Any) -> ModelT:
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationFailedError(
            [{"field": "body", "message": "Request body must be a JSON object"}]
        )
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise ValidationFailedError(format_pydantic_errors(e.errors())) from e


def validate_registration(payload: Any) -> RegisterRequest:
    """Email must be valid (lower-cased); password >= 6 chars with a-z, A-Z and 0-9."""
    return _validate(RegisterRequest, payload)


def validate_login(payload: Any) -> LoginRequest:
    return _validate(LoginRequest, payload)


def validate_todo_create(payload: Any) -> TodoCreate:
    """Title is required and must trim to 1..100 characters."""
    return _validate(TodoCreate, payload)


def validate_todo_update(payload: Any) -> TodoUpdate:
    """Title (if sent) follows the create rule; completed (if sent) must be a boolean."""
    return _validate(TodoUpdate, payload)


def validate_profile_update(payload: Any) -> ProfileUpdate:
    return _validate(ProfileUpdate, payload)


def validate_preferences(payload: Any) -> PreferencesRequest:
    return _validate(PreferencesRequest, payload)


def validate_avatar(payload: Any) -> AvatarUpdate:
    return _validate(AvatarUpdate, payload)
