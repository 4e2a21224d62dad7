# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .token_service import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenError,
    TokenExpiredError,
    TokenService,
)
from .auth_service import AuthService
from .todo_service import TodoService
from .profile_service import ProfileService

__all__ = [
    "TokenService",
    "TokenError",
    "MalformedTokenError",
    "InvalidSignatureError",
    "TokenExpiredError",
    "AuthService",
    "TodoService",
    "ProfileService",
]
