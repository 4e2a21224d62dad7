# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Bearer token authentication backed by the TokenService.
#
# Usage:
#   from app.auth import CurrentUser
#
#   @router.get("/protected")
#   def protected(user: CurrentUser):
#       return {"user_id": user.id}
# =============================================================================

from app.auth.dependencies import CurrentUser, get_current_user
from app.auth.models import AuthUser

__all__ = [
    "CurrentUser",
    "get_current_user",
    "AuthUser",
]
