# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - todos.py: Todo CRUD for the authenticated user
# - profile.py: Own profile, stats, avatar, preferences and public profiles
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import todos
from . import profile

__all__ = [
    "health",
    "todos",
    "profile",
]
