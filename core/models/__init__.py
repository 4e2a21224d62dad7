# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - user.py: Registration/login input and the public user view
# - todo.py: Todo create/update input and response
# - profile.py: Profile settings, partial update inputs and responses
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# User Models - Credentials and identity
# -----------------------------------------------------------------------------
from .user import (
    LoginRequest,
    RegisterRequest,
    UserPublic,
)

# -----------------------------------------------------------------------------
# Todo Models - Owned to-do items
# -----------------------------------------------------------------------------
from .todo import (
    TodoCreate,
    TodoResponse,
    TodoUpdate,
)

# -----------------------------------------------------------------------------
# Profile Models - One profile per user
# -----------------------------------------------------------------------------
from .profile import (
    Account,
    AvatarUpdate,
    Preferences,
    PreferencesRequest,
    PreferencesUpdate,
    Privacy,
    PrivacyUpdate,
    ProfileResponse,
    ProfileUpdate,
    ProfileVisibility,
    PublicProfileResponse,
    SocialLinks,
    SocialLinksUpdate,
    Stats,
    StatsSummary,
)

__all__ = [
    # User
    "LoginRequest",
    "RegisterRequest",
    "UserPublic",
    # Todo
    "TodoCreate",
    "TodoResponse",
    "TodoUpdate",
    # Profile
    "Account",
    "AvatarUpdate",
    "Preferences",
    "PreferencesRequest",
    "PreferencesUpdate",
    "Privacy",
    "PrivacyUpdate",
    "ProfileResponse",
    "ProfileUpdate",
    "ProfileVisibility",
    "PublicProfileResponse",
    "SocialLinks",
    "SocialLinksUpdate",
    "Stats",
    "StatsSummary",
]
