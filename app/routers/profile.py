# =============================================================================
# app/routers/profile.py - Profile Endpoints
# =============================================================================
# - GET    /api/profile/me           - Own profile (created on first access)
# - PUT    /api/profile/me           - Partial update, nested objects merged
# - DELETE /api/profile/me           - Delete own profile
# - GET    /api/profile/stats        - Todo statistics
# - PUT    /api/profile/avatar       - Set avatar URL
# - PUT    /api/profile/preferences  - Merge preferences
# - GET    /api/profile/{user_id}    - Another user's public profile
#
# The fixed paths are declared before /{user_id} so they aren't captured
# by it.
# =============================================================================

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends

from app.auth import CurrentUser
from app.dependencies import SinkDep, StoreDep
from core.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter()

JsonBody = Annotated[Any, Body()]


def get_profile_service(user: CurrentUser, store: StoreDep, sink: SinkDep) -> ProfileService:
    """ProfileService bound to the authenticated user."""
    return ProfileService(store, user.id, user.email, sink)


ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]


@router.get("/me")
def get_profile(profiles: ProfileServiceDep) -> dict:
    """Get the current user's profile, creating a default one if needed."""
    return {
        "success": True,
        "data": profiles.get_own().model_dump(by_alias=True, mode="json"),
    }


@router.put("/me")
def update_profile(profiles: ProfileServiceDep, payload: JsonBody = None) -> dict:
    """
    Update any subset of profile fields.

    Raises:
        400: If a field is invalid or unknown
    """
    profile = profiles.update_own(payload)
    return {
        "success": True,
        "message": "Profile updated successfully",
        "data": profile.model_dump(by_alias=True, mode="json"),
    }


@router.delete("/me")
def delete_profile(profiles: ProfileServiceDep) -> dict:
    """
    Raises:
        404: If there is no profile to delete
    """
    profiles.delete_own()
    return {"success": True, "message": "Profile deleted successfully"}


@router.get("/stats")
def get_stats(profiles: ProfileServiceDep) -> dict:
    """Todo totals, completion rate and activity for the current user."""
    return {
        "success": True,
        "data": profiles.get_stats().model_dump(by_alias=True, mode="json"),
    }


@router.put("/avatar")
def update_avatar(profiles: ProfileServiceDep, payload: JsonBody = None) -> dict:
    """
    Raises:
        400: If avatarUrl is missing or not a valid URL
    """
    return {
        "success": True,
        "message": "Avatar updated successfully",
        "data": profiles.update_avatar(payload),
    }


@router.put("/preferences")
def update_preferences(profiles: ProfileServiceDep, payload: JsonBody = None) -> dict:
    """
    Raises:
        400: If the preferences object is missing or invalid
    """
    preferences = profiles.update_preferences(payload)
    return {
        "success": True,
        "message": "Preferences updated successfully",
        "data": preferences.model_dump(by_alias=True, mode="json"),
    }


@router.get("/{user_id}")
def get_public_profile(user_id: str, profiles: ProfileServiceDep) -> dict:
    """
    Another user's profile, subject to their privacy settings.

    Raises:
        403: If the profile is private
        404: If the user has no profile
    """
    data = profiles.get_public(user_id).model_dump(by_alias=True, mode="json")
    if data.get("stats") is None:
        # Hidden unless the owner opted in with showStats
        data.pop("stats", None)
    return {"success": True, "data": data}
