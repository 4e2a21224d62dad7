# =============================================================================
# core/services/profile_service.py - Profile Business Logic
# =============================================================================
# Handles the one-to-one user profile: lazy creation, partial updates with
# nested merges, todo statistics, and the privacy-filtered public view.
#
# Profile lifecycle: Absent -> Default (created on first access) -> Customized
# =============================================================================

import logging
from typing import Any

from app.exceptions import ForbiddenError, NotFoundError
from core.models import (
    Account,
    Preferences,
    Privacy,
    ProfileResponse,
    ProfileVisibility,
    PublicProfileResponse,
    SocialLinks,
    Stats,
    StatsSummary,
)
from core.models.profile import completion_rate
from core.repositories import ProfileRepository, ScopedRepository
from core.services.todo_service import TodoService
from core.validation import validate_avatar, validate_preferences, validate_profile_update
from lib.observability import ObservabilitySink
from lib.store import DocumentStore, Row
from lib.utils import parse_uuid, utc_now_iso

logger = logging.getLogger(__name__)

# Nested settings merged key by key on update
MERGED_FIELDS = ("preferences", "social_links", "privacy")
# Nested settings where null means "leave as is" rather than "clear"
NON_NULLABLE_FIELDS = ("preferences", "privacy")


def default_profile(email: str | None) -> dict[str, Any]:
    """The stored shape of a freshly created profile."""
    now = utc_now_iso()
    return {
        "display_name": email.split("@")[0] if email else None,
        "preferences": Preferences().model_dump(mode="json"),
        "stats": Stats(last_active=now).model_dump(mode="json"),
        "social_links": SocialLinks().model_dump(mode="json"),
        "privacy": Privacy().model_dump(mode="json"),
        "account": Account(account_created=now).model_dump(mode="json"),
    }


class ProfileService:
    """
    Profile operations for one authenticated user.

    Args:
        store: Backing document store
        owner_id: The authenticated user's id
        email: The authenticated user's email (seeds the display name)
        sink: Observability sink (best-effort)
    """

    def __init__(
        self,
        store: DocumentStore,
        owner_id: str,
        email: str | None,
        sink: ObservabilitySink,
    ):
        self.store = store
        self.owner_id = str(owner_id)
        self.email = email
        self.profiles = ProfileRepository(store, owner_id)
        self.sink = sink

    def _get_or_create(self) -> Row:
        row = self.profiles.get()
        if row is None:
            row = self.profiles.create(default_profile(self.email))
            logger.info(f"Created default profile for user {self.owner_id}")
        return row

    def _save(self, changes: dict[str, Any]) -> Row:
        row = self.profiles.update(changes)
        if row is None:
            # Deleted between the lookup and the write
            raise NotFoundError("Profile")
        return row

    # -------------------------------------------------------------------------
    # Own profile
    # -------------------------------------------------------------------------

    def get_own(self) -> ProfileResponse:
        """Return the caller's profile, creating it on first access."""
        row = self._get_or_create()
        stats = {**(row.get("stats") or {}), "last_active": utc_now_iso()}
        row = self._save({"stats": stats})
        self.sink.add_breadcrumb("profile", "User profile retrieved")
        return ProfileResponse.from_row(row)

    def update_own(self, payload: Any) -> ProfileResponse:
        """
        Apply a partial update to the caller's profile.

        Only fields present in the payload change. Preferences, social links
        and privacy are merged into the stored values key by key.

        Raises:
            ValidationFailedError: If any field is invalid (nothing is changed)
        """
        data = validate_profile_update(payload).model_dump(mode="json", exclude_unset=True)
        row = self._get_or_create()

        changes: dict[str, Any] = {}
        for field, value in data.items():
            if field in MERGED_FIELDS:
                if value is None:
                    continue
                if field in NON_NULLABLE_FIELDS:
                    value = {k: v for k, v in value.items() if v is not None}
                changes[field] = {**(row.get(field) or {}), **value}
            else:
                changes[field] = value

        merged = {**row, **changes}
        if not merged.get("display_name") and (merged.get("first_name") or merged.get("last_name")):
            changes["display_name"] = " ".join(
                part for part in (merged.get("first_name"), merged.get("last_name")) if part
            )

        row = self._save(changes)
        self.sink.add_breadcrumb("profile", "User profile updated", data={"fields": sorted(data)})
        return ProfileResponse.from_row(row)

    def get_stats(self) -> StatsSummary:
        """
        Aggregate the caller's todos and record the totals on the profile.

        A caller without a profile still gets statistics; nothing is stored.
        """
        todos = ScopedRepository(self.store, TodoService.table, self.owner_id).list()
        total = len(todos)
        completed = sum(1 for todo in todos if todo.get("completed"))

        row = self.profiles.get()
        streak_days = 0
        last_active = utc_now_iso()
        if row is not None:
            stats = {
                **(row.get("stats") or {}),
                "total_todos": total,
                "completed_todos": completed,
                "last_active": last_active,
            }
            row = self._save({"stats": stats})
            streak_days = stats.get("streak_days", 0)

        self.sink.add_breadcrumb("stats", "User statistics retrieved")
        return StatsSummary(
            total_todos=total,
            completed_todos=completed,
            pending_todos=total - completed,
            completion_rate=completion_rate(total, completed),
            streak_days=streak_days,
            last_active=last_active,
        )

    def update_avatar(self, payload: Any) -> dict[str, str]:
        """
        Raises:
            ValidationFailedError: If avatarUrl is missing or not a URL
        """
        data = validate_avatar(payload)
        self._get_or_create()
        self._save({"avatar": data.avatar_url})
        self.sink.add_breadcrumb("profile", "User avatar updated")
        return {"avatar": data.avatar_url}

    def update_preferences(self, payload: Any) -> Preferences:
        """
        Merge new preferences into the stored ones and return the result.

        Raises:
            ValidationFailedError: If preferences is missing or has invalid values
        """
        data = validate_preferences(payload).model_dump(mode="json", exclude_unset=True)
        changes = {k: v for k, v in data["preferences"].items() if v is not None}
        row = self._get_or_create()
        preferences = {**(row.get("preferences") or {}), **changes}
        row = self._save({"preferences": preferences})
        self.sink.add_breadcrumb("preferences", "User preferences updated")
        return Preferences(**row["preferences"])

    def delete_own(self) -> None:
        """
        Raises:
            NotFoundError: If the caller has no profile
        """
        if self.profiles.delete() is None:
            raise NotFoundError("Profile")
        self.sink.add_breadcrumb("profile", "User profile deleted", level="warning")
        logger.info(f"Deleted profile for user {self.owner_id}")

    # -------------------------------------------------------------------------
    # Other users
    # -------------------------------------------------------------------------

    def get_public(self, user_id: str) -> PublicProfileResponse:
        """
        Another user's profile as permitted by its privacy settings.

        The owner can always read their own. Anyone else needs the profile to
        be public. "friends" is deliberately refused like "private" rather
        than let through: no friendship model exists to decide who qualifies.

        Raises:
            NotFoundError: If the user has no profile
            ForbiddenError: If the profile isn't visible to the caller
        """
        row = ProfileRepository.find_by_owner(self.store, user_id)
        if row is None:
            raise NotFoundError("Profile")

        profile = ProfileResponse.from_row(row)
        is_owner = parse_uuid(user_id) == self.owner_id
        if not is_owner and profile.privacy.profile_visibility != ProfileVisibility.PUBLIC:
            raise ForbiddenError()

        return PublicProfileResponse.from_profile(profile)
