# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for response models to ensure:
# - Stored rows map to the client representation (camelCase, owner)
# - Derived fields (fullName, completionRate) are computed correctly
# - The public profile view never exposes private fields
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

import pytest

from core.models import (
    Preferences,
    Privacy,
    ProfileResponse,
    ProfileVisibility,
    PublicProfileResponse,
    TodoResponse,
    UserPublic,
)
from core.models.profile import completion_rate, full_name


# =============================================================================
# User & Todo Models
# =============================================================================

class TestUserPublic:
    """Tests for UserPublic."""

    def test_password_hash_never_serialized(self):
        row = {
            "id": "u1",
            "email": "a@example.com",
            "password_hash": "secret-hash",
            "created_at": "2024-01-01T00:00:00+00:00",
        }

        data = UserPublic.model_validate(row).model_dump(by_alias=True, mode="json")

        assert set(data) == {"id", "email", "createdAt"}


class TestTodoResponse:
    """Tests for TodoResponse."""

    def test_from_row(self):
        row = {
            "id": "t1",
            "title": "Buy milk",
            "completed": False,
            "user_id": "u1",
            "created_at": "2024-01-01T00:00:00+00:00",
            "updated_at": "2024-01-01T00:00:00+00:00",
        }

        data = TodoResponse.from_row(row).model_dump(by_alias=True, mode="json")

        assert data["owner"] == "u1"
        assert data["title"] == "Buy milk"
        assert "createdAt" in data and "updatedAt" in data
        assert "user_id" not in data


# =============================================================================
# Profile Models
# =============================================================================

class TestDerivedValues:
    """Tests for fullName and completionRate."""

    def test_full_name_from_first_and_last(self):
        assert full_name("Ada", "Lovelace", "ada") == "Ada Lovelace"

    def test_full_name_falls_back_to_display(self):
        assert full_name("Ada", None, "ada") == "ada"

    def test_full_name_anonymous(self):
        assert full_name(None, None, None) == "Anonymous"

    @pytest.mark.parametrize(
        "total,completed,expected",
        [(0, 0, 0), (3, 1, 33), (8, 1, 13), (2, 1, 50), (4, 4, 100)],
    )
    def test_completion_rate(self, total, completed, expected):
        """Rounded percent, halves rounded up."""
        assert completion_rate(total, completed) == expected


class TestProfileResponse:
    """Tests for ProfileResponse."""

    def test_defaults_for_missing_nested_settings(self):
        profile = ProfileResponse.from_row({"user_id": "u1"})

        assert profile.preferences == Preferences()
        assert profile.privacy.profile_visibility == ProfileVisibility.PRIVATE
        assert profile.privacy.show_stats is False

    def test_camel_case_with_derived_fields(self):
        row = {
            "user_id": "u1",
            "first_name": "Ada",
            "last_name": "Lovelace",
            "stats": {"total_todos": 4, "completed_todos": 1},
        }

        data = ProfileResponse.from_row(row).model_dump(by_alias=True, mode="json")

        assert data["user"] == "u1"
        assert data["fullName"] == "Ada Lovelace"
        assert data["completionRate"] == 25
        assert data["stats"]["totalTodos"] == 4
        assert data["preferences"]["emailNotifications"] is True


class TestPublicProfileResponse:
    """Tests for the public profile view."""

    def _profile(self, show_stats: bool) -> ProfileResponse:
        return ProfileResponse.from_row({
            "user_id": "u1",
            "display_name": "ada",
            "phone": "+1 555 123 4567",
            "privacy": Privacy(
                profile_visibility=ProfileVisibility.PUBLIC, show_stats=show_stats
            ).model_dump(),
            "stats": {"total_todos": 2},
        })

    def test_private_fields_excluded(self):
        data = PublicProfileResponse.from_profile(self._profile(False)).model_dump(by_alias=True)

        for hidden in ("privacy", "account", "phone", "email", "preferences"):
            assert hidden not in data
        assert data["displayName"] == "ada"
        assert data["fullName"] == "ada"

    def test_stats_hidden_unless_opted_in(self):
        hidden = PublicProfileResponse.from_profile(self._profile(False))
        shown = PublicProfileResponse.from_profile(self._profile(True))

        assert hidden.stats is None
        assert shown.stats is not None and shown.stats.total_todos == 2
